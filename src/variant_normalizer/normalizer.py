"""Variant normalization pipeline.

A record goes through these stages:

1. Optional left alignment against a reference genome
2. Trimming of every alternate, symbolic alleles normalized on their own
3. Splitting into one record per distinct alternate
4. Optional MNV decomposition into phased minimal fragments
5. Sample data rewritten into each fragment's allele space
6. Optional reference blocks over the positions no fragment claims

Output records are ordered by start; fragments come before reference blocks
at the same position.
"""

import copy
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .config import NormalizerConfig
from .errors import NormalizationError
from .genotypes import reference_sample_data, rewrite_sample_data
from .mnv import decompose_mnv, phase_set_key
from .models import (
    NO_VARIATION_ALLELE,
    StudyEntry,
    Variant,
    VariantKeyFields,
    VariantType,
    is_non_ref_allele,
    is_symbolic_allele,
)
from .reference_blocks import generate_reference_blocks
from .splitter import allele_key_fields, fragment_allele_map, secondary_alleles, select_fragments
from .structural import normalize_symbolic
from .trimming import ReferenceGenome, left_align_alleles
from .utils.contigs import ContigNamingConvention, PrefixMatchingConvention

logger = logging.getLogger(__name__)

PHASE_SET_FIELD = "PS"


@dataclass
class NormalizationFailure:
    """A record that could not be normalized."""

    variant_id: str
    error: NormalizationError


@dataclass
class NormalizationResult:
    """Output of normalizing a batch of records."""

    variants: list[Variant] = field(default_factory=list)
    failures: list[NormalizationFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)


class VariantNormalizer:
    """Turns variant records into their canonical, bi-allelic form.

    A normalizer is configured once and holds no per-record state, so the
    same instance can be reused across records and threads.
    """

    def __init__(
        self,
        config: NormalizerConfig | None = None,
        reference_genome: ReferenceGenome | None = None,
        contig_convention: ContigNamingConvention | None = None,
    ):
        self.config = config or NormalizerConfig()
        self.reference_genome = reference_genome
        self.contig_convention = contig_convention or PrefixMatchingConvention(
            self.config.contig_aliases
        )

    def normalize_batch(self, variants: Iterable[Variant]) -> NormalizationResult:
        """
        Normalize records in order.

        A record that fails is logged and reported in the result; the
        remaining records are still normalized.
        """
        result = NormalizationResult()
        for variant in variants:
            try:
                result.variants.extend(self.normalize(variant))
            except NormalizationError as e:
                logger.warning("Skipping %s: %s", variant.variant_id, e)
                result.failures.append(NormalizationFailure(variant.variant_id, e))
        return result

    def normalize(self, variant: Variant) -> list[Variant]:
        """
        Normalize one record.

        The input is left untouched; every returned record is new.

        Returns:
            Normalized records ordered by start

        Raises:
            NormalizationError: If sample data or a breakend is malformed
        """
        if not variant.alternates or all(a == NO_VARIATION_ALLELE for a in variant.alternates):
            return [copy.deepcopy(variant)]

        chromosome = variant.chromosome
        start, end = variant.start, variant.end
        reference, alternates = variant.reference, list(variant.alternates)

        if self.reference_genome is not None and _is_sequence_record(reference, alternates):
            start, reference, alternates = left_align_alleles(
                chromosome, start, reference, alternates, self.reference_genome
            )
            end = start + len(reference) - 1

        attributes = _merged_attributes(variant)
        copy_numbers = _sample_values(variant, self.config.copy_number_field)

        def symbolic(alternate: str, index: int) -> VariantKeyFields:
            return normalize_symbolic(
                chromosome, start, end, reference, alternate,
                allele_index=index,
                attributes=attributes,
                sample_copy_numbers=copy_numbers,
                reference_ploidy=self.config.reference_ploidy,
                copy_number_field=self.config.copy_number_field,
                convention=self.contig_convention,
            )

        all_key_fields = allele_key_fields(start, end, reference, alternates, symbolic)
        fragments = select_fragments(all_key_fields, alternates)
        if not fragments:
            logger.debug("No alternate of %s differs from the reference", variant.variant_id)
            return [copy.deepcopy(variant)]

        parents = {fragment: fragment for fragment in fragments}
        real_alternates = [a for a in alternates if not is_non_ref_allele(a)]
        if (
            self.config.decompose_mnvs
            and len(fragments) == 1
            and len(real_alternates) == 1
            and not is_symbolic_allele(fragments[0].alternate)
        ):
            phase_set = phase_set_key(
                chromosome, variant.start, variant.reference,
                variant.alternates[fragments[0].allele_index],
            )
            pieces = decompose_mnv(fragments[0], phase_set)
            parents = {piece: fragments[0] for piece in pieces}
            fragments = pieces

        blocks = []
        if self.config.generate_reference_blocks and reference and not any(
            is_symbolic_allele(a) and not is_non_ref_allele(a) for a in alternates
        ):
            blocks = generate_reference_blocks(start, end, reference, fragments)

        changed = (
            len(variant.alternates) > 1
            or len(fragments) != 1
            or bool(blocks)
            or not _unchanged(variant, fragments[0])
        )

        output = [
            self._fragment_variant(
                variant, fragment, parents[fragment], all_key_fields,
                start, end, reference, alternates, changed,
            )
            for fragment in fragments
        ]
        output.extend(self._block_variant(variant, block) for block in blocks)
        output.sort(key=lambda v: v.start)

        if changed:
            logger.debug("Normalized %s into %d records", variant.variant_id, len(output))
        return output

    def _fragment_variant(
        self,
        variant: Variant,
        fragment: VariantKeyFields,
        parent: VariantKeyFields,
        all_key_fields: list[VariantKeyFields | None],
        start: int,
        end: int,
        reference: str,
        alternates: list[str],
        changed: bool,
    ) -> Variant:
        secondary = secondary_alleles(
            variant.chromosome, start, end, reference, alternates, parent, all_key_fields
        )
        studies = []
        for study in variant.studies:
            allele_map = fragment_allele_map(
                parent, all_key_fields, secondary, len(study.secondary_alternates)
            )
            samples = rewrite_sample_data(
                study.format,
                study.samples,
                allele_map,
                genotype_array_fields=self.config.genotype_array_fields,
                allele_array_fields=self.config.allele_array_fields,
                normalize_alleles=self.config.normalize_alleles,
                alleles=[variant.reference, *variant.alternates],
            )
            format_fields = list(study.format)
            if fragment.phase_set is not None:
                format_fields, samples = _with_phase_set(format_fields, samples, fragment.phase_set)

            call = study.call
            if changed:
                call = _original_call(variant, fragment.allele_index)

            studies.append(StudyEntry(
                study_id=study.study_id,
                format=format_fields,
                samples=samples,
                secondary_alternates=[s.coordinate for s in secondary] + list(study.secondary_alternates),
                file_attributes=dict(study.file_attributes),
                call=call,
            ))

        return Variant(
            chromosome=variant.chromosome,
            start=fragment.start,
            end=fragment.end,
            reference=fragment.reference,
            alternates=[fragment.alternate],
            structural=fragment.structural,
            studies=studies,
        )

    def _block_variant(self, variant: Variant, block: VariantKeyFields) -> Variant:
        studies = []
        for study in variant.studies:
            allele_count = 1 + len(variant.alternates) + len(study.secondary_alternates)
            studies.append(StudyEntry(
                study_id=study.study_id,
                format=list(study.format),
                samples=reference_sample_data(
                    study.format, study.samples, allele_count,
                    alleles=[variant.reference, *variant.alternates],
                ),
                file_attributes=dict(study.file_attributes),
            ))

        return Variant(
            chromosome=variant.chromosome,
            start=block.start,
            end=block.end,
            reference=block.reference,
            alternates=[NO_VARIATION_ALLELE],
            type=VariantType.NO_VARIATION,
            studies=studies,
        )


def _is_sequence_record(reference: str, alternates: list[str]) -> bool:
    return bool(reference) and all(
        a and a != NO_VARIATION_ALLELE and not is_symbolic_allele(a) for a in alternates
    )


def _unchanged(variant: Variant, fragment: VariantKeyFields) -> bool:
    return (
        fragment.start == variant.start
        and fragment.end == variant.end
        and fragment.reference == variant.reference
        and fragment.alternate == variant.alternate
    )


def _original_call(variant: Variant, allele_index: int) -> str:
    return f"{variant.start}:{variant.reference}:{','.join(variant.alternates)}:{allele_index}"


def _merged_attributes(variant: Variant) -> dict[str, str]:
    attributes: dict[str, str] = {}
    for study in variant.studies:
        attributes.update(study.file_attributes)
    return attributes


def _sample_values(variant: Variant, field_name: str) -> list[str]:
    values = []
    for study in variant.studies:
        for sample_id in study.samples:
            value = study.sample_value(sample_id, field_name)
            if value is not None:
                values.append(value)
    return values


def _with_phase_set(
    format_fields: list[str],
    samples: dict[str, list[str]],
    phase_set: str,
) -> tuple[list[str], dict[str, list[str]]]:
    if PHASE_SET_FIELD not in format_fields:
        format_fields = format_fields + [PHASE_SET_FIELD]
    idx = format_fields.index(PHASE_SET_FIELD)

    with_ps = {}
    for sample_id, values in samples.items():
        values = values + ["."] * (idx + 1 - len(values))
        values[idx] = phase_set
        with_ps[sample_id] = values
    return format_fields, with_ps
