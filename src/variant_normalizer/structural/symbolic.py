"""Normalization of symbolic alternate alleles.

Covers angle-bracket tokens (``<DEL>``, ``<INS>``, ``<DUP>``, ``<CNn>``,
``<CNV>``, ``<INV>``, ``<NON_REF>``/``<*>``) and delegates bracket breakends to
:mod:`.breakend`. Structural fields are read from the record attributes:

- CIPOS / CIEND: "left,right" offsets around the original start / end
- CN: copy number for ``<CNV>``
- SVINSSEQ, LEFT_SVINSSEQ, RIGHT_SVINSSEQ: inserted sequence of ``<INS>``

Unparsable attribute values are ignored.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace

from ..models import (
    NON_REF_ALLELE,
    Breakend,
    StructuralVariantInfo,
    StructuralVariantType,
    VariantKeyFields,
    copy_number_from_allele,
    is_non_ref_allele,
)
from ..utils.contigs import ContigNamingConvention
from .breakend import is_breakend, normalize_breakend

logger = logging.getLogger(__name__)

CNV_ALLELE = "<CNV>"
INS_ALLELE = "<INS>"
TANDEM_DUP_ALLELE = "<DUP:TANDEM>"


def parse_confidence_interval(value: str | None, anchor: int) -> tuple[int | None, int | None]:
    """Turn a "left,right" offset pair into absolute positions around anchor."""
    if value is None:
        return None, None
    parts = str(value).split(",")
    if len(parts) != 2:
        logger.debug("Ignoring confidence interval '%s': expected two values", value)
        return None, None
    try:
        left, right = int(parts[0]), int(parts[1])
    except ValueError:
        logger.debug("Ignoring non-numeric confidence interval '%s'", value)
        return None, None
    return anchor + left, anchor + right


def parse_copy_number(value: str | None) -> int | None:
    if value is None or value in ("", "."):
        return None
    try:
        return int(value)
    except ValueError:
        logger.debug("Ignoring non-numeric copy number '%s'", value)
        return None


def copy_number_type(copy_number: int | None, reference_ploidy: int = 2) -> StructuralVariantType | None:
    """Gain/loss relative to the reference ploidy, None when equal or unknown."""
    if copy_number is None:
        return None
    if copy_number > reference_ploidy:
        return StructuralVariantType.COPY_NUMBER_GAIN
    if copy_number < reference_ploidy:
        return StructuralVariantType.COPY_NUMBER_LOSS
    return None


def shared_copy_number(values: Iterable[str]) -> int | None:
    """The copy number every sample agrees on, or None."""
    numbers = {parse_copy_number(v) for v in values}
    numbers.discard(None)
    if len(numbers) == 1:
        return numbers.pop()
    return None


def confidence_intervals(start: int, end: int, attributes: Mapping[str, str]) -> StructuralVariantInfo:
    ci_start_left, ci_start_right = parse_confidence_interval(attributes.get("CIPOS"), start)
    ci_end_left, ci_end_right = parse_confidence_interval(attributes.get("CIEND"), end)
    return StructuralVariantInfo(
        ci_start_left=ci_start_left,
        ci_start_right=ci_start_right,
        ci_end_left=ci_end_left,
        ci_end_right=ci_end_right,
    )


def normalize_symbolic(
    chromosome: str,
    start: int,
    end: int,
    reference: str,
    alternate: str,
    allele_index: int = 0,
    attributes: Mapping[str, str] | None = None,
    sample_copy_numbers: Iterable[str] = (),
    reference_ploidy: int = 2,
    copy_number_field: str = "CN",
    convention: ContigNamingConvention | None = None,
) -> VariantKeyFields:
    """
    Compute canonical coordinates, alternate and structural fields for a
    symbolic allele.

    Args:
        chromosome: Record chromosome
        start: 1-based record start
        end: 1-based record end
        reference: Reference allele (usually one placeholder base)
        alternate: Symbolic alternate allele
        allele_index: Index of the alternate in its record
        attributes: Record attributes (INFO-like)
        sample_copy_numbers: Per-sample copy-number values, used for <CNV>
        reference_ploidy: Copy-number baseline for gain/loss
        copy_number_field: Attribute / sample field holding copy numbers
        convention: Mate contig naming convention for breakends

    Returns:
        VariantKeyFields with structural info attached

    Raises:
        BreakendParseError: If a bracket alternate cannot be parsed
    """
    attributes = attributes or {}

    if is_non_ref_allele(alternate):
        return VariantKeyFields(start, end, allele_index, reference, NON_REF_ALLELE)

    # CIPOS is relative to POS, the base before an anchor-free allele
    structural = confidence_intervals(start if reference else start - 1, end, attributes)

    if is_breakend(alternate):
        return normalize_breakend(
            chromosome, start, end, reference, alternate,
            allele_index=allele_index, convention=convention, structural=structural,
        )

    if not alternate.startswith("<"):
        # single breakend, "A." or ".A"
        return VariantKeyFields(
            start, end, allele_index, reference, alternate,
            structural=replace(
                structural,
                breakend=Breakend(mate_chromosome=None, mate_position=None, orientation=None),
            ),
        )

    new_start, new_reference = start, reference
    if len(reference) == 1:
        new_start, new_reference = start + 1, ""

    copy_number = copy_number_from_allele(alternate)
    structural_type = None
    if alternate == CNV_ALLELE:
        copy_number = parse_copy_number(attributes.get(copy_number_field))
        if copy_number is None:
            copy_number = shared_copy_number(sample_copy_numbers)
        if copy_number is not None:
            alternate = f"<CN{copy_number}>"
    if copy_number is not None:
        structural_type = copy_number_type(copy_number, reference_ploidy)
    elif alternate == TANDEM_DUP_ALLELE:
        structural_type = StructuralVariantType.TANDEM_DUPLICATION

    left_seq = right_seq = None
    if alternate == INS_ALLELE:
        sequence = attributes.get("SVINSSEQ")
        if sequence and sequence != ".":
            alternate = sequence.upper()
        else:
            left_seq = attributes.get("LEFT_SVINSSEQ") or None
            right_seq = attributes.get("RIGHT_SVINSSEQ") or None

    return VariantKeyFields(
        start=new_start,
        end=end,
        allele_index=allele_index,
        reference=new_reference,
        alternate=alternate,
        structural=replace(
            structural,
            copy_number=copy_number,
            left_inserted_sequence=left_seq,
            right_inserted_sequence=right_seq,
            structural_type=structural_type,
        ),
    )
