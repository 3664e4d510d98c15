"""Multi-allelic record splitting.

Every alternate of a record is trimmed (or, for symbolic alleles, normalized)
against the shared reference on its own, giving one fragment per alternate in
the order the alternates were listed. Each fragment keeps the other alternates
as secondary alternates so the original call can be rebuilt downstream.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .genotypes.rewriter import AlleleMap
from .models import (
    NO_VARIATION_ALLELE,
    AlternateCoordinate,
    VariantKeyFields,
    infer_variant_type,
    is_non_ref_allele,
    is_symbolic_allele,
)
from .trimming import create_key_fields

SymbolicNormalizer = Callable[[str, int], VariantKeyFields]


@dataclass(frozen=True)
class SecondaryAllele:
    """An allele of the original record as seen from a split fragment."""

    allele_index: int
    coordinate: AlternateCoordinate


def allele_key_fields(
    start: int,
    end: int,
    reference: str,
    alternates: Sequence[str],
    symbolic: SymbolicNormalizer | None = None,
) -> list[VariantKeyFields | None]:
    """
    Trim every alternate against the reference.

    Args:
        start: 1-based record start
        end: 1-based record end
        reference: Reference allele
        alternates: Alternate alleles, in record order
        symbolic: Normalizer for symbolic alleles, called with (alternate, index)

    Returns:
        One entry per alternate, None where the alternate equals the reference
    """
    key_fields = []
    for index, alternate in enumerate(alternates):
        if alternate == NO_VARIATION_ALLELE:
            key_fields.append(None)
        elif is_symbolic_allele(alternate):
            if symbolic is None:
                key_fields.append(VariantKeyFields(start, end, index, reference, alternate))
            else:
                key_fields.append(symbolic(alternate, index))
        else:
            key_fields.append(create_key_fields(start, reference, alternate, index))
    return key_fields


def split_alleles(
    start: int,
    end: int,
    reference: str,
    alternates: Sequence[str],
    symbolic: SymbolicNormalizer | None = None,
) -> list[VariantKeyFields]:
    """
    Split a record into one bi-allelic fragment per distinct alternate.

    Returns:
        Fragments in alternate order
    """
    key_fields = allele_key_fields(start, end, reference, alternates, symbolic)
    return select_fragments(key_fields, alternates)


def select_fragments(
    all_key_fields: Sequence[VariantKeyFields | None],
    alternates: Sequence[str],
) -> list[VariantKeyFields]:
    """
    Pick the fragments to emit from the key fields of every alternate.

    Placeholder alleles (<*>, <NON_REF>) are only emitted when they are the
    record's sole alternates. Alternates identical to an earlier one after
    trimming are emitted once, at the lowest index.
    """
    placeholders_only = all(is_non_ref_allele(a) for a in alternates)

    fragments: list[VariantKeyFields] = []
    for key_fields in all_key_fields:
        if key_fields is None:
            continue
        if is_non_ref_allele(key_fields.alternate) and not placeholders_only:
            continue
        if any(f.same_locus(key_fields) for f in fragments):
            continue
        fragments.append(key_fields)
    return fragments


def duplicate_indices(fragment: VariantKeyFields, all_key_fields: Sequence[VariantKeyFields | None]) -> list[int]:
    """Original allele indices (1-based) whose alternate trims to fragment."""
    return [
        i + 1 for i, key_fields in enumerate(all_key_fields)
        if key_fields is not None and key_fields.same_locus(fragment)
    ]


def secondary_alleles(
    chromosome: str,
    start: int,
    end: int,
    reference: str,
    alternates: Sequence[str],
    fragment: VariantKeyFields,
    all_key_fields: Sequence[VariantKeyFields | None],
) -> list[SecondaryAllele]:
    """
    The alternates a fragment keeps as context, in original order.

    Alternates equal to the reference have no trimmed form and are kept with
    the record's own coordinates.
    """
    primary = set(duplicate_indices(fragment, all_key_fields))
    secondary = []
    for i, key_fields in enumerate(all_key_fields):
        allele_index = i + 1
        if allele_index in primary:
            continue
        if key_fields is None:
            coordinate = AlternateCoordinate(
                chromosome, start, end, reference, alternates[i],
                infer_variant_type(reference, alternates[i]),
            )
        else:
            coordinate = AlternateCoordinate(
                chromosome, key_fields.start, key_fields.end,
                key_fields.reference, key_fields.alternate,
                infer_variant_type(key_fields.reference, key_fields.alternate),
            )
        secondary.append(SecondaryAllele(allele_index, coordinate))
    return secondary


def fragment_allele_map(
    fragment: VariantKeyFields,
    all_key_fields: Sequence[VariantKeyFields | None],
    secondary: Sequence[SecondaryAllele],
    extra_alleles: int = 0,
) -> AlleleMap:
    """
    Allele map of one fragment.

    Args:
        fragment: The split fragment
        all_key_fields: Key fields of every original alternate
        secondary: Secondary alleles of the fragment
        extra_alleles: Secondary alternates the input record already carried;
            they follow its own alternates in the allele index space

    Returns:
        AlleleMap from the original allele space into the fragment's
    """
    primary = duplicate_indices(fragment, all_key_fields) or [fragment.allele_index + 1]
    own = len(all_key_fields) + 1
    carried = list(range(own, own + extra_alleles))
    return AlleleMap.for_split(
        own + extra_alleles,
        primary,
        [s.allele_index for s in secondary] + carried,
    )
