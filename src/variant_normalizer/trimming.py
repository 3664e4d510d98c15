"""Allele trimming and reference-backed left alignment.

Trimming strips the context shared by a reference/alternate pair: the common
suffix first, then the common prefix of what remains. Removing the suffix first
means any indel inside a repeat ends up at its leftmost position within the
given alleles. Indels keep no anchor base: ``C -> CA`` at 100 becomes
``"" -> "A"`` at start 101, end 100.

Left alignment beyond the given alleles needs the surrounding sequence and
follows the vt algorithm (Tan et al., 2015).
"""

from typing import Protocol

from .models import VariantKeyFields


class ReferenceGenome(Protocol):
    """Protocol for reference genome access."""
    def fetch(self, chrom: str, start: int, end: int) -> str:
        """Fetch reference sequence for a region (0-based coordinates)."""
        ...


def reverse_index_of_difference(first: str | None, second: str | None) -> int:
    """
    Count the bases shared at the end of two strings.

    Returns -1 when both strings are equal (or both None), 0 when only one
    of them is None, otherwise the number of trailing bases that match. When
    one string is a suffix of the other this is the length of the shorter one.
    """
    if first == second:
        return -1
    if first is None or second is None:
        return 0

    shorter = min(len(first), len(second))
    i = 0
    while i < shorter and first[-1 - i] == second[-1 - i]:
        i += 1
    return i


def index_of_difference(first: str | None, second: str | None) -> int:
    """Index of the first differing base, -1 when the strings are equal."""
    if first == second:
        return -1
    if first is None or second is None:
        return 0

    shorter = min(len(first), len(second))
    i = 0
    while i < shorter and first[i] == second[i]:
        i += 1
    return i


def trim_alleles(reference: str, alternate: str) -> tuple[int, int, str, str] | None:
    """
    Compute the minimal representation of a reference/alternate pair.

    Args:
        reference: Reference allele
        alternate: Alternative allele

    Returns:
        Tuple of (prefix_length, suffix_length, trimmed_ref, trimmed_alt), or
        None when the alleles are identical
    """
    if not reference or not alternate:
        if reference == alternate:
            return None
        return 0, 0, reference, alternate

    suffix = reverse_index_of_difference(reference, alternate)
    if suffix < 0:
        return None
    reference = reference[:len(reference) - suffix]
    alternate = alternate[:len(alternate) - suffix]

    prefix = index_of_difference(reference, alternate)
    return prefix, suffix, reference[prefix:], alternate[prefix:]


def create_key_fields(
    position: int,
    reference: str,
    alternate: str,
    allele_index: int = 0,
) -> VariantKeyFields | None:
    """
    Trim one allele pair into key fields at absolute coordinates.

    Args:
        position: 1-based position of the first reference base
        reference: Reference allele
        alternate: Alternative allele
        allele_index: 0-based index of the alternate in its record

    Returns:
        VariantKeyFields, or None when alternate equals reference
    """
    trimmed = trim_alleles(reference, alternate)
    if trimmed is None:
        return None

    prefix, _suffix, ref, alt = trimmed
    start = position + prefix
    return VariantKeyFields(
        start=start,
        end=start + len(ref) - 1,
        allele_index=allele_index,
        reference=ref,
        alternate=alt,
    )


def left_align_alleles(
    chrom: str,
    pos: int,
    ref: str,
    alts: list[str],
    reference_genome: ReferenceGenome
) -> tuple[int, str, list[str]]:
    """
    Left-align and minimally represent an anchored allele set (vt algorithm).

    Achieves two properties:
    1. Left-alignment: position is leftmost possible
    2. Parsimony: alleles are minimally represented

    Args:
        chrom: Chromosome name
        pos: 1-based position
        ref: Reference allele
        alts: List of alternative alleles
        reference_genome: Reference used to extend alleles to the left

    Returns:
        Tuple of (aligned_pos, aligned_ref, aligned_alts)
    """
    if not ref or not alts or not all(alts):
        return pos, ref, alts
    if all(a.upper() == ref.upper() for a in alts):
        return pos, ref, alts

    alleles = [ref.upper()] + [a.upper() for a in alts]

    changed = True
    while changed:
        changed = False

        last_bases = {a[-1] for a in alleles}
        if len(last_bases) == 1:
            new_alleles = [a[:-1] for a in alleles]

            if any(len(a) == 0 for a in new_alleles):
                if pos > 1:
                    pos -= 1
                    left_base = reference_genome.fetch(chrom, pos - 1, pos)
                    alleles = [left_base.upper() + a for a in new_alleles]
                    changed = True
            else:
                alleles = new_alleles
                changed = True

    while (len({a[0] for a in alleles}) == 1 and
           all(len(a) >= 2 for a in alleles)):
        alleles = [a[1:] for a in alleles]
        pos += 1

    return pos, alleles[0], alleles[1:]
