"""Decomposition of multi-nucleotide variants into minimal phased fragments."""

import logging

from .models import VariantKeyFields
from .trimming import create_key_fields

logger = logging.getLogger(__name__)

MATCH_SCORE = 2
MISMATCH_SCORE = -1
GAP_SCORE = -2

# Alignment is quadratic in allele length
MAX_ALIGNMENT_CELLS = 1_000_000

GAP = "-"


def phase_set_key(chromosome: str, start: int, reference: str, alternate: str) -> str:
    """Phase-set value linking every fragment of one original allele."""
    return f"{chromosome}:{start}:{reference}:{alternate}"


def align_alleles(reference: str, alternate: str) -> tuple[str, str]:
    """
    Globally align two alleles (Needleman-Wunsch, linear gap penalty).

    Ties prefer a diagonal step while tracing back from the end, which
    places gaps as far left as possible.

    Returns:
        Tuple of (aligned_ref, aligned_alt), gaps written as '-'
    """
    rows, cols = len(reference) + 1, len(alternate) + 1
    score = [[0] * cols for _ in range(rows)]
    for i in range(1, rows):
        score[i][0] = i * GAP_SCORE
    for j in range(1, cols):
        score[0][j] = j * GAP_SCORE

    for i in range(1, rows):
        for j in range(1, cols):
            pair = MATCH_SCORE if reference[i - 1] == alternate[j - 1] else MISMATCH_SCORE
            score[i][j] = max(
                score[i - 1][j - 1] + pair,
                score[i - 1][j] + GAP_SCORE,
                score[i][j - 1] + GAP_SCORE,
            )

    aligned_ref, aligned_alt = [], []
    i, j = rows - 1, cols - 1
    while i > 0 or j > 0:
        if i > 0 and j > 0:
            pair = MATCH_SCORE if reference[i - 1] == alternate[j - 1] else MISMATCH_SCORE
            if score[i][j] == score[i - 1][j - 1] + pair:
                aligned_ref.append(reference[i - 1])
                aligned_alt.append(alternate[j - 1])
                i -= 1
                j -= 1
                continue
        if i > 0 and score[i][j] == score[i - 1][j] + GAP_SCORE:
            aligned_ref.append(reference[i - 1])
            aligned_alt.append(GAP)
            i -= 1
        else:
            aligned_ref.append(GAP)
            aligned_alt.append(alternate[j - 1])
            j -= 1

    return "".join(reversed(aligned_ref)), "".join(reversed(aligned_alt))


def _differing_runs(aligned_ref: str, aligned_alt: str) -> list[tuple[int, str, str]]:
    """Runs of non-matching alignment columns as (ref_offset, ref, alt)."""
    runs = []
    offset = 0
    run_offset, run_ref, run_alt = None, [], []

    for ref_base, alt_base in zip(aligned_ref, aligned_alt, strict=True):
        if ref_base == alt_base:
            if run_offset is not None:
                runs.append((run_offset, "".join(run_ref), "".join(run_alt)))
                run_offset, run_ref, run_alt = None, [], []
        else:
            if run_offset is None:
                run_offset = offset
            if ref_base != GAP:
                run_ref.append(ref_base)
            if alt_base != GAP:
                run_alt.append(alt_base)
        if ref_base != GAP:
            offset += 1

    if run_offset is not None:
        runs.append((run_offset, "".join(run_ref), "".join(run_alt)))
    return runs


def decompose_mnv(fragment: VariantKeyFields, phase_set: str) -> list[VariantKeyFields]:
    """
    Split a trimmed fragment into its minimal differing runs.

    Equal-length alleles are compared position by position; other alleles are
    aligned first. Every run is trimmed again and tagged with the phase set.
    A fragment that yields a single run is returned unchanged.

    Args:
        fragment: Trimmed fragment with reference and alternate of length >= 2
        phase_set: Phase-set key shared by all produced fragments

    Returns:
        Fragments in left-to-right order
    """
    reference, alternate = fragment.reference, fragment.alternate
    if len(reference) < 2 or len(alternate) < 2:
        return [fragment]

    if len(reference) == len(alternate):
        aligned_ref, aligned_alt = reference, alternate
    elif len(reference) * len(alternate) > MAX_ALIGNMENT_CELLS:
        logger.debug("Skipping MNV decomposition of %s: alleles too long to align", phase_set)
        return [fragment]
    else:
        aligned_ref, aligned_alt = align_alleles(reference, alternate)

    runs = _differing_runs(aligned_ref, aligned_alt)
    if len(runs) < 2:
        return [fragment]

    fragments = []
    for offset, run_ref, run_alt in runs:
        key_fields = create_key_fields(fragment.start + offset, run_ref, run_alt, fragment.allele_index)
        if key_fields is None:
            continue
        fragments.append(VariantKeyFields(
            start=key_fields.start,
            end=key_fields.end,
            allele_index=key_fields.allele_index,
            reference=key_fields.reference,
            alternate=key_fields.alternate,
            phase_set=phase_set,
        ))
    return fragments
