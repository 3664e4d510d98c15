"""Reference blocks: no-variation records filling the uncovered parts of a span."""

from collections.abc import Iterable

from .models import VariantKeyFields


def generate_reference_blocks(
    start: int,
    end: int,
    reference: str,
    fragments: Iterable[VariantKeyFields],
) -> list[VariantKeyFields]:
    """
    Cover the positions of [start, end] that no fragment claims.

    Insertions (end < start) claim no reference position. Each block keeps the
    first reference base of its interval.

    Args:
        start: 1-based start of the original record
        end: 1-based end of the original record
        reference: Reference allele of the original record, starting at start
        fragments: Variant fragments emitted for the record

    Returns:
        Reference blocks ordered by position
    """
    covered = sorted((f.start, f.end) for f in fragments if f.end >= f.start)

    blocks = []
    cursor = start
    for frag_start, frag_end in covered:
        if frag_start > cursor:
            blocks.append(_block(cursor, min(frag_start - 1, end), start, reference))
        cursor = max(cursor, frag_end + 1)
        if cursor > end:
            break

    if cursor <= end:
        blocks.append(_block(cursor, end, start, reference))
    return blocks


def _block(block_start: int, block_end: int, start: int, reference: str) -> VariantKeyFields:
    offset = block_start - start
    return VariantKeyFields(
        start=block_start,
        end=block_end,
        allele_index=0,
        reference=reference[offset:offset + 1],
        alternate="",
        reference_block=True,
    )
