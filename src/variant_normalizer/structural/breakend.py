"""Breakend (BND) bracket notation parsing and canonicalization.

The four VCF forms, with ``t`` the anchor sequence and ``p`` the mate locus:

    t[p[   piece extending right of p joined after t
    t]p]   reverse-complemented piece extending left of p joined after t
    ]p]t   piece extending left of p joined before t
    [p[t   reverse-complemented piece extending right of p joined before t

Normalized breakends carry no reference base: an anchor that repeats the
reference allele is cut down to the bases not present in the reference, and
an empty anchor is written as ``.``.
"""

import logging
import re
from dataclasses import dataclass, replace

from ..errors import BreakendParseError
from ..models import Breakend, BreakendOrientation, StructuralVariantInfo, VariantKeyFields
from ..utils.contigs import ContigNamingConvention, PrefixMatchingConvention

logger = logging.getLogger(__name__)

BND_PATTERN = re.compile(
    r"^(?P<left>[^\[\]]*)(?P<open>[\[\]])(?P<chrom>[^\[\]]+):(?P<pos>\d+)"
    r"(?P<close>[\[\]])(?P<right>[^\[\]]*)$"
)
ANCHOR_PATTERN = re.compile(r"^(\.|[ACGTNacgtn]+)$")

_ORIENTATIONS = {
    ("left", "["): BreakendOrientation.ES,
    ("left", "]"): BreakendOrientation.EE,
    ("right", "]"): BreakendOrientation.SE,
    ("right", "["): BreakendOrientation.SS,
}


@dataclass(frozen=True)
class BreakendAllele:
    """Parsed bracket alternate."""

    anchor: str
    anchor_side: str  # "left" for t[p[ / t]p], "right" for [p[t / ]p]t
    bracket: str
    mate_chromosome: str
    mate_position: int

    @property
    def orientation(self) -> BreakendOrientation:
        return _ORIENTATIONS[(self.anchor_side, self.bracket)]

    def format(self) -> str:
        anchor = self.anchor or "."
        mate = f"{self.bracket}{self.mate_chromosome}:{self.mate_position}{self.bracket}"
        if self.anchor_side == "left":
            return f"{anchor}{mate}"
        return f"{mate}{anchor}"


def is_breakend(allele: str) -> bool:
    return "[" in allele or "]" in allele


def parse_breakend(alternate: str) -> BreakendAllele:
    """
    Parse a bracket alternate into its parts.

    Raises:
        BreakendParseError: If the allele matches none of the four forms
    """
    match = BND_PATTERN.match(alternate)
    if not match:
        raise BreakendParseError(f"Invalid breakend notation: '{alternate}'")

    if match.group("open") != match.group("close"):
        raise BreakendParseError(f"Mismatched breakend brackets: '{alternate}'")

    left, right = match.group("left"), match.group("right")
    if left and right:
        raise BreakendParseError(f"Breakend anchored on both sides: '{alternate}'")
    if not left and not right:
        raise BreakendParseError(f"Breakend without anchor: '{alternate}'")

    anchor = left or right
    if not ANCHOR_PATTERN.match(anchor):
        raise BreakendParseError(f"Invalid breakend anchor '{anchor}' in '{alternate}'")

    return BreakendAllele(
        anchor="" if anchor == "." else anchor,
        anchor_side="left" if left else "right",
        bracket=match.group("open"),
        mate_chromosome=match.group("chrom"),
        mate_position=int(match.group("pos")),
    )


def normalize_breakend(
    chromosome: str,
    start: int,
    end: int,
    reference: str,
    alternate: str,
    allele_index: int = 0,
    convention: ContigNamingConvention | None = None,
    structural: StructuralVariantInfo | None = None,
) -> VariantKeyFields:
    """
    Canonicalize a bracket breakend.

    Args:
        chromosome: Record chromosome, which sets the mate naming convention
        start: 1-based record start
        end: 1-based record end
        reference: Reference allele
        alternate: Bracket alternate
        allele_index: Index of the alternate in its record
        convention: Mate contig naming convention (default: match 'chr' prefix)
        structural: Confidence intervals already read from the attributes

    Returns:
        VariantKeyFields with the canonical alternate and breakend info
    """
    convention = convention or PrefixMatchingConvention()
    parsed = parse_breakend(alternate)
    anchor = parsed.anchor
    inserted = None

    if reference:
        if parsed.anchor_side == "left" and anchor.upper().startswith(reference.upper()):
            anchor = anchor[len(reference):]
            start += len(reference)
            end = start - 1
            reference = ""
            inserted = anchor or None
        elif parsed.anchor_side == "right" and anchor.upper().endswith(reference.upper()):
            anchor = anchor[:len(anchor) - len(reference)]
            end = start - 1
            reference = ""
            inserted = anchor or None

    canonical = BreakendAllele(
        anchor=anchor,
        anchor_side=parsed.anchor_side,
        bracket=parsed.bracket,
        mate_chromosome=convention(parsed.mate_chromosome, chromosome),
        mate_position=parsed.mate_position,
    )
    if canonical.format() != alternate:
        logger.debug("Breakend %s:%d %s normalized to %s", chromosome, start, alternate,
                     canonical.format())

    breakend = Breakend(
        mate_chromosome=canonical.mate_chromosome,
        mate_position=canonical.mate_position,
        orientation=canonical.orientation,
        inserted_sequence=inserted,
    )
    return VariantKeyFields(
        start=start,
        end=end,
        allele_index=allele_index,
        reference=reference,
        alternate=canonical.format(),
        structural=replace(structural or StructuralVariantInfo(), breakend=breakend),
    )
