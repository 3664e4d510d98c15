"""Contig naming conventions for matching chromosome names across a record."""

from typing import Protocol


class ContigNamingConvention(Protocol):
    """Rewrites a contig name into the convention used by a record."""
    def __call__(self, contig: str, record_contig: str) -> str:
        ...


def normalize_chromosome(chrom: str, add_chr: bool = False) -> str:
    """Add (add_chr=True) or strip the 'chr' prefix of a contig name."""
    bare = chrom[3:] if chrom.startswith("chr") else chrom
    return f"chr{bare}" if add_chr else bare


class PrefixMatchingConvention:
    """Match the 'chr' prefix style of the record, then apply an alias table.

    Aliases are looked up on the bare (prefix-free) name, e.g. ``{"M": "MT"}``
    turns a ``chrM`` mate on an Ensembl-style record into ``MT``.
    """

    def __init__(self, aliases: dict[str, str] | None = None):
        self.aliases = dict(aliases or {})

    def __call__(self, contig: str, record_contig: str) -> str:
        bare = normalize_chromosome(contig, add_chr=False)
        bare = self.aliases.get(bare, bare)
        return normalize_chromosome(bare, add_chr=record_contig.startswith("chr"))
