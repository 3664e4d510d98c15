"""Shared utility modules."""

from .contigs import (
    ContigNamingConvention,
    PrefixMatchingConvention,
    normalize_chromosome,
)

__all__ = [
    "ContigNamingConvention",
    "PrefixMatchingConvention",
    "normalize_chromosome",
]
