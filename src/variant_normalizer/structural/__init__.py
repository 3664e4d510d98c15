"""Structural variant and breakend normalization."""

from .breakend import BreakendAllele, is_breakend, normalize_breakend, parse_breakend
from .symbolic import (
    copy_number_type,
    normalize_symbolic,
    parse_confidence_interval,
    shared_copy_number,
)

__all__ = [
    "BreakendAllele",
    "copy_number_type",
    "is_breakend",
    "normalize_breakend",
    "normalize_symbolic",
    "parse_breakend",
    "parse_confidence_interval",
    "shared_copy_number",
]
