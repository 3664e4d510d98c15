"""variant-normalizer: canonical, bi-allelic representation of genomic variants."""

from .config import NormalizerConfig, load_config
from .errors import (
    BreakendParseError,
    MalformedRecordError,
    NonStandardCompliantSampleField,
    NormalizationError,
)
from .models import (
    AlternateCoordinate,
    Breakend,
    StructuralVariantInfo,
    StudyEntry,
    Variant,
    VariantKeyFields,
    VariantType,
)
from .normalizer import NormalizationFailure, NormalizationResult, VariantNormalizer

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AlternateCoordinate",
    "Breakend",
    "BreakendParseError",
    "MalformedRecordError",
    "NonStandardCompliantSampleField",
    "NormalizationError",
    "NormalizationFailure",
    "NormalizationResult",
    "NormalizerConfig",
    "StructuralVariantInfo",
    "StudyEntry",
    "Variant",
    "VariantKeyFields",
    "VariantNormalizer",
    "VariantType",
    "load_config",
]
