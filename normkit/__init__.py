"""normkit: recursive data normalization with dot-path access."""

from normkit.core.data import (
    InvalidInputError,
    NonNumericValueError,
    NormalizedData,
    NormalizerError,
    StructureTooDeepError,
    data_get,
)
from normkit.core.normalization import (
    NaMatchMode,
    NormalizationConfig,
    Normalizer,
    classify,
    normalize,
)

__version__ = "0.1.0"

__all__ = [
    "Normalizer",
    "normalize",
    "classify",
    "NormalizationConfig",
    "NaMatchMode",
    "NormalizedData",
    "data_get",
    "NormalizerError",
    "InvalidInputError",
    "StructureTooDeepError",
    "NonNumericValueError",
]
