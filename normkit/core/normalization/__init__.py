"""Normalization engine for semi-structured data.

Blank strings and N/A-like sentinels become ``None``; other strings are
trimmed; composites are normalized recursively and wrapped in NormalizedData.

Notes:
- The engine is pure: the config is passed in and never mutated.
- Recursion is bounded; cyclic input raises StructureTooDeepError.
"""

from .classifier import classify, compress, is_na
from .config import DEFAULT_CONFIG, DEFAULT_NA_VALUES, NaMatchMode, NormalizationConfig, merge_overrides
from .engine import Normalizer, normalize

__all__ = [
    "Normalizer",
    "normalize",
    "classify",
    "compress",
    "is_na",
    "NormalizationConfig",
    "NaMatchMode",
    "DEFAULT_CONFIG",
    "DEFAULT_NA_VALUES",
    "merge_overrides",
]
