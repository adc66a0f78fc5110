"""Path-addressable container for normalized data.

``NormalizedData`` wraps nested mappings so they can be read by attribute,
by index, or by dot-path, with literal keys taking precedence over paths.
"""

from .comparison import MISSING, loose_compare, loose_equals, operator_for_where
from .container import MAX_DEPTH, NormalizedData, data_get
from .conversion import Capability, is_object_like, is_scalar, object_to_mapping, probe_capability
from .exceptions import InvalidInputError, NonNumericValueError, NormalizerError, StructureTooDeepError
from .paths import canonical_key, split_path, unescape_segment

__all__ = [
    "NormalizedData",
    "data_get",
    "MAX_DEPTH",
    "MISSING",
    "loose_equals",
    "loose_compare",
    "operator_for_where",
    "Capability",
    "probe_capability",
    "is_object_like",
    "is_scalar",
    "object_to_mapping",
    "split_path",
    "unescape_segment",
    "canonical_key",
    "NormalizerError",
    "InvalidInputError",
    "StructureTooDeepError",
    "NonNumericValueError",
]
