from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from normkit.core.data.container import MAX_DEPTH, NormalizedData
from normkit.core.data.conversion import (
    is_mapping,
    is_object_like,
    is_scalar,
    is_sequence,
    object_to_mapping,
)
from normkit.core.data.exceptions import InvalidInputError, StructureTooDeepError

from .classifier import classify
from .config import DEFAULT_CONFIG, NormalizationConfig

log = logging.getLogger(__name__)


class Normalizer:
    """Recursive data normalizer.

    - Mappings, sequences and object-like values are normalized element by
      element (keys and order preserved) and wrapped in NormalizedData
    - Scalars are classified: blanks and N/A sentinels become ``None``,
      other strings are trimmed

    The config is passed in explicitly and never mutated, so one instance
    can be shared freely.
    """

    def __init__(self, config: Optional[NormalizationConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        log.debug("normalizer configured", extra={"normalizer_config": self.config.to_dict()})

    def normalize(self, value: Any) -> Any:
        """Normalize any raw value.

        Returns NormalizedData for composite input, the classified scalar otherwise.
        """

        return self._normalize(value, 0)

    def normalize_array(self, items: Any) -> Union[Dict[Any, Any], List[Any]]:
        """Normalize a composite value without wrapping the top level.

        Mappings (and NormalizedData) come back as a dict, sequences as a list.
        """

        return self._normalize_items(items, 0)

    def normalize_object(self, obj: Any) -> Dict[Any, Any]:
        """Convert an object-like value to a mapping and normalize it (unwrapped)."""

        return self._normalize_items(object_to_mapping(obj), 0)

    def normalize_collection(self, collection: Any) -> Any:
        """Normalize every element, returning the same collection type.

        dict subclasses keep their class; other mappings come back as dict;
        lists and tuples keep their type; NormalizedData stays NormalizedData.
        """

        if isinstance(collection, NormalizedData):
            return NormalizedData({k: self._normalize(v, 1) for k, v in collection.items()})
        if isinstance(collection, dict):
            result = collection.copy()
            for key in result:
                result[key] = self._normalize(collection[key], 1)
            return result
        if is_mapping(collection):
            return {k: self._normalize(v, 1) for k, v in collection.items()}
        if isinstance(collection, tuple) and is_sequence(collection):
            return tuple(self._normalize(v, 1) for v in collection)
        if is_sequence(collection):
            return [self._normalize(v, 1) for v in collection]
        raise InvalidInputError(f"expected a mapping or sequence, got {type(collection).__name__}")

    def classify(self, value: Any) -> Any:
        return classify(value, self.config)

    def _normalize(self, value: Any, depth: int) -> Any:
        if depth > MAX_DEPTH:
            raise StructureTooDeepError(f"nesting deeper than {MAX_DEPTH} levels (cyclic structure?)")
        if is_scalar(value):
            return classify(value, self.config)
        if isinstance(value, NormalizedData) or is_mapping(value) or is_sequence(value):
            return NormalizedData(self._normalize_items(value, depth))
        if is_object_like(value):
            return NormalizedData(self._normalize_items(object_to_mapping(value), depth))
        raise InvalidInputError(f"unsupported value of type {type(value).__name__}")

    def _normalize_items(self, items: Any, depth: int) -> Union[Dict[Any, Any], List[Any]]:
        if isinstance(items, NormalizedData):
            return {k: self._normalize(v, depth + 1) for k, v in items.items()}
        if is_mapping(items):
            return {k: self._normalize(v, depth + 1) for k, v in items.items()}
        if is_sequence(items):
            return [self._normalize(v, depth + 1) for v in items]
        if is_object_like(items):
            return self._normalize_items(object_to_mapping(items), depth)
        raise InvalidInputError(f"expected a mapping or sequence, got {type(items).__name__}")


def normalize(value: Any, config: Optional[NormalizationConfig] = None) -> Any:
    """One-off convenience around ``Normalizer(config).normalize(value)``."""

    return Normalizer(config).normalize(value)
