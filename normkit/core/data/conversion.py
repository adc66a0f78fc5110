"""Classification of raw values and conversion of object-like values.

Raw values fall into one of: null, scalar, sequence, mapping or object-like.
Object-like values are converted to a mapping through exactly one capability,
probed in a fixed order:

1. ``TO_MAPPING``      - ``to_dict()`` (or a namedtuple's ``_asdict()``)
2. ``TO_SERIALIZABLE`` - ``model_dump()`` (pydantic) or ``__json__()``
3. ``PLAIN_FIELDS``    - dataclass fields, ``__slots__`` or public ``__dict__`` entries
"""

from __future__ import annotations

import dataclasses
import numbers
import uuid
from collections.abc import Mapping, Set
from datetime import date, datetime, time, timedelta
from enum import Enum
from pathlib import PurePath
from typing import Any, Dict, List, Optional

from .exceptions import InvalidInputError

_SCALAR_TYPES = (
    str,
    bytes,
    bytearray,
    numbers.Number,
    datetime,
    date,
    time,
    timedelta,
    Enum,
    uuid.UUID,
    PurePath,
)


class Capability(str, Enum):
    TO_MAPPING = "to_mapping"
    TO_SERIALIZABLE = "to_serializable"
    PLAIN_FIELDS = "plain_fields"


def is_scalar(value: Any) -> bool:
    """True for null and atomic values (strings, numbers, booleans, dates, enums...)."""

    return value is None or isinstance(value, _SCALAR_TYPES)


def _is_namedtuple(value: Any) -> bool:
    return isinstance(value, tuple) and callable(getattr(value, "_asdict", None))


def is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, Set)) and not _is_namedtuple(value)


def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def _has_method(value: Any, name: str) -> bool:
    return callable(getattr(value, name, None))


def probe_capability(value: Any) -> Optional[Capability]:
    """Return the conversion capability of an object-like value, or None.

    Scalars, sequences and mappings are never object-like. Callables and
    classes are only object-like when they expose an explicit conversion.
    """

    if is_scalar(value) or is_sequence(value) or is_mapping(value) or isinstance(value, type):
        return None
    if _is_namedtuple(value) or _has_method(value, "to_dict"):
        return Capability.TO_MAPPING
    if _has_method(value, "model_dump") or _has_method(value, "__json__"):
        return Capability.TO_SERIALIZABLE
    if callable(value):
        return None
    if dataclasses.is_dataclass(value) or hasattr(value, "__dict__") or _slot_names(value):
        return Capability.PLAIN_FIELDS
    return None


def is_object_like(value: Any) -> bool:
    return probe_capability(value) is not None


def _slot_names(value: Any) -> List[str]:
    names: List[str] = []
    for klass in type(value).__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name not in names and not name.startswith("_"):
                names.append(name)
    return names


def _plain_fields(value: Any) -> Dict[str, Any]:
    if dataclasses.is_dataclass(value):
        # Shallow: nested values are converted by the caller's recursion.
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    fields: Dict[str, Any] = {}
    for name in _slot_names(value):
        if hasattr(value, name):
            fields[name] = getattr(value, name)
    for name, item in getattr(value, "__dict__", {}).items():
        if not name.startswith("_"):
            fields[name] = item
    return fields


def _as_mapping(converted: Any, value: Any) -> Dict[Any, Any]:
    if isinstance(converted, Mapping):
        return dict(converted)
    if is_sequence(converted):
        return dict(enumerate(converted))
    raise InvalidInputError(
        f"{type(value).__name__} conversion returned {type(converted).__name__}, expected a mapping"
    )


def object_to_mapping(value: Any) -> Dict[Any, Any]:
    """Convert an object-like value to a (shallow) mapping.

    Raises InvalidInputError when the value exposes no conversion capability.
    """

    capability = probe_capability(value)
    if capability is Capability.TO_MAPPING:
        if _is_namedtuple(value):
            return _as_mapping(value._asdict(), value)
        return _as_mapping(value.to_dict(), value)
    if capability is Capability.TO_SERIALIZABLE:
        if _has_method(value, "model_dump"):
            return _as_mapping(value.model_dump(), value)
        return _as_mapping(value.__json__(), value)
    if capability is Capability.PLAIN_FIELDS:
        return _plain_fields(value)
    raise InvalidInputError(f"unsupported value of type {type(value).__name__}")
