"""Loose (type-coercing) comparison used by where/contains/unique/sort.

Rules:
- ``None`` equals ``""`` and any other falsy value
- booleans compare by truthiness
- numbers and numeric strings compare numerically
- a number against a non-numeric string compares as text
- containers, mappings and lists compare structurally

Ordering follows the same coercions. Values with no defined ordering
(for example a date against a string) raise ``TypeError``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from numbers import Number
from typing import Any, Callable, Union

from .conversion import is_scalar, is_sequence

MISSING: Any = object()

_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")

WHERE_OPERATORS = ("=", "==", "!=", "<>", "<", ">", "<=", ">=", "===", "!==")


def is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, Number):
        return True
    return isinstance(value, str) and bool(_NUMERIC.match(value))


def to_number(value: Any) -> Union[int, float, Number]:
    """Read a number or numeric string. Raises ValueError for anything else."""

    if isinstance(value, bool):
        return int(value)
    if isinstance(value, Number):
        return value
    if isinstance(value, str) and _NUMERIC.match(value):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            return float(text)
    raise ValueError(f"not numeric: {value!r}")


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


def _plain(value: Any) -> Any:
    to_plain = getattr(value, "to_plain", None)
    if callable(to_plain):
        return to_plain()
    return value


def _is_structured(value: Any) -> bool:
    return callable(getattr(value, "to_plain", None)) or isinstance(value, Mapping) or is_sequence(value)


def is_object_value(value: Any) -> bool:
    """True for values that are neither scalars nor plain lists."""

    return not is_scalar(value) and not isinstance(value, (list, tuple))


def loose_equals(a: Any, b: Any) -> bool:
    if a is b:
        return True
    if isinstance(a, bool) or isinstance(b, bool):
        return _truthy(a) == _truthy(b)
    if a is None or b is None:
        other = b if a is None else a
        if isinstance(other, str):
            return other == ""
        return not _truthy(other)
    if is_numeric(a) and is_numeric(b):
        return to_number(a) == to_number(b)
    if isinstance(a, Number) and isinstance(b, str):
        return str(a) == b
    if isinstance(b, Number) and isinstance(a, str):
        return a == str(b)
    if _is_structured(a) and _is_structured(b):
        return _plain(a) == _plain(b)
    return a == b


def _sign(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def loose_compare(a: Any, b: Any) -> int:
    """Three-way comparison (-1, 0, 1) with loose coercion."""

    if a is None and b is None:
        return 0
    if a is None or b is None:
        other = b if a is None else a
        if isinstance(other, str):
            result = _sign("", other)
        else:
            result = _sign(False, _truthy(other))
        return result if a is None else -result
    if isinstance(a, bool) or isinstance(b, bool):
        return _sign(_truthy(a), _truthy(b))
    if is_numeric(a) and is_numeric(b):
        return _sign(to_number(a), to_number(b))
    if isinstance(a, Number) and isinstance(b, str):
        return _sign(str(a), b)
    if isinstance(b, Number) and isinstance(a, str):
        return _sign(a, str(b))
    if _is_structured(a) and _is_structured(b):
        # Collections order by size first; equal sizes only compare equal or not.
        size = _sign(len(a), len(b))
        if size:
            return size
        return 0
    return _sign(a, b)


def operator_for_where(
    retrieve: Callable[[Any, Any], Any],
    key: Any,
    operator: Any = MISSING,
    value: Any = MISSING,
) -> Callable[[Any], bool]:
    """Build an element predicate for where/first_where/every/contains/count.

    - ``(key)``                  -> retrieved value loosely equals ``True``
    - ``(key, value)``           -> ``=`` comparison
    - ``(key, operator, value)`` -> explicit operator

    When exactly one side is an object (a container, mapping or object-like
    value) and not both sides are strings, only the negative operators
    (``!=``, ``<>``, ``!==``) hold.
    """

    if operator is MISSING and value is MISSING:
        operator, value = "=", True
    elif value is MISSING:
        operator, value = "=", operator

    op: str = operator
    if op not in WHERE_OPERATORS:
        op = "="

    def predicate(item: Any) -> bool:
        retrieved = retrieve(item, key)
        strings = sum(1 for v in (retrieved, value) if isinstance(v, str))
        objects = sum(1 for v in (retrieved, value) if is_object_value(v))
        if strings < 2 and objects == 1:
            return op in ("!=", "<>", "!==")

        if op in ("=", "=="):
            return loose_equals(retrieved, value)
        if op in ("!=", "<>"):
            return not loose_equals(retrieved, value)
        if op == "===":
            return _strict_equals(retrieved, value)
        if op == "!==":
            return not _strict_equals(retrieved, value)
        cmp = loose_compare(retrieved, value)
        if op == "<":
            return cmp < 0
        if op == ">":
            return cmp > 0
        if op == "<=":
            return cmp <= 0
        return cmp >= 0

    return predicate


def _strict_equals(a: Any, b: Any) -> bool:
    if type(a) is not type(b):
        return False
    return _plain(a) == _plain(b)
