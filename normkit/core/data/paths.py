"""Dot-path parsing helpers.

A dot-path is a ``.``-delimited sequence of keys. ``\\.`` escapes a literal
dot inside a segment and ``\\\\`` an escaped backslash. Splitting only happens
on dots that are not preceded by a backslash.
"""

from __future__ import annotations

import re
from typing import Any, List, Union

Key = Union[int, str]

_UNESCAPED_DOT = re.compile(r"(?<!\\)\.")
_INT_KEY = re.compile(r"^(0|-?[1-9][0-9]*)$")


def split_path(key: str) -> List[str]:
    """Split a key on unescaped dots. Segments are returned still escaped."""

    if "." not in key:
        return [key]
    return _UNESCAPED_DOT.split(key)


def unescape_segment(segment: str) -> str:
    # Replacements are applied in sequence over the whole segment.
    return segment.replace("\\.", ".").replace("\\\\", "\\")


def canonical_key(key: Any) -> Key:
    """Return the lookup form of a key.

    Keys are stored as given; the canonical form only pairs up equivalent
    spellings at lookup time (``"0"`` and ``0``).

    - ``int`` keys and canonical decimal strings (``"0"``, ``"-3"``, not
      ``"01"``) are read as ``int``
    - ``bool`` becomes ``0``/``1``; ``None`` becomes ``""``
    - integral floats are truncated to ``int``
    - anything else is read as its text form
    """

    if isinstance(key, bool):
        return int(key)
    if isinstance(key, int):
        return key
    if key is None:
        return ""
    if isinstance(key, float) and key.is_integer():
        return int(key)
    text = key if isinstance(key, str) else str(key)
    if _INT_KEY.match(text):
        return int(text)
    return text


def is_list_keys(keys: List[Key]) -> bool:
    """True when keys are the ints ``0..n-1`` in order (and n > 0).

    String keys such as ``"0"`` never make a list.
    """

    if not keys:
        return False
    return all(type(k) is int and k == i for i, k in enumerate(keys))


def key_candidates(key: Any) -> List[Any]:
    """Spellings of ``key`` to try, exact key first.

    ``"3"`` is also tried as ``3`` and ``3`` as ``"3"``.
    """

    twin = canonical_key(key)
    candidates: List[Any] = [key, twin]
    if type(twin) is int:
        candidates.append(str(twin))
    return candidates


def derived_key(value: Any) -> Key:
    """Key for a bucket or re-keyed entry computed from a value.

    Strings and integers are used as-is; ``bool`` becomes ``0``/``1``,
    ``None`` becomes ``""``, integral floats become ``int`` and anything
    else its text form.
    """

    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, str)):
        return value
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return str(value)
