from __future__ import annotations

import functools
import re
from typing import Any, FrozenSet, Tuple

from .config import DEFAULT_CONFIG, NaMatchMode, NormalizationConfig

_NON_ALNUM = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def compress(text: str) -> str:
    """Drop every character that is not an ASCII letter or digit.

    Text without any (punctuation, non-Latin scripts) compresses to ``""``.
    """

    return _NON_ALNUM.sub("", text)


@functools.lru_cache(maxsize=64)
def _sentinels(na_values: Tuple[str, ...], mode: NaMatchMode) -> FrozenSet[str]:
    values = (v.strip().lower() for v in na_values)
    if mode is NaMatchMode.COMPRESSED:
        return frozenset(compress(v) for v in values)
    return frozenset(values)


def is_na(text: str, config: NormalizationConfig = DEFAULT_CONFIG) -> bool:
    """True when ``text`` matches a configured N/A sentinel."""

    candidate = text.strip().lower()
    if config.na_match_mode is NaMatchMode.COMPRESSED:
        candidate = compress(candidate)
    return candidate in _sentinels(config.na_values, config.na_match_mode)


def classify(value: Any, config: NormalizationConfig = DEFAULT_CONFIG) -> Any:
    """Decide whether a scalar becomes null.

    - ``None`` stays ``None``; non-string scalars pass through unchanged
    - blank strings become ``None`` (whitespace-only too, unless
      ``treat_whitespace_as_empty`` is off)
    - strings matching an N/A sentinel become ``None``
    - any other string is returned trimmed

    """

    if value is None:
        return None
    if not isinstance(value, str):
        return value

    trimmed = value.strip()
    if config.treat_empty_string_as_null:
        if config.treat_whitespace_as_empty and trimmed == "":
            return None
        if not config.treat_whitespace_as_empty and value == "":
            return None

    if is_na(trimmed, config):
        return None
    return trimmed
