from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

log = logging.getLogger(__name__)

DEFAULT_NA_VALUES: Tuple[str, ...] = ("na", "n/a", "n a", "n-a", "n.a", "none", "null", "-")

_SETTINGS = (
    "treat_empty_string_as_null",
    "treat_whitespace_as_empty",
    "na_match_mode",
    "na_values",
)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class NaMatchMode(str, Enum):
    """How strings are compared against the N/A sentinel list.

    - COMPRESSED: lower-case and drop every non-alphanumeric character first
    - EXACT: lower-case and trim only
    """

    COMPRESSED = "compressed"
    EXACT = "exact"

    @classmethod
    def parse(cls, raw: Any) -> "NaMatchMode":
        # Anything that is not "compressed" selects exact comparison.
        if isinstance(raw, cls):
            return raw
        if str(raw).strip().lower() == cls.COMPRESSED.value:
            return cls.COMPRESSED
        return cls.EXACT


def _as_bool(raw: Any, default: bool) -> bool:
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        log.debug("unrecognized boolean setting %r, using default %s", raw, default)
        return default
    return bool(raw)


def _as_values(raw: Any) -> Tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = [raw]
    # Ordered set: duplicates are dropped, first occurrence wins.
    return tuple(dict.fromkeys(str(v) for v in raw))


@dataclass(frozen=True, slots=True)
class NormalizationConfig:
    """The four tunable normalization settings.

    The config is read for every classified value and never mutated; derive
    variants with ``replace``.
    """

    treat_empty_string_as_null: bool = True
    treat_whitespace_as_empty: bool = True
    na_match_mode: NaMatchMode = NaMatchMode.COMPRESSED
    na_values: Tuple[str, ...] = DEFAULT_NA_VALUES

    def __post_init__(self) -> None:
        object.__setattr__(self, "treat_empty_string_as_null", bool(self.treat_empty_string_as_null))
        object.__setattr__(self, "treat_whitespace_as_empty", bool(self.treat_whitespace_as_empty))
        object.__setattr__(self, "na_match_mode", NaMatchMode.parse(self.na_match_mode))
        object.__setattr__(self, "na_values", _as_values(self.na_values))

    def replace(self, **changes: Any) -> "NormalizationConfig":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]], *, prefix: str = "normalizer") -> "NormalizationConfig":
        """Build a config from host settings.

        Accepts nested (``{"normalizer": {"na_values": [...]}}``), flat-prefixed
        (``{"normalizer.na_values": [...]}``) or bare (``{"na_values": [...]}``)
        forms. Missing settings keep their defaults.
        """

        if not mapping:
            return cls()

        nested = mapping.get(prefix) if prefix else None
        sources = [nested] if isinstance(nested, Mapping) else []
        sources.append(mapping)

        found: dict = {}
        for name in _SETTINGS:
            for source in sources:
                flat = f"{prefix}.{name}" if prefix else name
                if flat in source:
                    found[name] = source[flat]
                    break
                if name in source:
                    found[name] = source[name]
                    break

        defaults = cls()
        return cls(
            treat_empty_string_as_null=_as_bool(
                found.get("treat_empty_string_as_null", defaults.treat_empty_string_as_null),
                defaults.treat_empty_string_as_null,
            ),
            treat_whitespace_as_empty=_as_bool(
                found.get("treat_whitespace_as_empty", defaults.treat_whitespace_as_empty),
                defaults.treat_whitespace_as_empty,
            ),
            na_match_mode=found.get("na_match_mode", defaults.na_match_mode),
            na_values=found.get("na_values", defaults.na_values),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, *, prefix: str = "NORMKIT_") -> "NormalizationConfig":
        """Create a config from environment variables.

        - NORMKIT_TREAT_EMPTY_STRING_AS_NULL (default true)
        - NORMKIT_TREAT_WHITESPACE_AS_EMPTY (default true)
        - NORMKIT_NA_MATCH_MODE (compressed | exact, default compressed)
        - NORMKIT_NA_VALUES (comma separated, default the built-in list)

        """

        env = os.environ if environ is None else environ
        settings: dict = {}
        for name in _SETTINGS:
            raw = (env.get(f"{prefix}{name.upper()}") or "").strip()
            if not raw:
                continue
            if name == "na_values":
                settings[name] = [v.strip() for v in raw.split(",") if v.strip()]
            else:
                settings[name] = raw
        return cls.from_mapping(settings, prefix="")

    def to_dict(self) -> dict:
        return {
            "treat_empty_string_as_null": self.treat_empty_string_as_null,
            "treat_whitespace_as_empty": self.treat_whitespace_as_empty,
            "na_match_mode": self.na_match_mode.value,
            "na_values": list(self.na_values),
        }


DEFAULT_CONFIG = NormalizationConfig()


def merge_overrides(base: NormalizationConfig, overrides: Optional[Mapping[str, Any]]) -> NormalizationConfig:
    """Apply non-null overrides (e.g. from a request body or CLI flags) to ``base``."""

    if not overrides:
        return base
    changes = {k: v for k, v in overrides.items() if k in _SETTINGS and v is not None}
    for name in ("treat_empty_string_as_null", "treat_whitespace_as_empty"):
        if name in changes:
            changes[name] = _as_bool(changes[name], getattr(base, name))
    return base.replace(**changes)
