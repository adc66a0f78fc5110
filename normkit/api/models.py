from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Any, List, Optional


class ApiError(BaseModel):
    """Standard API error payload."""

    error: str
    detail: Optional[str] = None


class ConfigIn(BaseModel):
    """Per-request overrides of the service's normalization settings."""

    treat_empty_string_as_null: Optional[bool] = None
    treat_whitespace_as_empty: Optional[bool] = None
    na_match_mode: Optional[str] = Field(default=None, examples=["compressed", "exact"])
    na_values: Optional[List[str]] = None


class NormalizeIn(BaseModel):
    data: Any = None
    config: Optional[ConfigIn] = None


class NormalizeOut(BaseModel):
    """Normalized payload as plain JSON."""

    data: Any = None


class ResolveIn(BaseModel):
    data: Any = None
    path: str
    config: Optional[ConfigIn] = None


class ResolveOut(BaseModel):
    """Result of resolving a key or dot-path against normalized data."""

    path: str
    found: bool
    value: Any = None
