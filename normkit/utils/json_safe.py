from __future__ import annotations

import base64
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Mapping
from uuid import UUID


def to_jsonable(obj: Any) -> Any:
    """
    Convert values that ``json`` cannot encode into JSON-compatible equivalents.

    Used as the ``default=`` hook when serializing normalized data, so it only
    sees values the encoder rejected.

    - datetime/date/time -> ISO 8601
    - timedelta -> total seconds
    - Decimal -> int when integral, else float
    - bytes -> {"__bytes_b64__": ...}
    - Enum -> its value; UUID/paths -> text
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj

    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()

    if isinstance(obj, timedelta):
        return obj.total_seconds()

    if isinstance(obj, Decimal):
        return int(obj) if obj == obj.to_integral_value() else float(obj)

    if isinstance(obj, Enum):
        return to_jsonable(obj.value)

    if isinstance(obj, (UUID, PurePath)):
        return str(obj)

    if isinstance(obj, (bytes, bytearray)):
        return {"__bytes_b64__": base64.b64encode(bytes(obj)).decode("ascii")}

    to_plain = getattr(obj, "to_plain", None)
    if callable(to_plain):
        return to_jsonable(to_plain())

    if is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(asdict(obj))

    if isinstance(obj, Mapping):
        return {str(k): to_jsonable(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_jsonable(x) for x in obj]

    return str(obj)
