from datetime import date, datetime
from decimal import Decimal
from typing import Any

import orjson
from fastapi.encoders import jsonable_encoder


def _default(o: Any):
    # Normalize non-JSON-native types that slip past jsonable_encoder
    if isinstance(o, Decimal):
        return float(o)
    if isinstance(o, (datetime, date)):
        return o.isoformat()
    raise TypeError(f"Type is not JSON serializable: {type(o).__name__}")


def dumps_bytes(obj: Any) -> bytes:
    return orjson.dumps(obj, option=orjson.OPT_NON_STR_KEYS, default=_default)


def dumps(obj: Any) -> str:
    """Serialize obj to a compact JSON string (UTF‑8), with datetime support."""
    return dumps_bytes(jsonable_encoder(obj)).decode("utf-8")
