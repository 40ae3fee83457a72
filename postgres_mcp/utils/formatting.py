"""Response formatting helpers."""
import json
import math
from datetime import date, datetime, time
from typing import Any

from mcp.types import TextContent


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, memoryview):
        value = value.tobytes()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    return str(value)


def _finite(value: Any) -> Any:
    # float8 NaN/Infinity have no JSON literal; render them as null
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {k: _finite(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_finite(v) for v in value]
    return value


def format_json(payload: Any) -> str:
    """Pretty-print a tool payload; non-JSON values (Decimal, UUID, ...) become strings."""
    return json.dumps(_finite(payload), indent=2, default=_json_default, allow_nan=False)


def text_content(payload: Any) -> TextContent:
    return TextContent(type="text", text=format_json(payload))
