"""JSON rendering of rows and bound parameters with orjson.

orjson already covers what most drivers hand back:
- datetime, date, time → ISO format
- UUID → string
- dataclasses, pydantic models → dict

Everything else a result set may carry goes through ``_default_handler``.
"""

import base64
import datetime
import decimal
from typing import Any, Iterable

import orjson


def _default_handler(obj: Any) -> Any:
    """
    Convert values orjson cannot serialize natively.

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable representation

    Raises:
        TypeError: If object cannot be serialized
    """
    # NUMERIC/DECIMAL columns: keep every digit
    if isinstance(obj, decimal.Decimal):
        return str(obj)

    # INTERVAL columns
    if isinstance(obj, datetime.timedelta):
        return obj.total_seconds()

    # BLOB/BYTEA columns come back as bytes or memoryview
    if isinstance(obj, memoryview):
        obj = bytes(obj)
    if isinstance(obj, (bytes, bytearray)):
        try:
            return obj.decode("utf-8")
        except UnicodeDecodeError:
            return base64.b64encode(obj).decode("ascii")

    if isinstance(obj, (set, frozenset)):
        return list(obj)

    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def convert_value_to_json_safe(value: Any) -> Any:
    """
    Convert a single column value to a JSON-compatible Python object.

    Falls back to ``str(value)`` for types nothing knows how to render.
    """
    try:
        return orjson.loads(orjson.dumps(value, default=_default_handler))
    except TypeError:
        return str(value)


def convert_row_to_json_safe(row: dict[str, Any]) -> dict[str, Any]:
    """Convert all values in a row mapping."""
    return {key: convert_value_to_json_safe(value) for key, value in row.items()}


def convert_rows_to_json_safe(rows: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Convert every row of a result set."""
    return [convert_row_to_json_safe(row) for row in rows]


def dumps(obj: Any) -> str:
    """
    Serialize rows, parameters or models to a JSON string.

    Unserializable values are rendered with ``str()`` rather than failing,
    so this is safe to call from log statements.

    Args:
        obj: Object to serialize

    Returns:
        JSON string
    """
    try:
        return orjson.dumps(obj, default=_default_handler).decode("utf-8")
    except TypeError:
        return orjson.dumps(obj, default=str).decode("utf-8")
