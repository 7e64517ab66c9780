"""Conversion between stored text and typed cache values."""

import re
from typing import Any

LIST_DELIMITER = ","

_INT_RE = re.compile(r"^[-+]?\d+$")
_FLOAT_RE = re.compile(r"^[-+]?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?$")


def typecast(value: Any) -> Any:
    """
    Convert stored text back into a typed value:
    - "true" / "false" become booleans
    - "null" / "None" become None
    - integer and float text become numbers
    - anything else is returned unchanged
    """
    if isinstance(value, bytes):
        value = value.decode("ascii")
    if not isinstance(value, str):
        return value

    text = value.strip()
    if text == "true":
        return True
    if text == "false":
        return False
    if text in ("null", "None"):
        return None
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    return value


def encode_value(value: Any) -> str:
    """Encode a scalar as text for stores that only hold strings."""
    if isinstance(value, bytes):
        return value.decode("ascii")
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    return str(value)


def encode_list(items: list[Any]) -> str:
    """
    Encode a list as delimiter-joined text.

    The text alone does not mark a list: stores keep that fact next to the
    value (memcached writes encoded lists as bytes, which sets its binary
    flag).
    """
    return LIST_DELIMITER.join(encode_value(item) for item in items)


def decode_list(text: str) -> list[Any]:
    """Decode text produced by encode_list."""
    if not text:
        return []
    return [typecast(item) for item in text.split(LIST_DELIMITER)]


def to_list(value: Any) -> list[Any]:
    """Coerce a stored value into a list for push."""
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    if isinstance(value, tuple):
        return list(value)
    return [value]


def is_number(value: Any) -> bool:
    """Check for int or float, excluding booleans."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)
