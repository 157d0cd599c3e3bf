import json
import math
from typing import Any, Union

Value = Union[None, bool, float, str]


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_value(value: Any) -> str:
    """Render a runtime value the way Lox prints it."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        number = float(value)
        if math.isfinite(number) and number.is_integer():
            return str(int(number))
        return repr(number)
    return str(value)


def try_parse_literal(token: str) -> Value:
    """Interpret a textual literal as a runtime value.

    Accepts JSON literals plus `nil` and single-quoted strings. Numbers are
    always returned as floats. Raises `ValueError` for anything else.
    """
    stripped = token.strip()
    if not stripped:
        raise ValueError("empty literal")
    if stripped == "nil":
        return None
    if len(stripped) >= 2 and stripped[0] == stripped[-1] == "'":
        return stripped[1:-1].replace("\\'", "'")

    try:
        literal = json.loads(stripped)
    except json.JSONDecodeError:
        raise ValueError(f"not a literal: {stripped}") from None
    return normalize_value(literal)


def normalize_value(value: Any) -> Value:
    if value is None or isinstance(value, (bool, str)):
        return value
    if is_number(value):
        return float(value)
    raise ValueError(f"unsupported constant: {value!r}")


__all__ = ["Value", "is_number", "format_value", "try_parse_literal", "normalize_value"]
