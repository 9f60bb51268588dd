import json
import math
from collections.abc import Mapping
from datetime import date
from typing import Any


def format_number(value: float) -> str:
    """Format a number as an integer if it's a whole number, otherwise as a float."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return str(int(value)) if value.is_integer() else str(value)


def to_display_string(value: Any) -> str:
    """Render a value the way it appears when substituted into a template."""
    match value:
        case None:
            return ""
        case bool():
            return "true" if value else "false"
        case float():
            return format_number(value)
        case int() | str():
            return str(value)
        case list() | tuple():
            return ",".join(to_display_string(element) for element in value)
        case Mapping():
            return json.dumps(value, default=to_display_string, separators=(",", ":"))
        case date():
            return value.isoformat()
        case _:
            return str(value)


def is_truthy(value: Any) -> bool:
    match value:
        case None | False:
            return False
        case bool():
            return True
        case int() | float():
            return value != 0 and not math.isnan(value)
        case str():
            return value != ""
        case _:
            return True


def is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def type_name(value: Any) -> str:
    match value:
        case None:
            return "null"
        case bool():
            return "boolean"
        case int() | float():
            return "number"
        case str():
            return "string"
        case list() | tuple():
            return "array"
        case Mapping():
            return "object"
        case _ if callable(value):
            return "function"
        case _:
            return type(value).__name__
