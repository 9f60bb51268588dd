import re
from collections.abc import Callable
from typing import Final
from typing import Optional

# The first `}` terminates a marker, so nested braces inside a marker are not supported.
_MARKER_PATTERN: Final = re.compile(r"\{\{([^}]+)\}\}")


def has_expression(text: str) -> bool:
    return _MARKER_PATTERN.search(text) is not None


def extract_expressions(text: str) -> list[str]:
    return [match.group(1).strip() for match in _MARKER_PATTERN.finditer(text)]


def single_expression(text: str) -> Optional[str]:
    """Return the marker body if `text` consists of exactly one marker, otherwise `None`."""
    match: Final = _MARKER_PATTERN.fullmatch(text.strip())
    return None if match is None else match.group(1).strip()


def render_template(template: str, render_expression: Callable[[str], str]) -> str:
    return _MARKER_PATTERN.sub(lambda match: render_expression(match.group(1).strip()), template)
