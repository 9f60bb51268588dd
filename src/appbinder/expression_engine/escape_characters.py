"""Escape character mappings for string literals inside expressions."""

from typing import Final

ESCAPE_CHARACTERS: Final[dict[str, str]] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "'": "'",
    '"': '"',
    "\\": "\\",
}
