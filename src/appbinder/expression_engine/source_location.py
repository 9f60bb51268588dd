from typing import NamedTuple
from typing import final


@final
class SourceLocation(NamedTuple):
    source: str
    offset: int
    length: int

    @property
    def lexeme(self) -> str:
        if self.offset >= len(self.source):
            return ""
        return self.source[self.offset : self.offset + self.length]

    @property
    def line(self) -> int:
        return self.source.count("\n", 0, self.offset) + 1

    @property
    def column(self) -> int:
        last_newline = self.source.rfind("\n", 0, self.offset)
        return self.offset - last_newline

    def describe(self) -> str:
        """Human-readable position, e.g. 'column 7' or 'line 2, column 3' for multi-line code."""
        if "\n" not in self.source:
            return f"column {self.column}"
        return f"line {self.line}, column {self.column}"
