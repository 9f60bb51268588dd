import re
from typing import Final

_DEPENDENCY_PATTERN: Final = re.compile(r"\b(widgets|actions|page)\.(\w+)")


def get_dependencies(expression: str) -> list[str]:
    """Return the `widgets.<id>`, `actions.<id>` and `page.<id>` references that appear literally in `expression`.

    The result is deduplicated and ordered by first occurrence. The scan is purely textual: computed
    access such as `widgets[name]` is not reported, and references inside string literals are.
    """
    references: Final = (f"{match.group(1)}.{match.group(2)}" for match in _DEPENDENCY_PATTERN.finditer(expression))
    return list(dict.fromkeys(references))
