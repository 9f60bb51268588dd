from typing import Final

from appbinder.expression_engine.types.evaluation_error import ForbiddenKeywordError

FORBIDDEN_KEYWORDS: Final = (
    "eval",
    "Function",
    "constructor",
    "prototype",
    "__proto__",
    "window",
    "document",
    "global",
    "process",
    "require",
    "import",
    "fetch",
    "XMLHttpRequest",
)


def ensure_no_forbidden_keywords(expression: str) -> None:
    """Raise `ForbiddenKeywordError` if any denylisted substring occurs anywhere in the source text.

    This is a plain substring scan, so it also rejects harmless text such as `'evaluation'`.
    """
    for keyword in FORBIDDEN_KEYWORDS:
        if keyword in expression:
            raise ForbiddenKeywordError(keyword)
