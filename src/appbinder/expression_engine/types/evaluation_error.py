from typing import Final
from typing import Optional
from typing import final


class EvaluationError(RuntimeError):
    """Raised when an expression cannot be evaluated. `cause` holds the underlying exception, if any."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause: Final = cause


@final
class ForbiddenKeywordError(EvaluationError):
    def __init__(self, keyword: str) -> None:
        super().__init__(f"Forbidden keyword in expression: {keyword}")
        self.keyword: Final = keyword


class ExpressionSyntaxError(EvaluationError): ...
