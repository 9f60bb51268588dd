from typing import Any
from typing import Optional
from typing import Self
from typing import final

from pydantic import BaseModel
from pydantic import ConfigDict


@final
class ActionResult(BaseModel):
    """The outcome of running an action, independent of the action's type."""

    model_config = ConfigDict(frozen=True)

    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def succeeded(cls, data: Any = None) -> Self:
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, error: str, data: Any = None) -> Self:
        return cls(success=False, data=data, error=error)
