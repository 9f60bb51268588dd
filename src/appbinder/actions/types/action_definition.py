from typing import Any
from typing import final

from pydantic import AliasGenerator
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic.alias_generators import to_camel

from appbinder.actions.types.action_type import ActionType


@final
class RetryPolicy(BaseModel):
    """How often an action is attempted when it fails with a transport error or a timeout."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=AliasGenerator(validation_alias=to_camel),
        validate_by_name=True,
    )

    max_attempts: int = Field(default=1, ge=1, le=10)
    backoff_ms: float = Field(default=200.0, ge=0.0)
    backoff_multiplier: float = Field(default=2.0, ge=1.0)
    max_backoff_ms: float = Field(default=10_000.0, ge=0.0)

    def delay_after_attempt_ms(self, attempt: int) -> float:
        """Return the delay (in milliseconds) between the failed `attempt` (1-based) and the next one."""
        return min(self.backoff_ms * self.backoff_multiplier ** (attempt - 1), self.max_backoff_ms)


@final
class ActionDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: ActionType
    config: dict[str, Any] = Field(default_factory=dict)
    retry: RetryPolicy = RetryPolicy()
