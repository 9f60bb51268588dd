from typing import Any
from typing import final

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


@final
class ComponentData(BaseModel):
    """A widget placed on a page, as delivered by the render layer."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    props: dict[str, Any] = Field(default_factory=dict)
