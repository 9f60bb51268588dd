from typing import Any
from typing import final

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from appbinder.actions.types.action_definition import ActionDefinition
from appbinder.types.component_data import ComponentData
from appbinder.types.page_info import PageInfo


@final
class RunDocument(BaseModel):
    """A page together with its widgets, actions and initial global state, as read by `appbinder-run`."""

    model_config = ConfigDict(frozen=True)

    page: PageInfo
    components: list[ComponentData] = Field(default_factory=list)
    actions: list[ActionDefinition] = Field(default_factory=list)
    store: dict[str, Any] = Field(default_factory=dict)
