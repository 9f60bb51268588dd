from typing import Any
from typing import Optional
from typing import final

from pydantic import AliasGenerator
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic.alias_generators import to_camel


class _ActionConfig(BaseModel):
    # Action configs are authored with camelCase keys; unknown keys are ignored.
    model_config = ConfigDict(
        frozen=True,
        alias_generator=AliasGenerator(validation_alias=to_camel),
        validate_by_name=True,
    )


@final
class HttpActionConfig(_ActionConfig):
    url: str
    method: str = "GET"
    headers: dict[str, Any] = Field(default_factory=dict)
    body: Any = None
    timeout: Optional[float] = Field(default=None, gt=0.0)  # Milliseconds.


@final
class GraphQLActionConfig(_ActionConfig):
    url: str
    query: str
    variables: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, Any] = Field(default_factory=dict)


@final
class UpdateWidgetActionConfig(_ActionConfig):
    widget_id: str
    updates: dict[str, Any] = Field(default_factory=dict)


@final
class NavigateActionConfig(_ActionConfig):
    path: str
    query_params: Optional[dict[str, Any]] = None


@final
class ModalActionConfig(_ActionConfig):
    modal_id: str


@final
class ShowAlertActionConfig(_ActionConfig):
    message: str
    title: Optional[str] = None


@final
class ShowToastActionConfig(_ActionConfig):
    message: str
    type: str = "info"
    duration: int = 3000  # Milliseconds.


@final
class LocalStorageActionConfig(_ActionConfig):
    operation: str
    key: Optional[str] = None
    value: Any = None


@final
class CopyToClipboardActionConfig(_ActionConfig):
    text: str


@final
class DownloadFileActionConfig(_ActionConfig):
    url: str
    filename: str


@final
class RunJSActionConfig(_ActionConfig):
    code: str
