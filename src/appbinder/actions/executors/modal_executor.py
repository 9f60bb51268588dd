from collections.abc import Mapping
from typing import Any
from typing import Final
from typing import final
from typing import override

from appbinder.actions.executors.action_executor import ActionExecutor
from appbinder.actions.executors.action_executor import ExecutionServices
from appbinder.actions.host_handlers import ModalAction
from appbinder.actions.types.action_result import ActionResult
from appbinder.actions.types.configs import ModalActionConfig


@final
class ModalExecutor(ActionExecutor):
    """Opens or closes a modal, depending on the `ModalAction` this executor was created with."""

    def __init__(self, modal_action: ModalAction) -> None:
        self._modal_action: Final = modal_action

    @override
    async def execute(self, config: Mapping[str, Any], services: ExecutionServices) -> ActionResult:
        modal_config: Final = ModalActionConfig.model_validate(config)
        services.handlers.on_modal(modal_config.modal_id, self._modal_action)
        return ActionResult.succeeded({"modalId": modal_config.modal_id, "action": str(self._modal_action)})
