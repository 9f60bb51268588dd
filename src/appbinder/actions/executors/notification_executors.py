from collections.abc import Mapping
from typing import Any
from typing import Final
from typing import final
from typing import override

from appbinder.actions.executors.action_executor import ActionExecutor
from appbinder.actions.executors.action_executor import ExecutionServices
from appbinder.actions.types.action_result import ActionResult
from appbinder.actions.types.configs import ShowAlertActionConfig
from appbinder.actions.types.configs import ShowToastActionConfig


@final
class ShowAlertExecutor(ActionExecutor):
    @override
    async def execute(self, config: Mapping[str, Any], services: ExecutionServices) -> ActionResult:
        alert_config: Final = ShowAlertActionConfig.model_validate(config)
        engine: Final = services.engine
        message: Final = engine.evaluate_template(alert_config.message)
        title: Final = None if alert_config.title is None else engine.evaluate_template(alert_config.title)
        services.handlers.on_alert(message, title)
        return ActionResult.succeeded({"message": message})


@final
class ShowToastExecutor(ActionExecutor):
    @override
    async def execute(self, config: Mapping[str, Any], services: ExecutionServices) -> ActionResult:
        toast_config: Final = ShowToastActionConfig.model_validate(config)
        message: Final = services.engine.evaluate_template(toast_config.message)
        services.handlers.on_toast(message, toast_config.type, toast_config.duration)
        return ActionResult.succeeded(
            {
                "message": message,
                "type": toast_config.type,
                "duration": toast_config.duration,
            }
        )
