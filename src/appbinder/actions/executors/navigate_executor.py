from collections.abc import Mapping
from typing import Any
from typing import Final
from typing import final
from typing import override

from appbinder.actions.executors.action_executor import ActionExecutor
from appbinder.actions.executors.action_executor import ExecutionServices
from appbinder.actions.types.action_result import ActionResult
from appbinder.actions.types.configs import NavigateActionConfig


@final
class NavigateExecutor(ActionExecutor):
    @override
    async def execute(self, config: Mapping[str, Any], services: ExecutionServices) -> ActionResult:
        navigate_config: Final = NavigateActionConfig.model_validate(config)
        engine: Final = services.engine
        path: Final = engine.evaluate_template(navigate_config.path)
        query_params: Final = (
            None
            if navigate_config.query_params is None
            else {key: engine.evaluate_binding(value) for key, value in navigate_config.query_params.items()}
        )
        services.handlers.on_navigation(path, query_params)
        return ActionResult.succeeded({"path": path})
