from collections.abc import Mapping
from typing import Any
from typing import Final
from typing import final
from typing import override

from appbinder.actions.executors.action_executor import ActionExecutor
from appbinder.actions.executors.action_executor import ExecutionServices
from appbinder.actions.types.action_result import ActionResult
from appbinder.actions.types.configs import RunJSActionConfig
from appbinder.expression_engine.types.evaluation_error import EvaluationError


@final
class RunJSExecutor(ActionExecutor):
    """Evaluates `code` as a single sandboxed expression and returns its value."""

    @override
    async def execute(self, config: Mapping[str, Any], services: ExecutionServices) -> ActionResult:
        run_js_config: Final = RunJSActionConfig.model_validate(config)
        try:
            value: Final = services.engine.evaluate(run_js_config.code, throw_on_error=True)
        except EvaluationError as e:
            return ActionResult.failed(str(e))
        return ActionResult.succeeded(value)
