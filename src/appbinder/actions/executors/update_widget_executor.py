from collections.abc import Mapping
from typing import Any
from typing import Final
from typing import final
from typing import override

from appbinder.actions.executors.action_executor import ActionExecutor
from appbinder.actions.executors.action_executor import ExecutionServices
from appbinder.actions.types.action_result import ActionResult
from appbinder.actions.types.configs import UpdateWidgetActionConfig


@final
class UpdateWidgetExecutor(ActionExecutor):
    """Applies `updates` to a widget. A value that is exactly one `{{ }}` marker keeps its native type,
    while a string mixing text and markers, like `"Amount: {{ x }}"`, is rendered as a template.
    """

    @override
    async def execute(self, config: Mapping[str, Any], services: ExecutionServices) -> ActionResult:
        update_config: Final = UpdateWidgetActionConfig.model_validate(config)
        engine: Final = services.engine
        widget_id: Final = engine.evaluate_template(update_config.widget_id)
        updates: Final = {key: engine.evaluate_binding(value) for key, value in update_config.updates.items()}
        services.handlers.on_widget_update(widget_id, updates)
        return ActionResult.succeeded({"widgetId": widget_id, "updates": updates})
