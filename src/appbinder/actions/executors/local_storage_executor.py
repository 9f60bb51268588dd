import json
from collections.abc import Mapping
from typing import Any
from typing import Final
from typing import final
from typing import override

from appbinder.actions.executors.action_executor import ActionExecutor
from appbinder.actions.executors.action_executor import ExecutionServices
from appbinder.actions.executors.json_templates import to_json
from appbinder.actions.types.action_result import ActionResult
from appbinder.actions.types.configs import LocalStorageActionConfig
from appbinder.actions.types.errors import MissingStorageKeyError
from appbinder.actions.types.errors import UnknownStorageOperationError


@final
class LocalStorageExecutor(ActionExecutor):
    """Reads and writes JSON-encoded values in the host's key-value store."""

    @override
    async def execute(self, config: Mapping[str, Any], services: ExecutionServices) -> ActionResult:
        storage_config: Final = LocalStorageActionConfig.model_validate(config)
        store: Final = services.key_value_store
        operation: Final = storage_config.operation

        if operation == "clear":
            store.clear()
            return ActionResult.succeeded()
        if operation not in ("set", "get", "remove"):
            raise UnknownStorageOperationError(operation)
        if storage_config.key is None:
            raise MissingStorageKeyError(operation)

        key: Final = services.engine.evaluate_template(storage_config.key)
        match operation:
            case "set":
                value: Final = services.engine.evaluate_binding(storage_config.value)
                store.set_item(key, to_json(value))
                return ActionResult.succeeded({"key": key, "value": value})
            case "get":
                stored_value: Final = store.get_item(key)
                return ActionResult.succeeded(None if not stored_value else json.loads(stored_value))
            case _:
                store.remove_item(key)
                return ActionResult.succeeded({"key": key})
