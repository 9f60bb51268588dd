import asyncio
import logging
from collections.abc import Callable
from collections.abc import Mapping
from typing import Any
from typing import Final
from typing import Optional
from typing import final

import httpx

from appbinder.actions.executors.action_executor import ActionExecutor
from appbinder.actions.executors.action_executor import ExecutionServices
from appbinder.actions.executors.graphql_executor import GraphQLExecutor
from appbinder.actions.executors.host_capability_executors import CopyToClipboardExecutor
from appbinder.actions.executors.host_capability_executors import DownloadFileExecutor
from appbinder.actions.executors.http_executor import HttpExecutor
from appbinder.actions.executors.local_storage_executor import LocalStorageExecutor
from appbinder.actions.executors.modal_executor import ModalExecutor
from appbinder.actions.executors.navigate_executor import NavigateExecutor
from appbinder.actions.executors.notification_executors import ShowAlertExecutor
from appbinder.actions.executors.notification_executors import ShowToastExecutor
from appbinder.actions.executors.run_js_executor import RunJSExecutor
from appbinder.actions.executors.update_widget_executor import UpdateWidgetExecutor
from appbinder.actions.host_handlers import HostHandlers
from appbinder.actions.host_handlers import ModalAction
from appbinder.actions.key_value_store import InMemoryKeyValueStore
from appbinder.actions.key_value_store import KeyValueStore
from appbinder.actions.types.action_definition import ActionDefinition
from appbinder.actions.types.action_result import ActionResult
from appbinder.actions.types.action_type import ActionType
from appbinder.expression_engine.engine import ExpressionEngine
from appbinder.expression_engine.types.value import format_number

logger: Final = logging.getLogger(__name__)

type ActionListener = Callable[[ActionResult], None]

_EXECUTORS: Final[dict[ActionType, ActionExecutor]] = {
    ActionType.HTTP: HttpExecutor(),
    ActionType.GRAPHQL: GraphQLExecutor(),
    ActionType.UPDATE_WIDGET: UpdateWidgetExecutor(),
    ActionType.NAVIGATE: NavigateExecutor(),
    ActionType.OPEN_MODAL: ModalExecutor(ModalAction.OPEN),
    ActionType.CLOSE_MODAL: ModalExecutor(ModalAction.CLOSE),
    ActionType.SHOW_ALERT: ShowAlertExecutor(),
    ActionType.SHOW_TOAST: ShowToastExecutor(),
    ActionType.LOCAL_STORAGE: LocalStorageExecutor(),
    ActionType.COPY_TO_CLIPBOARD: CopyToClipboardExecutor(),
    ActionType.DOWNLOAD_FILE: DownloadFileExecutor(),
    ActionType.RUN_JS: RunJSExecutor(),
}

if set(_EXECUTORS) != set(ActionType):
    _missing_types: Final = set(ActionType) - set(_EXECUTORS)
    _msg: Final = f"No executor registered for action types: {_missing_types}"
    raise AssertionError(_msg)

# Only failures that may go away on their own are retried.
_RETRYABLE_ERRORS: Final = (httpx.TransportError, TimeoutError)


def _create_default_http_client() -> httpx.AsyncClient:
    # Timeouts are enforced per action, so the client itself must not time out earlier.
    return httpx.AsyncClient(timeout=None)


def _describe_error(error: Exception) -> str:
    return str(error) or type(error).__name__


@final
class ActionManager:
    """Registry and executor for the actions of one page.

    Every run produces an `ActionResult`; failures never propagate to the caller. Runs of the same action
    are serialized, runs of different actions are independent.
    """

    def __init__(
        self,
        engine: ExpressionEngine,
        *,
        handlers: Optional[HostHandlers] = None,
        key_value_store: Optional[KeyValueStore] = None,
        http_client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
        default_http_timeout_ms: float = 30_000.0,
    ) -> None:
        self._services: Final = ExecutionServices(
            engine=engine,
            handlers=HostHandlers() if handlers is None else handlers,
            key_value_store=InMemoryKeyValueStore() if key_value_store is None else key_value_store,
            http_client_factory=_create_default_http_client if http_client_factory is None else http_client_factory,
            default_http_timeout_ms=default_http_timeout_ms,
        )
        self._actions: Final[dict[str, ActionDefinition]] = {}
        self._results: Final[dict[str, ActionResult]] = {}
        self._listeners: Final[dict[str, set[ActionListener]]] = {}
        self._locks: Final[dict[str, asyncio.Lock]] = {}

    @property
    def action_ids(self) -> list[str]:
        return list(self._actions)

    def register_action(self, definition: ActionDefinition) -> None:
        if definition.id in self._actions:
            logger.debug(f"Replacing action '{definition.id}'")
        self._actions[definition.id] = definition

    def unregister_action(self, action_id: str) -> None:
        self._actions.pop(action_id, None)
        self._listeners.pop(action_id, None)
        self._results.pop(action_id, None)
        # A held lock stays, so a run started after re-registering still waits for the one in flight.
        lock: Final = self._locks.get(action_id)
        if lock is not None and not lock.locked():
            del self._locks[action_id]

    def get_action(self, action_id: str) -> Optional[ActionDefinition]:
        return self._actions.get(action_id)

    def get_result(self, action_id: str) -> Optional[ActionResult]:
        return self._results.get(action_id)

    def add_listener(self, action_id: str, listener: ActionListener) -> None:
        self._listeners.setdefault(action_id, set()).add(listener)

    def remove_listener(self, action_id: str, listener: ActionListener) -> None:
        listeners: Final = self._listeners.get(action_id)
        if listeners is not None:
            listeners.discard(listener)

    async def run(self, action_id: str, params: Optional[Mapping[str, Any]] = None) -> ActionResult:
        if action_id not in self._actions:
            return self._complete_not_found(action_id)

        async with self._locks.setdefault(action_id, asyncio.Lock()):
            definition: Final = self._actions.get(action_id)
            if definition is None:
                return self._complete_not_found(action_id)
            logger.debug(f"Running action '{action_id}' ({definition.type})")
            result: Final = await self._execute_with_retry(definition, params)
            if result.success:
                logger.info(f"Action '{action_id}' succeeded")
            else:
                logger.warning(f"Action '{action_id}' failed: {result.error}")
            if self._actions.get(action_id) is not definition:
                logger.info(f"Action '{action_id}' was unregistered while running, discarding its result")
                return result
            return self._complete(action_id, result)

    async def run_action_chain(
        self,
        action_ids: list[str],
        params: Optional[Mapping[str, Any]] = None,
    ) -> list[ActionResult]:
        results: Final[list[ActionResult]] = []
        for action_id in action_ids:
            result = await self.run(action_id, params)
            results.append(result)
            if not result.success:
                break
        return results

    async def _execute_with_retry(
        self,
        definition: ActionDefinition,
        params: Optional[Mapping[str, Any]],
    ) -> ActionResult:
        config: Final = {**definition.config, **(params or {})}
        executor: Final = _EXECUTORS[definition.type]
        retry: Final = definition.retry
        attempt = 1
        while True:
            try:
                return await executor.execute(config, self._services)
            except _RETRYABLE_ERRORS as e:
                if attempt >= retry.max_attempts:
                    return ActionResult.failed(_describe_error(e))
                delay_ms = retry.delay_after_attempt_ms(attempt)
                logger.warning(
                    f"Attempt {attempt}/{retry.max_attempts} of action '{definition.id}' failed: "
                    + f"{_describe_error(e)}. Retrying in {format_number(delay_ms)} ms."
                )
                await asyncio.sleep(delay_ms / 1000.0)
                attempt += 1
            except Exception as e:
                return ActionResult.failed(_describe_error(e))

    def _complete_not_found(self, action_id: str) -> ActionResult:
        logger.warning(f"Action not found: {action_id}")
        return self._complete(action_id, ActionResult.failed(f"Action not found: {action_id}"))

    def _complete(self, action_id: str, result: ActionResult) -> ActionResult:
        self._results[action_id] = result
        for listener in list(self._listeners.get(action_id, ())):
            try:
                listener(result)
            except Exception:
                logger.exception(f"Listener of action '{action_id}' raised an exception")
        return result
