import logging
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Mapping
from typing import Any
from typing import Final
from typing import Optional
from typing import final

import httpx

from appbinder.actions.action_manager import ActionManager
from appbinder.actions.host_handlers import HostHandlers
from appbinder.actions.key_value_store import InMemoryKeyValueStore
from appbinder.actions.key_value_store import JsonFileKeyValueStore
from appbinder.actions.key_value_store import KeyValueStore
from appbinder.actions.types.action_result import ActionResult
from appbinder.config import Config
from appbinder.expression_engine.engine import ExpressionEngine
from appbinder.types.component_data import ComponentData
from appbinder.types.page_info import PageInfo

logger: Final = logging.getLogger(__name__)


def _create_widget_state(component: ComponentData) -> dict[str, Any]:
    return {
        "id": component.id,
        "type": component.type,
        **component.props,
        "visible": component.props.get("visible") is not False,
    }


@final
class Runtime:
    """Binds the expression engine and the action manager to the widgets of one page.

    Widget updates performed by actions are merged into the widget state before they are forwarded to the
    host, and action results become readable as `actions.<id>` in later expressions.
    """

    def __init__(
        self,
        page: PageInfo,
        components: Iterable[ComponentData],
        *,
        config: Optional[Config] = None,
        handlers: Optional[HostHandlers] = None,
        key_value_store: Optional[KeyValueStore] = None,
        http_client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
        enable_bindings: bool = True,
        enable_actions: bool = True,
    ) -> None:
        config = Config() if config is None else config
        self._components: Final = list(components)
        self._enable_bindings: Final = enable_bindings
        self._enable_actions: Final = enable_actions
        self._widgets: dict[str, dict[str, Any]] = {
            component.id: _create_widget_state(component) for component in self._components
        }
        self._action_states: dict[str, Any] = {}

        host_handlers: Final = HostHandlers() if handlers is None else handlers
        self._forward_widget_update: Final = host_handlers.on_widget_update

        self._engine: Final = ExpressionEngine(parse_cache_size=config.parse_cache_size)
        self._engine.update_context(
            widgets=self._widgets,
            actions=self._action_states,
            page={"name": page.name, "route": page.route},
        )
        if key_value_store is None:
            key_value_store = (
                InMemoryKeyValueStore() if config.storage_file is None else JsonFileKeyValueStore(config.storage_file)
            )
        self._action_manager: Final = ActionManager(
            self._engine,
            handlers=host_handlers._replace(on_widget_update=self.update_widget),
            key_value_store=key_value_store,
            http_client_factory=http_client_factory,
            default_http_timeout_ms=config.http_timeout_ms,
        )

    @property
    def engine(self) -> ExpressionEngine:
        return self._engine

    @property
    def action_manager(self) -> ActionManager:
        return self._action_manager

    @property
    def widgets(self) -> Mapping[str, Mapping[str, Any]]:
        return self._widgets

    def evaluate_props(self, component: ComponentData) -> dict[str, Any]:
        if not self._enable_bindings:
            return dict(component.props)
        return {key: self._engine.evaluate_binding(value) for key, value in component.props.items()}

    def render(self) -> list[ComponentData]:
        return [
            component.model_copy(update={"props": self.evaluate_props(component)}) for component in self._components
        ]

    def update_widget(self, widget_id: str, updates: Mapping[str, Any]) -> None:
        if widget_id not in self._widgets:
            logger.warning(f"Updating unknown widget '{widget_id}'")
        self._widgets = {
            **self._widgets,
            widget_id: {**self._widgets.get(widget_id, {"id": widget_id}), **updates},
        }
        self._engine.update_context(widgets=self._widgets)
        self._forward_widget_update(widget_id, updates)

    def set_store(self, store: Mapping[str, Any]) -> None:
        self._engine.update_context(store=dict(store))

    async def run_action(self, action_id: str, params: Optional[Mapping[str, Any]] = None) -> ActionResult:
        if not self._enable_actions:
            return ActionResult.failed("Actions are disabled")
        result: Final = await self._action_manager.run(action_id, params)
        self._record_result(action_id, result)
        return result

    async def run_action_chain(
        self,
        action_ids: list[str],
        params: Optional[Mapping[str, Any]] = None,
    ) -> list[ActionResult]:
        results: Final[list[ActionResult]] = []
        for action_id in action_ids:
            result = await self.run_action(action_id, params)
            results.append(result)
            if not result.success:
                break
        return results

    def _record_result(self, action_id: str, result: ActionResult) -> None:
        self._action_states = {**self._action_states, action_id: result.model_dump()}
        self._engine.update_context(actions=self._action_states)
