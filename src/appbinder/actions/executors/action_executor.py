from abc import ABC
from abc import abstractmethod
from collections.abc import Callable
from collections.abc import Mapping
from typing import Any
from typing import NamedTuple
from typing import final

import httpx

from appbinder.actions.host_handlers import HostHandlers
from appbinder.actions.key_value_store import KeyValueStore
from appbinder.actions.types.action_result import ActionResult
from appbinder.expression_engine.engine import ExpressionEngine


@final
class ExecutionServices(NamedTuple):
    engine: ExpressionEngine
    handlers: HostHandlers
    key_value_store: KeyValueStore
    http_client_factory: Callable[[], httpx.AsyncClient]  # Must return a fresh client; it is closed after use.
    default_http_timeout_ms: float


class ActionExecutor(ABC):
    @abstractmethod
    async def execute(self, config: Mapping[str, Any], services: ExecutionServices) -> ActionResult:
        """
        Run one action of this executor's type.
        :param config: The action's configuration, already merged with the run's parameters.
        :param services: The engine and host capabilities the action may use.
        :return: The normalized result. Unexpected failures are raised and normalized by the caller.
        """
        pass
