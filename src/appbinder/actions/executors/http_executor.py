import asyncio
import logging
from collections.abc import Mapping
from typing import Any
from typing import Final
from typing import final
from typing import override

import httpx

from appbinder.actions.executors.action_executor import ActionExecutor
from appbinder.actions.executors.action_executor import ExecutionServices
from appbinder.actions.executors.json_templates import render_header_values
from appbinder.actions.executors.json_templates import render_json_template
from appbinder.actions.types.action_result import ActionResult
from appbinder.actions.types.configs import HttpActionConfig
from appbinder.expression_engine.types.value import format_number

logger: Final = logging.getLogger(__name__)


@final
class HttpExecutor(ActionExecutor):
    """Sends an HTTP request. The URL, header values and body may contain `{{ }}` markers."""

    @override
    async def execute(self, config: Mapping[str, Any], services: ExecutionServices) -> ActionResult:
        http_config: Final = HttpActionConfig.model_validate(config)
        engine: Final = services.engine
        url: Final = engine.evaluate_template(http_config.url)
        headers: Final = httpx.Headers({"Content-Type": "application/json"})
        headers.update(render_header_values(engine, http_config.headers))
        body: Final = None if http_config.body is None else render_json_template(engine, http_config.body)
        timeout_ms: Final = (
            services.default_http_timeout_ms if http_config.timeout is None else http_config.timeout
        )

        logger.debug(f"{http_config.method.upper()} {url} (timeout: {format_number(timeout_ms)} ms)")
        async with services.http_client_factory() as client:
            try:
                response: Final = await asyncio.wait_for(
                    client.request(http_config.method.upper(), url, headers=headers, content=body),
                    timeout=timeout_ms / 1000.0,
                )
            except TimeoutError as e:
                msg: Final = f"Request timed out after {format_number(timeout_ms)} ms"
                raise TimeoutError(msg) from e

        content_type: Final = response.headers.get("content-type", "")
        data: Final = response.json() if "application/json" in content_type else response.text
        if not response.is_success:
            return ActionResult.failed(f"HTTP {response.status_code}: {response.reason_phrase}", data=data)
        return ActionResult.succeeded(data)
