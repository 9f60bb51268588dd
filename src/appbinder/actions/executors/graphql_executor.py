import json
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
from appbinder.actions.types.configs import GraphQLActionConfig
from appbinder.expression_engine.types.value import to_display_string


@final
class GraphQLExecutor(ActionExecutor):
    @override
    async def execute(self, config: Mapping[str, Any], services: ExecutionServices) -> ActionResult:
        graphql_config: Final = GraphQLActionConfig.model_validate(config)
        engine: Final = services.engine
        url: Final = engine.evaluate_template(graphql_config.url)
        query: Final = engine.evaluate_template(graphql_config.query)
        # Variables are rendered as JSON text, so a marker may produce any JSON value.
        variables: Final = json.loads(render_json_template(engine, graphql_config.variables))
        headers: Final = httpx.Headers({"Content-Type": "application/json"})
        headers.update(render_header_values(engine, graphql_config.headers))

        async with services.http_client_factory() as client:
            response: Final = await client.post(url, headers=headers, json={"query": query, "variables": variables})
        result: Final = response.json()

        errors: Final = result.get("errors")
        if errors:
            messages: Final = (
                to_display_string(error.get("message")) if isinstance(error, dict) else to_display_string(error)
                for error in errors
            )
            return ActionResult.failed(", ".join(messages), data=result.get("data"))
        return ActionResult.succeeded(result.get("data"))
