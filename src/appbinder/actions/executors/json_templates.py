import json
from typing import Any

from appbinder.expression_engine.engine import ExpressionEngine


def to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def render_json_template(engine: ExpressionEngine, value: Any) -> str:
    """Serialize `value` to JSON and render `{{ }}` markers inside the serialized text."""
    return engine.evaluate_template(to_json(value))


def render_header_values(engine: ExpressionEngine, headers: dict[str, Any]) -> dict[str, str]:
    return {
        key: engine.evaluate_template(value if isinstance(value, str) else to_json(value))
        for key, value in headers.items()
    }
