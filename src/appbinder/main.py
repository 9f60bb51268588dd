import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from appbinder.config import Config
from appbinder.runtime import Runtime
from appbinder.types.run_document import RunDocument

logger: Final = logging.getLogger(__name__)


def _parse_arguments(argv: list[str]) -> argparse.Namespace:
    parser: Final = argparse.ArgumentParser(
        prog="appbinder-run",
        description="Evaluate the bindings of a page and run its actions.",
    )
    parser.add_argument("document", type=Path, help="Path to a JSON document with page, components and actions")
    parser.add_argument("action_ids", nargs="*", help="Actions to run in order; stops at the first failure")
    parser.add_argument("--render", action="store_true", help="Print the evaluated components instead")
    return parser.parse_args(argv)


def _print_json(value: object) -> None:
    print(json.dumps(value, indent=2, default=str))


def main(argv: list[str] | None = None) -> int:
    arguments: Final = _parse_arguments(sys.argv[1:] if argv is None else argv)
    config: Final = Config()
    logging.basicConfig(level=config.log_level)

    try:
        document: Final = RunDocument.model_validate_json(arguments.document.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        logger.error(f"Unable to read '{arguments.document}': {e}")
        return 2

    runtime: Final = Runtime(document.page, document.components, config=config)
    runtime.set_store(document.store)
    for definition in document.actions:
        runtime.action_manager.register_action(definition)

    if arguments.render:
        _print_json([component.model_dump() for component in runtime.render()])
        return 0

    results: Final = asyncio.run(runtime.run_action_chain(arguments.action_ids))
    _print_json(
        [
            {"id": action_id, "result": result.model_dump()}
            for action_id, result in zip(arguments.action_ids, results, strict=False)
        ]
    )
    return 0 if all(result.success for result in results) else 1


if __name__ == "__main__":
    sys.exit(main())
