from collections.abc import Mapping
from typing import Any
from typing import Final
from typing import final
from typing import override

from appbinder.actions.executors.action_executor import ActionExecutor
from appbinder.actions.executors.action_executor import ExecutionServices
from appbinder.actions.types.action_result import ActionResult
from appbinder.actions.types.configs import CopyToClipboardActionConfig
from appbinder.actions.types.configs import DownloadFileActionConfig


@final
class CopyToClipboardExecutor(ActionExecutor):
    @override
    async def execute(self, config: Mapping[str, Any], services: ExecutionServices) -> ActionResult:
        clipboard_config: Final = CopyToClipboardActionConfig.model_validate(config)
        text: Final = services.engine.evaluate_template(clipboard_config.text)
        services.handlers.on_clipboard(text)
        return ActionResult.succeeded({"text": text})


@final
class DownloadFileExecutor(ActionExecutor):
    @override
    async def execute(self, config: Mapping[str, Any], services: ExecutionServices) -> ActionResult:
        download_config: Final = DownloadFileActionConfig.model_validate(config)
        engine: Final = services.engine
        url: Final = engine.evaluate_template(download_config.url)
        filename: Final = engine.evaluate_template(download_config.filename)
        services.handlers.on_download(url, filename)
        return ActionResult.succeeded({"url": url, "filename": filename})
