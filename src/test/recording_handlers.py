from collections.abc import Mapping
from typing import Any
from typing import Final
from typing import Optional
from typing import final

from appbinder.actions.host_handlers import HostHandlers
from appbinder.actions.host_handlers import ModalAction


@final
class RecordingHandlers:
    """Host handlers that remember every call, in order."""

    def __init__(self) -> None:
        self.calls: Final[list[tuple[str, tuple[Any, ...]]]] = []

    def _record(self, handler: str, *args: Any) -> None:
        self.calls.append((handler, args))

    def calls_to(self, handler: str) -> list[tuple[Any, ...]]:
        return [args for name, args in self.calls if name == handler]

    @property
    def handlers(self) -> HostHandlers:
        def _on_widget_update(widget_id: str, updates: Mapping[str, Any]) -> None:
            self._record("on_widget_update", widget_id, dict(updates))

        def _on_navigation(path: str, query_params: Optional[Mapping[str, Any]]) -> None:
            self._record("on_navigation", path, query_params)

        def _on_modal(modal_id: str, action: ModalAction) -> None:
            self._record("on_modal", modal_id, action)

        def _on_alert(message: str, title: Optional[str]) -> None:
            self._record("on_alert", message, title)

        def _on_toast(message: str, toast_type: str, duration: int) -> None:
            self._record("on_toast", message, toast_type, duration)

        def _on_clipboard(text: str) -> None:
            self._record("on_clipboard", text)

        def _on_download(url: str, filename: str) -> None:
            self._record("on_download", url, filename)

        return HostHandlers(
            on_widget_update=_on_widget_update,
            on_navigation=_on_navigation,
            on_modal=_on_modal,
            on_alert=_on_alert,
            on_toast=_on_toast,
            on_clipboard=_on_clipboard,
            on_download=_on_download,
        )
