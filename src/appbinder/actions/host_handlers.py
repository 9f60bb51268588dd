import logging
from collections.abc import Callable
from collections.abc import Mapping
from enum import StrEnum
from typing import Any
from typing import Final
from typing import NamedTuple
from typing import Optional
from typing import final

logger: Final = logging.getLogger(__name__)


@final
class ModalAction(StrEnum):
    OPEN = "open"
    CLOSE = "close"


def _log_widget_update(widget_id: str, updates: Mapping[str, Any]) -> None:
    logger.info(f"Widget '{widget_id}' updated: {dict(updates)}")


def _log_navigation(path: str, query_params: Optional[Mapping[str, Any]]) -> None:
    logger.info(f"Navigating to '{path}' (query parameters: {query_params})")


def _log_modal(modal_id: str, action: ModalAction) -> None:
    logger.info(f"Modal '{modal_id}': {action}")


def _log_alert(message: str, title: Optional[str]) -> None:
    logger.info(f"[Alert{'' if title is None else f' {title}'}]: {message}")


def _log_toast(message: str, toast_type: str, duration: int) -> None:
    logger.info(f"[Toast {toast_type}, {duration} ms]: {message}")


def _log_clipboard(text: str) -> None:
    logger.info(f"Copied to clipboard: {text}")


def _log_download(url: str, filename: str) -> None:
    logger.info(f"Downloading '{url}' as '{filename}'")


@final
class HostHandlers(NamedTuple):
    """Callbacks through which actions reach the host application. Every slot defaults to logging only."""

    on_widget_update: Callable[[str, Mapping[str, Any]], None] = _log_widget_update
    on_navigation: Callable[[str, Optional[Mapping[str, Any]]], None] = _log_navigation
    on_modal: Callable[[str, ModalAction], None] = _log_modal
    on_alert: Callable[[str, Optional[str]], None] = _log_alert
    on_toast: Callable[[str, str, int], None] = _log_toast
    on_clipboard: Callable[[str], None] = _log_clipboard
    on_download: Callable[[str, str], None] = _log_download
