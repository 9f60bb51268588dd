from enum import StrEnum
from typing import final


@final
class ActionType(StrEnum):
    HTTP = "http"
    GRAPHQL = "graphql"
    UPDATE_WIDGET = "updateWidget"
    NAVIGATE = "navigate"
    OPEN_MODAL = "openModal"
    CLOSE_MODAL = "closeModal"
    SHOW_ALERT = "showAlert"
    SHOW_TOAST = "showToast"
    LOCAL_STORAGE = "localStorage"
    COPY_TO_CLIPBOARD = "copyToClipboard"
    DOWNLOAD_FILE = "downloadFile"
    RUN_JS = "runJS"
