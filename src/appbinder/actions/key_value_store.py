import json
import logging
import os
from abc import ABC
from abc import abstractmethod
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Final
from typing import Optional
from typing import final
from typing import override

logger: Final = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """A flat string-to-string map. Values written by actions are JSON-encoded."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]: ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None: ...

    @abstractmethod
    def remove_item(self, key: str) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...


@final
class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self) -> None:
        self._items: Final[dict[str, str]] = {}

    @override
    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    @override
    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    @override
    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    @override
    def clear(self) -> None:
        self._items.clear()


@final
class JsonFileKeyValueStore(KeyValueStore):
    """Keeps all items in a single JSON object on disk. Every change rewrites the file atomically."""

    def __init__(self, path: Path) -> None:
        self._path: Final = path
        self._items: Final[dict[str, str]] = JsonFileKeyValueStore._load(path)

    @override
    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    @override
    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._write()

    @override
    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._write()

    @override
    def clear(self) -> None:
        self._items.clear()
        self._write()

    @staticmethod
    def _load(path: Path) -> dict[str, str]:
        try:
            content: Final = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        items: Final = json.loads(content) if content.strip() else {}
        if not isinstance(items, dict) or not all(isinstance(value, str) for value in items.values()):
            msg: Final = f"Storage file '{path}' must contain a JSON object with string values."
            raise ValueError(msg)
        logger.debug(f"Loaded {len(items)} item(s) from '{path}'")
        return items

    def _write(self) -> None:
        # Atomic write (temp file + os.replace).
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile("w", encoding="utf-8", dir=str(self._path.parent), delete=False) as tmp:
            json.dump(self._items, tmp, indent=2)
            tmp.flush()
            os.fsync(tmp.fileno())
            tmp_path = tmp.name
        os.replace(tmp_path, self._path)
