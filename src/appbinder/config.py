import os
from pathlib import Path
from typing import Final
from typing import Optional
from typing import final

from dotenv import load_dotenv

HTTP_TIMEOUT_ENV_VARIABLE = "APPBINDER_HTTP_TIMEOUT_MS"
PARSE_CACHE_SIZE_ENV_VARIABLE = "APPBINDER_PARSE_CACHE_SIZE"
STORAGE_FILE_ENV_VARIABLE = "APPBINDER_STORAGE_FILE"
LOG_LEVEL_ENV_VARIABLE = "APPBINDER_LOG_LEVEL"

_LOG_LEVELS: Final = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

load_dotenv()


def get_environment_variable_or_default(
    key: str,
    default: str | None,
) -> str | None:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def _parse_positive_number(key: str, value: str) -> float:
    try:
        number: Final = float(value)
    except ValueError as e:
        raise ValueError(f"Environment variable '{key}' must be a number, got '{value}'.") from e
    if not number > 0:
        raise ValueError(f"Environment variable '{key}' must be positive, got '{value}'.")
    return number


@final
class Config:
    def __init__(self) -> None:
        self._http_timeout_ms: Optional[float] = None
        self._parse_cache_size: Optional[int] = None
        self._storage_file: Optional[Path] = None
        self._log_level: Optional[str] = None
        self.reload()

    def reload(self) -> None:
        load_dotenv()
        self._http_timeout_ms = _parse_positive_number(
            HTTP_TIMEOUT_ENV_VARIABLE,
            get_environment_variable_or_default(HTTP_TIMEOUT_ENV_VARIABLE, "30000") or "30000",
        )
        parse_cache_size: Final = _parse_positive_number(
            PARSE_CACHE_SIZE_ENV_VARIABLE,
            get_environment_variable_or_default(PARSE_CACHE_SIZE_ENV_VARIABLE, "512") or "512",
        )
        if not parse_cache_size.is_integer():
            raise ValueError(
                f"Environment variable '{PARSE_CACHE_SIZE_ENV_VARIABLE}' must be an integer, got '{parse_cache_size}'."
            )
        self._parse_cache_size = int(parse_cache_size)
        storage_file: Final = get_environment_variable_or_default(STORAGE_FILE_ENV_VARIABLE, None)
        self._storage_file = None if storage_file is None else Path(storage_file)
        log_level: Final = (get_environment_variable_or_default(LOG_LEVEL_ENV_VARIABLE, "INFO") or "INFO").upper()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"Environment variable '{LOG_LEVEL_ENV_VARIABLE}' has invalid value '{log_level}'.")
        self._log_level = log_level

    @property
    def http_timeout_ms(self) -> float:
        if self._http_timeout_ms is None:
            raise AssertionError("HTTP timeout is not set. This should not happen.")
        return self._http_timeout_ms

    @property
    def parse_cache_size(self) -> int:
        if self._parse_cache_size is None:
            raise AssertionError("Parse cache size is not set. This should not happen.")
        return self._parse_cache_size

    @property
    def storage_file(self) -> Optional[Path]:
        return self._storage_file

    @property
    def log_level(self) -> str:
        if self._log_level is None:
            raise AssertionError("Log level is not set. This should not happen.")
        return self._log_level
