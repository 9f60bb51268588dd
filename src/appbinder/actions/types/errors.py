from typing import Final
from typing import final


@final
class UnknownStorageOperationError(ValueError):
    def __init__(self, operation: str) -> None:
        super().__init__(f"Unknown localStorage operation: {operation}")
        self.operation: Final = operation


@final
class MissingStorageKeyError(ValueError):
    def __init__(self, operation: str) -> None:
        super().__init__(f"localStorage operation '{operation}' requires a key")
