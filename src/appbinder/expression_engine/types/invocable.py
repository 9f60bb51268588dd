from abc import ABC
from abc import abstractmethod
from typing import Any


class Invocable(ABC):
    """Base class of everything an expression is allowed to call."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def __call__(self, *args: Any) -> Any: ...
