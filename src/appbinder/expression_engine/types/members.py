"""
Member and index access for expression values. Only mapping keys and a closed set of
string and array members are reachable; Python attributes never are.
"""

from collections.abc import Callable
from collections.abc import Mapping
from typing import Any
from typing import Final
from typing import final
from typing import override

from appbinder.expression_engine.types.evaluation_error import EvaluationError
from appbinder.expression_engine.types.invocable import Invocable
from appbinder.expression_engine.types.value import is_number
from appbinder.expression_engine.types.value import is_truthy
from appbinder.expression_engine.types.value import to_display_string
from appbinder.expression_engine.types.value import type_name


def _expect_callback(method: str, value: Any) -> Invocable:
    if not isinstance(value, Invocable):
        msg: Final = f"'{method}' requires a function argument, got '{type_name(value)}'"
        raise EvaluationError(msg)
    return value


def _expect_string_argument(method: str, value: Any) -> str:
    if not isinstance(value, str):
        msg: Final = f"'{method}' requires a string argument, got '{type_name(value)}'"
        raise EvaluationError(msg)
    return value


def _slice(sequence: Any, start: Any = 0, end: Any = None) -> Any:
    if not is_number(start) or (end is not None and not is_number(end)):
        raise EvaluationError("'slice' requires number arguments")
    return sequence[int(start) : None if end is None else int(end)]


def _index_of(sequence: Any, element: Any) -> int:
    try:
        return sequence.index(element)
    except ValueError:
        return -1


_STRING_METHODS: Final[dict[str, Callable[..., Any]]] = {
    "toUpperCase": lambda text: text.upper(),
    "toLowerCase": lambda text: text.lower(),
    "trim": lambda text: text.strip(),
    "includes": lambda text, part: _expect_string_argument("includes", part) in text,
    "startsWith": lambda text, part: text.startswith(_expect_string_argument("startsWith", part)),
    "endsWith": lambda text, part: text.endswith(_expect_string_argument("endsWith", part)),
    "indexOf": lambda text, part: text.find(_expect_string_argument("indexOf", part)),
    "split": lambda text, separator: (
        list(text) if separator == "" else text.split(_expect_string_argument("split", separator))
    ),
    "replace": lambda text, old, new: text.replace(
        _expect_string_argument("replace", old), to_display_string(new), 1
    ),
    "slice": _slice,
}

_ARRAY_METHODS: Final[dict[str, Callable[..., Any]]] = {
    "includes": lambda elements, element: element in elements,
    "indexOf": _index_of,
    "join": lambda elements, separator=",": _expect_string_argument("join", separator).join(
        to_display_string(element) for element in elements
    ),
    "map": lambda elements, callback: [_expect_callback("map", callback)(element) for element in elements],
    "filter": lambda elements, callback: [
        element for element in elements if is_truthy(_expect_callback("filter", callback)(element))
    ],
    "find": lambda elements, callback: next(
        (element for element in elements if is_truthy(_expect_callback("find", callback)(element))),
        None,
    ),
    "some": lambda elements, callback: any(is_truthy(_expect_callback("some", callback)(e)) for e in elements),
    "every": lambda elements, callback: all(is_truthy(_expect_callback("every", callback)(e)) for e in elements),
    "slice": _slice,
}


@final
class BoundMethod(Invocable):
    def __init__(self, receiver: Any, name: str, implementation: Callable[..., Any]) -> None:
        self._receiver: Final = receiver
        self._name: Final = name
        self._implementation: Final = implementation

    @property
    @override
    def name(self) -> str:
        return self._name

    @override
    def __call__(self, *args: Any) -> Any:
        try:
            return self._implementation(self._receiver, *args)
        except TypeError as e:
            msg: Final = f"Invalid arguments for '{self._name}': {e}"
            raise EvaluationError(msg, e) from e


def get_member(value: Any, name: str) -> Any:
    """Read `value.name`. Missing members yield `None`; reading from `None` fails."""
    match value:
        case None:
            msg: Final = f"Cannot read properties of null (reading '{name}')"
            raise EvaluationError(msg)
        case Mapping():
            return value.get(name)
        case str() | list() | tuple() if name == "length":
            return len(value)
        case str() if name in _STRING_METHODS:
            return BoundMethod(value, name, _STRING_METHODS[name])
        case list() | tuple() if name in _ARRAY_METHODS:
            return BoundMethod(value, name, _ARRAY_METHODS[name])
        case _:
            return None


def get_index(value: Any, index: Any) -> Any:
    """Read `value[index]`. Out-of-range positions yield `None`."""
    match value, index:
        case None, _:
            msg: Final = f"Cannot read properties of null (reading '{to_display_string(index)}')"
            raise EvaluationError(msg)
        case Mapping(), str():
            return value.get(index)
        case Mapping(), _:
            return value.get(to_display_string(index))
        case str() | list() | tuple(), int() | float() if is_number(index):
            if not float(index).is_integer() or not 0 <= index < len(value):
                return None
            return value[int(index)]
        case _, str():
            return get_member(value, index)
        case _:
            return None
