import json
import math
import time
from abc import abstractmethod
from collections.abc import Callable
from collections.abc import Mapping
from datetime import UTC
from datetime import date
from datetime import datetime
from random import Random
from typing import Any
from typing import Final
from typing import NamedTuple
from typing import Optional
from typing import final
from typing import override
from uuid import uuid4

from babel.dates import format_date
from babel.dates import format_datetime
from babel.numbers import format_currency

from appbinder.expression_engine.types.evaluation_error import EvaluationError
from appbinder.expression_engine.types.invocable import Invocable
from appbinder.expression_engine.types.value import format_number
from appbinder.expression_engine.types.value import is_number
from appbinder.expression_engine.types.value import is_truthy
from appbinder.expression_engine.types.value import to_display_string
from appbinder.expression_engine.types.value import type_name

_random: Final = Random()

_LOCALE: Final = "en_US"


@final
class ArgumentRange(NamedTuple):
    """Marks a utility as accepting between `minimum` and `maximum` (inclusive) arguments."""

    minimum: int
    maximum: Optional[int]


class UtilityFunction(Invocable):
    def __init__(self, name: str) -> None:
        self._name: Final = name

    @property
    @override
    def name(self) -> str:
        return self._name

    @property
    @abstractmethod
    def arity(self) -> int | ArgumentRange:
        """Return the number of arguments this utility expects."""

    @abstractmethod
    def execute(self, *args: Any) -> Any:
        """Execute the utility with already-evaluated arguments."""

    @final
    @override
    def __call__(self, *args: Any) -> Any:
        match self.arity:
            case int() as arity:
                if len(args) != arity:
                    msg = f"'utils.{self._name}' expects {arity} argument(s), got {len(args)}"
                    raise EvaluationError(msg)
            case ArgumentRange(minimum=minimum, maximum=maximum):
                if len(args) < minimum or (maximum is not None and len(args) > maximum):
                    expected = f"at least {minimum}" if maximum is None else f"{minimum} to {maximum}"
                    msg = f"'utils.{self._name}' expects {expected} argument(s), got {len(args)}"
                    raise EvaluationError(msg)
        return self.execute(*args)

    def __repr__(self) -> str:
        return f"<utils.{self._name}>"


@final
class _SimpleUtility(UtilityFunction):
    """Utility backed by a plain function with a fixed argument count."""

    def __init__(self, name: str, arity: int | ArgumentRange, function: Callable[..., Any]) -> None:
        super().__init__(name)
        self._arity: Final = arity
        self._function: Final = function

    @property
    @override
    def arity(self) -> int | ArgumentRange:
        return self._arity

    @override
    def execute(self, *args: Any) -> Any:
        return self._function(*args)


@final
class HostUtility(UtilityFunction):
    """Utility registered by the host application. Argument checking is left to the function itself."""

    def __init__(self, name: str, function: Callable[..., Any]) -> None:
        super().__init__(name)
        self._function: Final = function

    @property
    @override
    def arity(self) -> int | ArgumentRange:
        return ArgumentRange(minimum=0, maximum=None)

    @override
    def execute(self, *args: Any) -> Any:
        return self._function(*args)


def _expect_string(utility: str, value: Any) -> str:
    if not isinstance(value, str):
        msg: Final = f"'utils.{utility}' requires a string argument, got '{type_name(value)}'"
        raise EvaluationError(msg)
    return value


def _expect_number(utility: str, value: Any) -> float:
    if not is_number(value):
        msg: Final = f"'utils.{utility}' requires a number argument, got '{type_name(value)}'"
        raise EvaluationError(msg)
    return value


def _expect_numbers(utility: str, value: Any) -> list[float]:
    if not isinstance(value, list | tuple):
        msg: Final = f"'utils.{utility}' requires an array argument, got '{type_name(value)}'"
        raise EvaluationError(msg)
    return [_expect_number(utility, element) for element in value]


def _expect_sequence(utility: str, value: Any) -> list[Any] | tuple[Any, ...]:
    if not isinstance(value, list | tuple):
        msg: Final = f"'utils.{utility}' requires an array argument, got '{type_name(value)}'"
        raise EvaluationError(msg)
    return value


def _expect_invocable(utility: str, value: Any) -> Invocable:
    if not isinstance(value, Invocable):
        msg: Final = f"'utils.{utility}' requires a function argument, got '{type_name(value)}'"
        raise EvaluationError(msg)
    return value


def _to_datetime(value: Any) -> datetime:
    match value:
        case datetime():
            return value
        case date():
            return datetime(value.year, value.month, value.day)
        case str():
            try:
                return datetime.fromisoformat(value)
            except ValueError as e:
                msg = f"'utils.formatDate' cannot parse date '{value}'"
                raise EvaluationError(msg, e) from e
        case int() | float() if not isinstance(value, bool):
            # Milliseconds since the epoch, like `utils.timestamp()` returns.
            return datetime.fromtimestamp(value / 1000.0, tz=UTC)
        case _:
            msg = f"'utils.formatDate' requires a date argument, got '{type_name(value)}'"
            raise EvaluationError(msg)


def _format_date(value: Any, format_: str = "short") -> str:
    moment: Final = _to_datetime(value)
    match format_:
        case "short":
            return format_date(moment.date(), "M/d/yyyy", locale=_LOCALE)
        case "long":
            return format_datetime(moment, "M/d/yyyy, h:mm:ss a", locale=_LOCALE)
        case _:
            return moment.isoformat()


def _format_currency(value: Any, currency: str = "USD") -> str:
    amount: Final = _expect_number("formatCurrency", value)
    code: Final = _expect_string("formatCurrency", currency).upper()
    return format_currency(amount, code, locale=_LOCALE)


def _format_number(value: Any, decimals: Any = 0) -> str:
    number: Final = _expect_number("formatNumber", value)
    places: Final = _expect_number("formatNumber", decimals)
    if not float(places).is_integer() or not 0 <= places <= 100:
        raise EvaluationError("'utils.formatNumber' requires a whole number of decimals between 0 and 100")
    return f"{number:.{int(places)}f}"


def _parse_json(text: Any) -> Any:
    try:
        return json.loads(_expect_string("parseJSON", text))
    except json.JSONDecodeError:
        return None


def _stringify_json(value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"))
    except (TypeError, ValueError):
        return ""


def _split(text: Any, delimiter: Any) -> list[str]:
    source: Final = _expect_string("split", text)
    separator: Final = _expect_string("split", delimiter)
    return list(source) if separator == "" else source.split(separator)


def _join(values: Any, delimiter: Any = ",") -> str:
    elements: Final = _expect_sequence("join", values)
    return _expect_string("join", delimiter).join(to_display_string(element) for element in elements)


def _map(values: Any, function: Any) -> list[Any]:
    callback: Final = _expect_invocable("map", function)
    return [callback(element) for element in _expect_sequence("map", values)]


def _filter(values: Any, function: Any) -> list[Any]:
    callback: Final = _expect_invocable("filter", function)
    return [element for element in _expect_sequence("filter", values) if is_truthy(callback(element))]


def _find(values: Any, function: Any) -> Any:
    callback: Final = _expect_invocable("find", function)
    return next((element for element in _expect_sequence("find", values) if is_truthy(callback(element))), None)


def _sum(values: Any) -> float:
    return sum(_expect_numbers("sum", values))


def _average(values: Any) -> float:
    numbers: Final = _expect_numbers("average", values)
    return sum(numbers) / len(numbers) if numbers else 0


def _min(values: Any) -> float:
    # An empty array yields Infinity, matching `Math.min()` without arguments.
    return min(_expect_numbers("min", values), default=math.inf)


def _max(values: Any) -> float:
    return max(_expect_numbers("max", values), default=-math.inf)


def _round(value: Any) -> int:
    # Halves round towards positive infinity.
    return math.floor(_expect_number("round", value) + 0.5)


def _random_int(minimum: Any, maximum: Any) -> int:
    low: Final = math.ceil(_expect_number("randomInt", minimum))
    high: Final = math.floor(_expect_number("randomInt", maximum))
    if low > high:
        msg: Final = f"'utils.randomInt' requires min <= max, got {format_number(low)} and {format_number(high)}"
        raise EvaluationError(msg)
    return _random.randint(low, high)


def _create_default_utilities() -> dict[str, UtilityFunction]:
    utilities: Final[list[UtilityFunction]] = [
        _SimpleUtility("formatDate", ArgumentRange(1, 2), _format_date),
        _SimpleUtility("formatCurrency", ArgumentRange(1, 2), _format_currency),
        _SimpleUtility("formatNumber", ArgumentRange(1, 2), _format_number),
        _SimpleUtility("parseJSON", 1, _parse_json),
        _SimpleUtility("stringifyJSON", 1, _stringify_json),
        _SimpleUtility("toLowerCase", 1, lambda text: _expect_string("toLowerCase", text).lower()),
        _SimpleUtility("toUpperCase", 1, lambda text: _expect_string("toUpperCase", text).upper()),
        _SimpleUtility("trim", 1, lambda text: _expect_string("trim", text).strip()),
        _SimpleUtility("split", 2, _split),
        _SimpleUtility("join", ArgumentRange(1, 2), _join),
        _SimpleUtility("map", 2, _map),
        _SimpleUtility("filter", 2, _filter),
        _SimpleUtility("find", 2, _find),
        _SimpleUtility("sum", 1, _sum),
        _SimpleUtility("average", 1, _average),
        _SimpleUtility("min", 1, _min),
        _SimpleUtility("max", 1, _max),
        _SimpleUtility("round", 1, _round),
        _SimpleUtility("floor", 1, lambda value: math.floor(_expect_number("floor", value))),
        _SimpleUtility("ceil", 1, lambda value: math.ceil(_expect_number("ceil", value))),
        _SimpleUtility("random", 0, _random.random),
        _SimpleUtility("randomInt", 2, _random_int),
        _SimpleUtility("uuid", 0, lambda: str(uuid4())),
        _SimpleUtility("now", 0, lambda: datetime.now(UTC)),
        _SimpleUtility("timestamp", 0, lambda: int(time.time() * 1000)),
    ]
    return {utility.name: utility for utility in utilities}


DEFAULT_UTILITIES: Final[Mapping[str, UtilityFunction]] = _create_default_utilities()
