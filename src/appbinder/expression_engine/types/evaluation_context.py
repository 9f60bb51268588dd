from collections.abc import Mapping
from typing import TYPE_CHECKING
from typing import Any
from typing import Final
from typing import NamedTuple
from typing import Self
from typing import final

if TYPE_CHECKING:
    from appbinder.expression_engine.types.utilities import UtilityFunction


@final
class EvaluationContext(NamedTuple):
    """The five namespaces an expression can read from. Replaced wholesale, never mutated in place."""

    widgets: Mapping[str, Any]
    actions: Mapping[str, Any]
    page: Mapping[str, Any]
    utils: "Mapping[str, UtilityFunction]"
    store: Mapping[str, Any]

    @classmethod
    def empty(cls, utils: "Mapping[str, UtilityFunction]") -> Self:
        return cls(widgets={}, actions={}, page={}, utils=utils, store={})


NAMESPACES: Final[frozenset[str]] = frozenset(EvaluationContext._fields)


@final
class Scope(NamedTuple):
    context: EvaluationContext
    variables: Mapping[str, Any]  # Arrow function parameters currently in scope.

    def with_variables(self, bindings: Mapping[str, Any]) -> Self:
        return self._replace(variables={**self.variables, **bindings})
