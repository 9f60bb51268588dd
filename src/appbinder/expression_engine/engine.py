import logging
from collections.abc import Callable
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any
from typing import Final
from typing import NamedTuple
from typing import Optional
from typing import final

from cachetools import LRUCache

from appbinder.expression_engine import dependencies
from appbinder.expression_engine import templates
from appbinder.expression_engine.lexer import Lexer
from appbinder.expression_engine.parser import Parser
from appbinder.expression_engine.sandbox import ensure_no_forbidden_keywords
from appbinder.expression_engine.types.evaluation_context import EvaluationContext
from appbinder.expression_engine.types.evaluation_context import Scope
from appbinder.expression_engine.types.evaluation_error import EvaluationError
from appbinder.expression_engine.types.expressions import Expression
from appbinder.expression_engine.types.utilities import DEFAULT_UTILITIES
from appbinder.expression_engine.types.utilities import HostUtility
from appbinder.expression_engine.types.utilities import UtilityFunction
from appbinder.expression_engine.types.value import to_display_string

logger: Final = logging.getLogger(__name__)


@final
class CacheEntry(NamedTuple):
    value: Any
    dependencies: list[str]


@final
class ValidationResult(NamedTuple):
    valid: bool
    error: Optional[str] = None


@final
class ExpressionEngine:
    """Evaluates `{{ }}` bindings against the widgets, actions, page, utils and store namespaces.

    Results are cached by exact source text until the next context update. Parsed syntax trees are
    cached separately, since they only depend on the source text.
    """

    def __init__(
        self,
        *,
        utilities: Optional[Mapping[str, UtilityFunction]] = None,
        parse_cache_size: int = 512,
    ) -> None:
        self._utilities: Final[dict[str, UtilityFunction]] = dict(
            DEFAULT_UTILITIES if utilities is None else utilities
        )
        self._context = EvaluationContext.empty(MappingProxyType(self._utilities))
        self._value_cache: Final[dict[str, CacheEntry]] = {}
        self._parse_cache: Final[LRUCache[str, Expression]] = LRUCache(maxsize=parse_cache_size)

    @property
    def context(self) -> EvaluationContext:
        return self._context

    def update_context(
        self,
        *,
        widgets: Optional[Mapping[str, Any]] = None,
        actions: Optional[Mapping[str, Any]] = None,
        page: Optional[Mapping[str, Any]] = None,
        store: Optional[Mapping[str, Any]] = None,
    ) -> None:
        replacements: Final = {
            name: namespace
            for name, namespace in (
                ("widgets", widgets),
                ("actions", actions),
                ("page", page),
                ("store", store),
            )
            if namespace is not None
        }
        self._context = self._context._replace(**replacements)
        self.clear_cache()

    def register_utility(self, name: str, function: Callable[..., Any]) -> None:
        self._utilities[name] = function if isinstance(function, UtilityFunction) else HostUtility(name, function)
        logger.debug(f"Registered utility 'utils.{name}'")
        self.clear_cache()

    def clear_cache(self) -> None:
        self._value_cache.clear()

    def get_cache_entry(self, expression: str) -> Optional[CacheEntry]:
        """Return the cached result of `expression` together with the references it reads, if cached."""
        return self._value_cache.get(expression)

    def evaluate(self, expression: str, throw_on_error: bool = False) -> Any:
        if not expression:
            return ""
        cached: Final = self._value_cache.get(expression)
        if cached is not None:
            logger.debug(f"Cache hit for expression '{expression}'")
            return cached.value
        try:
            value: Final = self._execute(expression)
        except EvaluationError as e:
            if throw_on_error:
                raise
            logger.warning(f"Failed to evaluate expression '{expression}': {e}")
            return None
        self._value_cache[expression] = CacheEntry(value=value, dependencies=self.get_dependencies(expression))
        return value

    def evaluate_template(self, template: str, throw_on_error: bool = False) -> str:
        if not templates.has_expression(template):
            return template
        return templates.render_template(
            template,
            lambda expression: to_display_string(self.evaluate(expression, throw_on_error)),
        )

    def evaluate_binding(self, value: Any) -> Any:
        """Resolve a prop or config value.

        A string that consists of exactly one `{{ }}` marker keeps the native type of the expression's
        result. Other strings with markers are rendered as templates. Everything else is returned as is.
        """
        if not isinstance(value, str):
            return value
        expression: Final = templates.single_expression(value)
        if expression is not None:
            return self.evaluate(expression)
        return self.evaluate_template(value)

    @staticmethod
    def has_expression(text: str) -> bool:
        return templates.has_expression(text)

    @staticmethod
    def extract_expressions(text: str) -> list[str]:
        return templates.extract_expressions(text)

    @staticmethod
    def get_dependencies(expression: str) -> list[str]:
        return dependencies.get_dependencies(expression)

    def validate_expression(self, expression: str) -> ValidationResult:
        try:
            ensure_no_forbidden_keywords(expression)
            self.evaluate(expression, throw_on_error=True)
        except EvaluationError as e:
            return ValidationResult(valid=False, error=str(e))
        return ValidationResult(valid=True)

    def _parse(self, expression: str) -> Expression:
        syntax_tree = self._parse_cache.get(expression)
        if syntax_tree is None:
            logger.debug(f"Parsing expression '{expression}'")
            syntax_tree = Parser(Lexer(expression).tokenize()).parse()
            self._parse_cache[expression] = syntax_tree
        return syntax_tree

    def _execute(self, expression: str) -> Any:
        ensure_no_forbidden_keywords(expression)
        try:
            return self._parse(expression).evaluate(Scope(context=self._context, variables={}))
        except EvaluationError:
            raise
        except RecursionError as e:
            msg: Final = "Expression is nested too deeply"
            raise EvaluationError(msg, cause=e) from e
        except Exception as e:
            raise EvaluationError(f"{type(e).__name__}: {e}", cause=e) from e
