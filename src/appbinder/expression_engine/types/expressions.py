import math
from abc import ABC
from abc import abstractmethod
from enum import StrEnum
from itertools import zip_longest
from typing import Annotated
from typing import Any
from typing import Final
from typing import Literal
from typing import Self
from typing import final
from typing import override

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Discriminator

from appbinder.expression_engine.escape_characters import ESCAPE_CHARACTERS
from appbinder.expression_engine.types.evaluation_context import Scope
from appbinder.expression_engine.types.evaluation_error import EvaluationError
from appbinder.expression_engine.types.invocable import Invocable
from appbinder.expression_engine.types.members import get_index
from appbinder.expression_engine.types.members import get_member
from appbinder.expression_engine.types.value import is_number
from appbinder.expression_engine.types.value import is_truthy
from appbinder.expression_engine.types.value import to_display_string
from appbinder.expression_engine.types.value import type_name


@final
class _ShortCircuit:
    """Marker produced by `?.` on a null operand. Propagates through the rest of the access chain."""

    def __repr__(self) -> str:
        return "<short-circuit>"


_SHORT_CIRCUIT: Final = _ShortCircuit()


@final
class ExpressionType(StrEnum):
    STRING_LITERAL = "string_literal"
    NUMBER_LITERAL = "number_literal"
    BOOL_LITERAL = "bool_literal"
    NULL_LITERAL = "null_literal"
    ARRAY_LITERAL = "array_literal"
    OBJECT_LITERAL = "object_literal"
    NAMESPACE_IDENTIFIER = "namespace_identifier"
    PARAMETER_IDENTIFIER = "parameter_identifier"
    MEMBER_ACCESS = "member_access"
    SUBSCRIPT_OPERATION = "subscript_operation"
    CALL_OPERATION = "call_operation"
    UNARY_OPERATION = "unary_operation"
    BINARY_OPERATION = "binary_operation"
    TERNARY_OPERATION = "ternary_operation"
    ARROW_FUNCTION = "arrow_function"


class BaseExpression(BaseModel, ABC):
    @abstractmethod
    def evaluate(self, scope: Scope) -> Any: ...


class _ChainExpression(BaseExpression):
    """Member access, subscript or call: the links of an optional chain like `a?.b.c()`."""

    @abstractmethod
    def evaluate_link(self, scope: Scope) -> Any: ...

    @final
    @override
    def evaluate(self, scope: Scope) -> Any:
        value: Final = self.evaluate_link(scope)
        return None if value is _SHORT_CIRCUIT else value


def _evaluate_chain_operand(operand: "Expression", scope: Scope) -> Any:
    if isinstance(operand, _ChainExpression):
        return operand.evaluate_link(scope)
    return operand.evaluate(scope)


@final
class StringLiteralExpression(BaseExpression):
    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.STRING_LITERAL] = ExpressionType.STRING_LITERAL
    value: str

    @override
    def evaluate(self, scope: Scope) -> Any:
        return self.value

    @classmethod
    def from_lexeme(cls, lexeme: str) -> Self:
        if len(lexeme) < 2 or lexeme[0] not in "'\"" or lexeme[-1] != lexeme[0]:
            msg = f"Invalid string lexeme: {lexeme}"
            raise AssertionError(msg)
        escaped_string = ""

        i = 1
        while i < len(lexeme) - 1:
            current = lexeme[i]
            if current == "\\" and i + 1 < len(lexeme) - 1:
                next_ = lexeme[i + 1]
                escaped_char = ESCAPE_CHARACTERS.get(next_)
                if escaped_char is None:
                    msg = f"Invalid escape sequence: \\{next_}"
                    raise AssertionError(msg)
                escaped_string += escaped_char
                i += 2
            else:
                escaped_string += current
                i += 1

        return cls(value=escaped_string)


@final
class NumberLiteralExpression(BaseExpression):
    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.NUMBER_LITERAL] = ExpressionType.NUMBER_LITERAL
    value: int | float

    @override
    def evaluate(self, scope: Scope) -> Any:
        return self.value


@final
class BoolLiteralExpression(BaseExpression):
    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.BOOL_LITERAL] = ExpressionType.BOOL_LITERAL
    value: bool

    @override
    def evaluate(self, scope: Scope) -> Any:
        return self.value


@final
class NullLiteralExpression(BaseExpression):
    """Both `null` and `undefined` evaluate to `None`."""

    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.NULL_LITERAL] = ExpressionType.NULL_LITERAL

    @override
    def evaluate(self, scope: Scope) -> Any:
        return None


@final
class ArrayLiteralExpression(BaseExpression):
    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.ARRAY_LITERAL] = ExpressionType.ARRAY_LITERAL
    elements: "list[Expression]"

    @override
    def evaluate(self, scope: Scope) -> Any:
        return [element.evaluate(scope) for element in self.elements]


@final
class ObjectEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    value: "Expression"


@final
class ObjectLiteralExpression(BaseExpression):
    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.OBJECT_LITERAL] = ExpressionType.OBJECT_LITERAL
    entries: list[ObjectEntry]

    @override
    def evaluate(self, scope: Scope) -> Any:
        return {entry.key: entry.value.evaluate(scope) for entry in self.entries}


@final
class NamespaceIdentifierExpression(BaseExpression):
    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.NAMESPACE_IDENTIFIER] = ExpressionType.NAMESPACE_IDENTIFIER
    namespace: Literal["widgets", "actions", "page", "utils", "store"]

    @override
    def evaluate(self, scope: Scope) -> Any:
        return getattr(scope.context, self.namespace)


@final
class ParameterIdentifierExpression(BaseExpression):
    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.PARAMETER_IDENTIFIER] = ExpressionType.PARAMETER_IDENTIFIER
    parameter_name: str

    @override
    def evaluate(self, scope: Scope) -> Any:
        if self.parameter_name not in scope.variables:
            msg: Final = f"Parameter '{self.parameter_name}' is not bound."
            raise EvaluationError(msg)
        return scope.variables[self.parameter_name]


@final
class MemberAccessExpression(_ChainExpression):
    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.MEMBER_ACCESS] = ExpressionType.MEMBER_ACCESS
    operand: "Expression"
    member: str
    optional: bool = False

    @override
    def evaluate_link(self, scope: Scope) -> Any:
        operand_value: Final = _evaluate_chain_operand(self.operand, scope)
        if operand_value is _SHORT_CIRCUIT or (self.optional and operand_value is None):
            return _SHORT_CIRCUIT
        return get_member(operand_value, self.member)


@final
class SubscriptOperationExpression(_ChainExpression):
    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.SUBSCRIPT_OPERATION] = ExpressionType.SUBSCRIPT_OPERATION
    operand: "Expression"
    index: "Expression"
    optional: bool = False

    @override
    def evaluate_link(self, scope: Scope) -> Any:
        operand_value: Final = _evaluate_chain_operand(self.operand, scope)
        if operand_value is _SHORT_CIRCUIT or (self.optional and operand_value is None):
            return _SHORT_CIRCUIT
        return get_index(operand_value, self.index.evaluate(scope))


@final
class CallOperationExpression(_ChainExpression):
    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.CALL_OPERATION] = ExpressionType.CALL_OPERATION
    callee: "Expression"
    arguments: "list[Expression]"
    optional: bool = False

    @override
    def evaluate_link(self, scope: Scope) -> Any:
        callee_value: Final = _evaluate_chain_operand(self.callee, scope)
        if callee_value is _SHORT_CIRCUIT or (self.optional and callee_value is None):
            return _SHORT_CIRCUIT
        if not isinstance(callee_value, Invocable):
            msg: Final = f"Value of type '{type_name(callee_value)}' is not a function."
            raise EvaluationError(msg)
        evaluated_arguments: Final = [argument.evaluate(scope) for argument in self.arguments]
        return callee_value(*evaluated_arguments)


@final
class UnaryOperator(StrEnum):
    PLUS = "+"
    NEGATE = "-"
    NOT = "!"


@final
class UnaryOperationExpression(BaseExpression):
    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.UNARY_OPERATION] = ExpressionType.UNARY_OPERATION
    operator: UnaryOperator
    operand: "Expression"

    @override
    def evaluate(self, scope: Scope) -> Any:
        operand_value: Final = self.operand.evaluate(scope)
        match self.operator:
            case UnaryOperator.NOT:
                return not is_truthy(operand_value)
            case UnaryOperator.NEGATE:
                return -_to_number(operand_value, self.operator)
            case UnaryOperator.PLUS:
                return _to_number(operand_value, self.operator)


@final
class BinaryOperator(StrEnum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"

    EQUALS = "=="
    NOT_EQUALS = "!="
    STRICT_EQUALS = "==="
    STRICT_NOT_EQUALS = "!=="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="

    AND = "&&"
    OR = "||"
    NULLISH_COALESCING = "??"


@final
class BinaryOperationExpression(BaseExpression):
    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.BINARY_OPERATION] = ExpressionType.BINARY_OPERATION
    left: "Expression"
    operator: BinaryOperator
    right: "Expression"

    @override
    def evaluate(self, scope: Scope) -> Any:
        left_value: Final = self.left.evaluate(scope)

        # Logical operators short-circuit and return one of their operands.
        match self.operator:
            case BinaryOperator.AND:
                return self.right.evaluate(scope) if is_truthy(left_value) else left_value
            case BinaryOperator.OR:
                return left_value if is_truthy(left_value) else self.right.evaluate(scope)
            case BinaryOperator.NULLISH_COALESCING:
                return left_value if left_value is not None else self.right.evaluate(scope)
            case _:
                pass

        right_value: Final = self.right.evaluate(scope)
        match self.operator:
            case BinaryOperator.ADD if isinstance(left_value, str) or isinstance(right_value, str):
                return to_display_string(left_value) + to_display_string(right_value)
            case BinaryOperator.ADD:
                return self._numbers(left_value, right_value, lambda l, r: l + r)
            case BinaryOperator.SUBTRACT:
                return self._numbers(left_value, right_value, lambda l, r: l - r)
            case BinaryOperator.MULTIPLY:
                return self._numbers(left_value, right_value, lambda l, r: l * r)
            case BinaryOperator.DIVIDE:
                return self._numbers(left_value, right_value, _divide)
            case BinaryOperator.MODULO:
                return self._numbers(left_value, right_value, _modulo)
            case BinaryOperator.STRICT_EQUALS:
                return _strict_equals(left_value, right_value)
            case BinaryOperator.STRICT_NOT_EQUALS:
                return not _strict_equals(left_value, right_value)
            case BinaryOperator.EQUALS:
                return _loose_equals(left_value, right_value)
            case BinaryOperator.NOT_EQUALS:
                return not _loose_equals(left_value, right_value)
            case BinaryOperator.LESS_THAN:
                return self._compare(left_value, right_value, lambda l, r: l < r)
            case BinaryOperator.LESS_THAN_OR_EQUAL:
                return self._compare(left_value, right_value, lambda l, r: l <= r)
            case BinaryOperator.GREATER_THAN:
                return self._compare(left_value, right_value, lambda l, r: l > r)
            case BinaryOperator.GREATER_THAN_OR_EQUAL:
                return self._compare(left_value, right_value, lambda l, r: l >= r)
            case _:
                msg: Final = f"unexpected binary operator: {self.operator}"
                raise AssertionError(msg)

    def _numbers(self, left: Any, right: Any, operation: Any) -> Any:
        if not _is_arithmetic(left) or not _is_arithmetic(right):
            msg: Final = (
                f"Operator {self.operator} is not supported for the given operand types "
                + f"'{type_name(left)}' and '{type_name(right)}'"
            )
            raise EvaluationError(msg)
        return operation(left, right)

    def _compare(self, left: Any, right: Any, comparison: Any) -> bool:
        comparable: Final = (_is_arithmetic(left) and _is_arithmetic(right)) or (
            isinstance(left, str) and isinstance(right, str)
        )
        if not comparable:
            msg: Final = f"Cannot compare '{type_name(left)}' and '{type_name(right)}' with {self.operator}"
            raise EvaluationError(msg)
        return comparison(left, right)


@final
class TernaryOperationExpression(BaseExpression):
    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.TERNARY_OPERATION] = ExpressionType.TERNARY_OPERATION
    condition: "Expression"
    true_expression: "Expression"
    false_expression: "Expression"

    @override
    def evaluate(self, scope: Scope) -> Any:
        if is_truthy(self.condition.evaluate(scope)):
            return self.true_expression.evaluate(scope)
        return self.false_expression.evaluate(scope)


@final
class ArrowFunction(Invocable):
    """Closure created by evaluating an arrow function expression."""

    def __init__(self, parameters: list[str], body: "Expression", scope: Scope) -> None:
        self._parameters: Final = parameters
        self._body: Final = body
        self._scope: Final = scope

    @property
    @override
    def name(self) -> str:
        return f"({', '.join(self._parameters)}) => ..."

    @override
    def __call__(self, *args: Any) -> Any:
        # Missing arguments are bound to `None`, surplus arguments are ignored.
        bindings: Final = {
            parameter: argument
            for parameter, argument in zip_longest(self._parameters, args[: len(self._parameters)])
            if parameter is not None
        }
        return self._body.evaluate(self._scope.with_variables(bindings))

    def __repr__(self) -> str:
        return f"<function {self.name}>"


@final
class ArrowFunctionExpression(BaseExpression):
    model_config = ConfigDict(frozen=True)

    expression_type: Literal[ExpressionType.ARROW_FUNCTION] = ExpressionType.ARROW_FUNCTION
    parameters: list[str]
    body: "Expression"

    @override
    def evaluate(self, scope: Scope) -> Any:
        return ArrowFunction(self.parameters, self.body, scope)


def _is_arithmetic(value: Any) -> bool:
    # Booleans take part in arithmetic like in JavaScript (`true + 1 == 2`).
    return isinstance(value, int | float)


def _to_number(value: Any, operator: UnaryOperator) -> int | float:
    match value:
        case bool():
            return int(value)
        case int() | float():
            return value
        case str():
            stripped = value.strip()
            if not stripped:
                return 0
            try:
                return int(stripped)
            except ValueError:
                pass
            try:
                return float(stripped)
            except ValueError as e:
                msg = f"String '{value}' does not represent a valid number"
                raise EvaluationError(msg, e) from e
        case _:
            msg = f"Unary operator {operator} is not supported for '{type_name(value)}' operands"
            raise EvaluationError(msg)


def _divide(left: int | float, right: int | float) -> int | float:
    if right == 0:
        raise EvaluationError("Division by zero")
    result: Final = left / right
    if isinstance(left, int) and isinstance(right, int) and result.is_integer():
        return int(result)
    return result


def _modulo(left: int | float, right: int | float) -> int | float:
    if right == 0:
        raise EvaluationError("Modulo by zero")
    # The sign of the result follows the dividend.
    result: Final = math.fmod(left, right)
    if isinstance(left, int) and isinstance(right, int):
        return int(result)
    return result


def _strict_equals(left: Any, right: Any) -> bool:
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    if is_number(left) and is_number(right):
        return left == right
    if type(left) is not type(right) and not (
        isinstance(left, list | tuple) and isinstance(right, list | tuple)
    ):
        return False
    return left == right


def _loose_equals(left: Any, right: Any) -> bool:
    # Booleans become numbers, then strings compared with numbers are converted to numbers, as in JavaScript.
    if isinstance(left, bool):
        return _loose_equals(int(left), right)
    if isinstance(right, bool):
        return _loose_equals(left, int(right))
    for text, number in ((left, right), (right, left)):
        if isinstance(text, str) and is_number(number):
            try:
                return float(text.strip() or "0") == number
            except ValueError:
                return False
    return _strict_equals(left, right)


type Expression = Annotated[
    StringLiteralExpression
    | NumberLiteralExpression
    | BoolLiteralExpression
    | NullLiteralExpression
    | ArrayLiteralExpression
    | ObjectLiteralExpression
    | NamespaceIdentifierExpression
    | ParameterIdentifierExpression
    | MemberAccessExpression
    | SubscriptOperationExpression
    | CallOperationExpression
    | UnaryOperationExpression
    | BinaryOperationExpression
    | TernaryOperationExpression
    | ArrowFunctionExpression,
    Discriminator("expression_type"),
]


# Rebuild all models because of forward references.
ArrayLiteralExpression.model_rebuild()
ObjectEntry.model_rebuild()
ObjectLiteralExpression.model_rebuild()
MemberAccessExpression.model_rebuild()
SubscriptOperationExpression.model_rebuild()
CallOperationExpression.model_rebuild()
UnaryOperationExpression.model_rebuild()
BinaryOperationExpression.model_rebuild()
TernaryOperationExpression.model_rebuild()
ArrowFunctionExpression.model_rebuild()
