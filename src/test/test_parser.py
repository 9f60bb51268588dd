from typing import Final

import pytest

from appbinder.expression_engine.lexer import Lexer
from appbinder.expression_engine.parser import DuplicateObjectKeyError
from appbinder.expression_engine.parser import DuplicateParameterNameError
from appbinder.expression_engine.parser import ExpectedTokenError
from appbinder.expression_engine.parser import ParameterShadowsNamespaceError
from appbinder.expression_engine.parser import Parser
from appbinder.expression_engine.parser import ParserError
from appbinder.expression_engine.parser import UnknownIdentifierError
from appbinder.expression_engine.types.evaluation_error import ExpressionSyntaxError
from appbinder.expression_engine.types.expressions import ArrayLiteralExpression
from appbinder.expression_engine.types.expressions import ArrowFunctionExpression
from appbinder.expression_engine.types.expressions import BinaryOperationExpression
from appbinder.expression_engine.types.expressions import BinaryOperator
from appbinder.expression_engine.types.expressions import BoolLiteralExpression
from appbinder.expression_engine.types.expressions import CallOperationExpression
from appbinder.expression_engine.types.expressions import Expression
from appbinder.expression_engine.types.expressions import MemberAccessExpression
from appbinder.expression_engine.types.expressions import NamespaceIdentifierExpression
from appbinder.expression_engine.types.expressions import NullLiteralExpression
from appbinder.expression_engine.types.expressions import NumberLiteralExpression
from appbinder.expression_engine.types.expressions import ObjectLiteralExpression
from appbinder.expression_engine.types.expressions import ParameterIdentifierExpression
from appbinder.expression_engine.types.expressions import StringLiteralExpression
from appbinder.expression_engine.types.expressions import SubscriptOperationExpression
from appbinder.expression_engine.types.expressions import TernaryOperationExpression
from appbinder.expression_engine.types.expressions import UnaryOperationExpression
from appbinder.expression_engine.types.expressions import UnaryOperator


def _parse_source(source: str) -> Expression:
    lexer: Final = Lexer(source)
    tokens: Final = lexer.tokenize()
    parser: Final = Parser(tokens)
    return parser.parse()


@pytest.mark.parametrize(
    ("source", "expected_value"),
    [
        ("'Hello, World!'", "Hello, World!"),
        (r"'Line 1\nLine 2'", "Line 1\nLine 2"),
        (r"'in \'quotes\' it is'", "in 'quotes' it is"),
        ('"double \\"quoted\\""', 'double "quoted"'),
        ("5", 5),
        ("0", 0),
        ("3.14", 3.14),
        (".5", 0.5),
        ("true", True),
        ("false", False),
    ],
)
def test_parser_parses_literals(source: str, expected_value: str | float | bool) -> None:
    match _parse_source(source):
        case StringLiteralExpression(value=value) | NumberLiteralExpression(value=value) | BoolLiteralExpression(
            value=value
        ):
            assert value == expected_value
            assert type(value) is type(expected_value)
        case expression:
            pytest.fail(f"Unexpected expression type: {type(expression)}")


@pytest.mark.parametrize("source", ["null", "undefined"])
def test_parser_parses_null_and_undefined_to_the_same_literal(source: str) -> None:
    assert isinstance(_parse_source(source), NullLiteralExpression)


def test_parser_parses_namespace_member_access() -> None:
    expression: Final = _parse_source("widgets.input1.value")
    match expression:
        case MemberAccessExpression(
            operand=MemberAccessExpression(
                operand=NamespaceIdentifierExpression(namespace="widgets"),
                member="input1",
                optional=False,
            ),
            member="value",
            optional=False,
        ):
            pass
        case _:
            pytest.fail(f"Unexpected expression: {expression}")


@pytest.mark.parametrize("namespace", ["widgets", "actions", "page", "utils", "store"])
def test_parser_accepts_all_namespaces(namespace: str) -> None:
    assert _parse_source(namespace) == NamespaceIdentifierExpression.model_validate({"namespace": namespace})


def test_parser_raises_on_unknown_identifier() -> None:
    with pytest.raises(UnknownIdentifierError, match="Identifier 'window2' is not defined."):
        _parse_source("window2.location")


def test_parser_accepts_keywords_as_property_names() -> None:
    expression: Final = _parse_source("widgets.toggle.true")
    assert isinstance(expression, MemberAccessExpression)
    assert expression.member == "true"


def test_parser_respects_multiplication_precedence_over_addition() -> None:
    expression: Final = _parse_source("1 + 2 * 3")
    match expression:
        case BinaryOperationExpression(
            left=NumberLiteralExpression(value=1),
            operator=BinaryOperator.ADD,
            right=BinaryOperationExpression(
                left=NumberLiteralExpression(value=2),
                operator=BinaryOperator.MULTIPLY,
                right=NumberLiteralExpression(value=3),
            ),
        ):
            pass
        case _:
            pytest.fail(f"Unexpected expression: {expression}")


def test_parser_respects_left_associativity_for_subtraction() -> None:
    expression: Final = _parse_source("10 - 4 - 3")
    match expression:
        case BinaryOperationExpression(
            left=BinaryOperationExpression(
                left=NumberLiteralExpression(value=10),
                operator=BinaryOperator.SUBTRACT,
                right=NumberLiteralExpression(value=4),
            ),
            operator=BinaryOperator.SUBTRACT,
            right=NumberLiteralExpression(value=3),
        ):
            pass
        case _:
            pytest.fail(f"Unexpected expression: {expression}")


@pytest.mark.parametrize(
    ("source", "outer_operator"),
    [
        ("a ?? b || c", BinaryOperator.NULLISH_COALESCING),
        ("a || b && c", BinaryOperator.OR),
        ("a && b == c", BinaryOperator.AND),
        ("a === b < c", BinaryOperator.STRICT_EQUALS),
        ("a < b + c", BinaryOperator.LESS_THAN),
        ("a - b % c", BinaryOperator.SUBTRACT),
    ],
)
def test_parser_respects_operator_precedence(source: str, outer_operator: BinaryOperator) -> None:
    # `a`, `b` and `c` are arrow function parameters so that the identifiers resolve.
    expression: Final = _parse_source(f"(a, b, c) => {source}")
    assert isinstance(expression, ArrowFunctionExpression)
    assert isinstance(expression.body, BinaryOperationExpression)
    assert expression.body.operator == outer_operator


def test_parser_parses_grouping() -> None:
    expression: Final = _parse_source("(1 + 2) * 3")
    assert isinstance(expression, BinaryOperationExpression)
    assert expression.operator == BinaryOperator.MULTIPLY
    assert isinstance(expression.left, BinaryOperationExpression)


@pytest.mark.parametrize(
    ("source", "operator"),
    [
        ("!true", UnaryOperator.NOT),
        ("-1", UnaryOperator.NEGATE),
        ("+'2'", UnaryOperator.PLUS),
    ],
)
def test_parser_parses_unary_operations(source: str, operator: UnaryOperator) -> None:
    expression: Final = _parse_source(source)
    assert isinstance(expression, UnaryOperationExpression)
    assert expression.operator == operator


def test_unary_minus_binds_tighter_than_multiplication() -> None:
    expression: Final = _parse_source("-2 * 3")
    assert isinstance(expression, BinaryOperationExpression)
    assert isinstance(expression.left, UnaryOperationExpression)


def test_parser_parses_right_associative_ternary() -> None:
    expression: Final = _parse_source("true ? 1 : false ? 2 : 3")
    match expression:
        case TernaryOperationExpression(
            condition=BoolLiteralExpression(value=True),
            true_expression=NumberLiteralExpression(value=1),
            false_expression=TernaryOperationExpression(
                condition=BoolLiteralExpression(value=False),
                true_expression=NumberLiteralExpression(value=2),
                false_expression=NumberLiteralExpression(value=3),
            ),
        ):
            pass
        case _:
            pytest.fail(f"Unexpected expression: {expression}")


def test_parser_parses_optional_chaining() -> None:
    expression: Final = _parse_source("store.user?.name")
    assert isinstance(expression, MemberAccessExpression)
    assert expression.optional
    assert isinstance(expression.operand, MemberAccessExpression)
    assert not expression.operand.optional


def test_parser_parses_optional_call_and_subscript() -> None:
    call: Final = _parse_source("store.callback?.()")
    assert isinstance(call, CallOperationExpression)
    assert call.optional
    assert call.arguments == []

    subscript: Final = _parse_source("store.items?.[0]")
    assert isinstance(subscript, SubscriptOperationExpression)
    assert subscript.optional


def test_parser_parses_calls_with_arguments() -> None:
    expression: Final = _parse_source("utils.formatCurrency(store.total, 'EUR')")
    match expression:
        case CallOperationExpression(
            callee=MemberAccessExpression(
                operand=NamespaceIdentifierExpression(namespace="utils"),
                member="formatCurrency",
            ),
            arguments=[MemberAccessExpression(member="total"), StringLiteralExpression(value="EUR")],
        ):
            pass
        case _:
            pytest.fail(f"Unexpected expression: {expression}")


def test_parser_parses_array_and_object_literals() -> None:
    array: Final = _parse_source("[1, 'two', [3],]")
    assert isinstance(array, ArrayLiteralExpression)
    assert len(array.elements) == 3

    object_: Final = _parse_source("{name: 'Ada', 'last name': 'Lovelace', 1: true}")
    assert isinstance(object_, ObjectLiteralExpression)
    assert [entry.key for entry in object_.entries] == ["name", "last name", "1"]


def test_parser_raises_on_duplicate_object_keys() -> None:
    with pytest.raises(DuplicateObjectKeyError, match="Object literal key 'a' is already defined."):
        _parse_source("{a: 1, 'a': 2}")


@pytest.mark.parametrize(
    ("source", "parameters"),
    [
        ("x => x", ["x"]),
        ("(x) => x", ["x"]),
        ("(a, b) => a", ["a", "b"]),
        ("() => 1", []),
    ],
)
def test_parser_parses_arrow_functions(source: str, parameters: list[str]) -> None:
    expression: Final = _parse_source(source)
    assert isinstance(expression, ArrowFunctionExpression)
    assert expression.parameters == parameters


def test_arrow_function_parameters_are_visible_in_nested_functions() -> None:
    expression: Final = _parse_source("x => y => x + y")
    assert isinstance(expression, ArrowFunctionExpression)
    inner: Final = expression.body
    assert isinstance(inner, ArrowFunctionExpression)
    assert inner.body == BinaryOperationExpression(
        left=ParameterIdentifierExpression(parameter_name="x"),
        operator=BinaryOperator.ADD,
        right=ParameterIdentifierExpression(parameter_name="y"),
    )


def test_arrow_function_parameters_are_not_visible_outside() -> None:
    with pytest.raises(UnknownIdentifierError, match="Identifier 'x' is not defined."):
        _parse_source("utils.map(store.items, x => x) + x")


def test_parser_raises_on_parameter_shadowing_namespace() -> None:
    with pytest.raises(
        ParameterShadowsNamespaceError,
        match="Parameter 'widgets' shadows the namespace with the same name.",
    ):
        _parse_source("widgets => widgets")


def test_parser_raises_on_duplicate_parameter() -> None:
    with pytest.raises(DuplicateParameterNameError, match="Parameter 'a' is already defined."):
        _parse_source("(a, a) => a")


@pytest.mark.parametrize(
    ("source", "error_match"),
    [
        ("1 +", "Expected expression at column 4, got end of expression."),
        ("(1 + 2", "Expected ')' after grouped expression at column 7, got end of expression."),
        ("1 2", "Expected end of expression at column 3, got '2'."),
        ("widgets.", "Expected property name at column 9, got end of expression."),
        ("true ? 1", "Expected ':' in ternary expression at column 9, got end of expression."),
        ("[1, 2", "Expected ']' after array literal elements at column 6, got end of expression."),
        ("{a 1}", "Expected ':' after object key at column 4, got '1'."),
        ("utils.sum(1, 2", "Expected ')' after function call arguments at column 15, got end of expression."),
    ],
)
def test_parser_reports_expected_tokens(source: str, error_match: str) -> None:
    with pytest.raises(ExpectedTokenError) as exception_info:
        _parse_source(source)
    assert str(exception_info.value) == error_match


def test_parser_errors_are_syntax_errors() -> None:
    with pytest.raises(ParserError) as exception_info:
        _parse_source(")")
    assert isinstance(exception_info.value, ExpressionSyntaxError)
