from collections.abc import Callable
from functools import lru_cache
from typing import Annotated
from typing import Final
from typing import NamedTuple
from typing import Optional
from typing import Self
from typing import final

from appbinder.expression_engine.precedence import Precedence
from appbinder.expression_engine.token import Token
from appbinder.expression_engine.token_types import TokenType
from appbinder.expression_engine.types.evaluation_context import NAMESPACES
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
from appbinder.expression_engine.types.expressions import ObjectEntry
from appbinder.expression_engine.types.expressions import ObjectLiteralExpression
from appbinder.expression_engine.types.expressions import ParameterIdentifierExpression
from appbinder.expression_engine.types.expressions import StringLiteralExpression
from appbinder.expression_engine.types.expressions import SubscriptOperationExpression
from appbinder.expression_engine.types.expressions import TernaryOperationExpression
from appbinder.expression_engine.types.expressions import UnaryOperationExpression
from appbinder.expression_engine.types.expressions import UnaryOperator


class ParserError(ExpressionSyntaxError): ...


@final
class ExpectedTokenError(ParserError):
    def __init__(self, token: Token, message: str) -> None:
        found: Final = (
            "end of expression" if token.type == TokenType.END_OF_INPUT else f"'{token.source_location.lexeme}'"
        )
        super().__init__(f"Expected {message} at {token.source_location.describe()}, got {found}.")


@final
class UnknownIdentifierError(ParserError):
    def __init__(self, identifier_name: str) -> None:
        super().__init__(
            f"Identifier '{identifier_name}' is not defined. "
            + "Expressions can only read 'widgets', 'actions', 'page', 'utils' and 'store'."
        )


@final
class ParameterShadowsNamespaceError(ParserError):
    def __init__(self, parameter_name: str) -> None:
        super().__init__(f"Parameter '{parameter_name}' shadows the namespace with the same name.")


@final
class DuplicateParameterNameError(ParserError):
    def __init__(self, parameter_name: str) -> None:
        super().__init__(f"Parameter '{parameter_name}' is already defined.")


@final
class DuplicateObjectKeyError(ParserError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Object literal key '{key}' is already defined.")


type _UnaryParser = Callable[
    [
        Parser,
        _ParseContext,
    ],
    Expression,
]
type _BinaryParser = Callable[
    [
        Parser,
        Annotated[Expression, "left operand"],
        _ParseContext,
    ],
    Expression,
]

_BINARY_OPERATOR_BY_TOKEN_TYPE = {
    # Arithmetic operators.
    TokenType.PLUS: BinaryOperator.ADD,
    TokenType.MINUS: BinaryOperator.SUBTRACT,
    TokenType.ASTERISK: BinaryOperator.MULTIPLY,
    TokenType.SLASH: BinaryOperator.DIVIDE,
    TokenType.PERCENT: BinaryOperator.MODULO,
    # Relational operators.
    TokenType.EQUALS_EQUALS: BinaryOperator.EQUALS,
    TokenType.EXCLAMATION_MARK_EQUALS: BinaryOperator.NOT_EQUALS,
    TokenType.EQUALS_EQUALS_EQUALS: BinaryOperator.STRICT_EQUALS,
    TokenType.EXCLAMATION_MARK_EQUALS_EQUALS: BinaryOperator.STRICT_NOT_EQUALS,
    TokenType.LESS_THAN: BinaryOperator.LESS_THAN,
    TokenType.LESS_THAN_EQUALS: BinaryOperator.LESS_THAN_OR_EQUAL,
    TokenType.GREATER_THAN: BinaryOperator.GREATER_THAN,
    TokenType.GREATER_THAN_EQUALS: BinaryOperator.GREATER_THAN_OR_EQUAL,
    # Logical operators.
    TokenType.AMPERSAND_AMPERSAND: BinaryOperator.AND,
    TokenType.PIPE_PIPE: BinaryOperator.OR,
    TokenType.QUESTION_MARK_QUESTION_MARK: BinaryOperator.NULLISH_COALESCING,
}


_UNARY_OPERATOR_BY_TOKEN_TYPE = {
    TokenType.PLUS: UnaryOperator.PLUS,
    TokenType.MINUS: UnaryOperator.NEGATE,
    TokenType.EXCLAMATION_MARK: UnaryOperator.NOT,
}

# Keywords are valid property names after `.`, e.g. `widgets.toggle.true`.
_PROPERTY_NAME_TOKEN_TYPES = frozenset(
    {
        TokenType.IDENTIFIER,
        TokenType.BOOL_LITERAL,
        TokenType.NULL_LITERAL,
        TokenType.UNDEFINED_LITERAL,
    }
)


@final
class _TableEntry(NamedTuple):
    prefix_parser: Optional[_UnaryParser]
    infix_parser: Optional[_BinaryParser]
    infix_precedence: Precedence

    @classmethod
    @lru_cache
    def unused(cls) -> Self:
        return cls(None, None, Precedence.UNKNOWN)


@final
class _ParseContext(NamedTuple):
    parameters: frozenset[str]  # Arrow function parameters visible at this point.


@final
class Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self._tokens: Final = tokens
        self._current_index = 0

    def parse(self) -> Expression:
        expression: Final = self._expression(_ParseContext(parameters=frozenset()), Precedence.UNKNOWN)
        if not self._is_at_end():
            raise ExpectedTokenError(self._current(), "end of expression")
        return expression

    def _expression(
        self,
        context: _ParseContext,
        precedence: Precedence,
    ) -> Expression:
        table_entry = Parser._PARSER_TABLE[self._current().type]
        prefix_parser: Final = table_entry.prefix_parser
        if prefix_parser is None:
            raise ExpectedTokenError(self._current(), "expression")
        left_operand = prefix_parser(self, context)

        while True:
            table_entry = Parser._PARSER_TABLE[self._current().type]
            if table_entry.infix_precedence <= precedence or table_entry.infix_parser is None:
                return left_operand
            left_operand = table_entry.infix_parser(self, left_operand, context)

    def _identifier(
        self,
        context: _ParseContext,
    ) -> Expression:
        if self._peek().type == TokenType.ARROW:
            return self._arrow_function(context)
        identifier_token: Final = self._expect(TokenType.IDENTIFIER, "identifier")  # This is a double-check.
        identifier_name: Final = identifier_token.source_location.lexeme
        if identifier_name in context.parameters:
            return ParameterIdentifierExpression(parameter_name=identifier_name)
        if identifier_name in NAMESPACES:
            return NamespaceIdentifierExpression.model_validate({"namespace": identifier_name})
        raise UnknownIdentifierError(identifier_name)

    def _number_literal(
        self,
        _context: _ParseContext,
    ) -> Expression:
        number_token: Final = self._expect(TokenType.NUMBER_LITERAL, "number literal")  # This is a double-check.
        lexeme: Final = number_token.source_location.lexeme
        return NumberLiteralExpression(value=float(lexeme) if "." in lexeme else int(lexeme))

    def _string_literal(
        self,
        _context: _ParseContext,
    ) -> Expression:
        string_token: Final = self._expect(TokenType.STRING_LITERAL, "string literal")  # This is a double-check.
        return StringLiteralExpression.from_lexeme(string_token.source_location.lexeme)

    def _bool_literal(
        self,
        _context: _ParseContext,
    ) -> Expression:
        bool_token: Final = self._expect(TokenType.BOOL_LITERAL, "boolean literal")  # This is a double-check.
        lexeme: Final = bool_token.source_location.lexeme
        match lexeme:
            case "true":
                value = True
            case "false":
                value = False
            case _:
                msg: Final = f"unexpected boolean literal: {lexeme}"
                raise AssertionError(msg)
        return BoolLiteralExpression(value=value)

    def _null_literal(
        self,
        _context: _ParseContext,
    ) -> Expression:
        self._advance()  # `null` or `undefined`.
        return NullLiteralExpression()

    def _unary_operation(
        self,
        context: _ParseContext,
    ) -> Expression:
        unary_operator: Final = _UNARY_OPERATOR_BY_TOKEN_TYPE.get(self._current().type)
        if unary_operator is None:
            msg: Final = f"unexpected unary operator: {self._current().type}"
            raise AssertionError(msg)
        self._advance()
        operand: Final = self._expression(context, Precedence.UNARY)
        return UnaryOperationExpression(operator=unary_operator, operand=operand)

    def _grouped_expression_or_arrow_function(
        self,
        context: _ParseContext,
    ) -> Expression:
        if self._is_arrow_parameter_list():
            return self._arrow_function(context)
        self._expect(TokenType.LEFT_PARENTHESIS, "'('")  # This is a double-check.
        expression: Final = self._expression(context, Precedence.UNKNOWN)
        self._expect(TokenType.RIGHT_PARENTHESIS, "')' after grouped expression")
        return expression

    def _arrow_function(
        self,
        context: _ParseContext,
    ) -> Expression:
        parameters: Final[list[str]] = []
        if self._match(TokenType.LEFT_PARENTHESIS) is None:
            parameters.append(self._parameter_name(parameters))
        else:
            while self._match(TokenType.RIGHT_PARENTHESIS) is None:
                parameters.append(self._parameter_name(parameters))
                if self._match(TokenType.COMMA) is None:
                    self._expect(TokenType.RIGHT_PARENTHESIS, "')' after parameter list")
                    break
        self._expect(TokenType.ARROW, "'=>' after parameter list")
        body: Final = self._expression(
            _ParseContext(parameters=context.parameters | frozenset(parameters)),
            Precedence.UNKNOWN,
        )
        return ArrowFunctionExpression(parameters=parameters, body=body)

    def _parameter_name(self, previous_parameters: list[str]) -> str:
        parameter_name: Final = self._expect(TokenType.IDENTIFIER, "parameter name").source_location.lexeme
        if parameter_name in NAMESPACES:
            raise ParameterShadowsNamespaceError(parameter_name)
        if parameter_name in previous_parameters:
            raise DuplicateParameterNameError(parameter_name)
        return parameter_name

    def _is_arrow_parameter_list(self) -> bool:
        # Looks ahead for `( [identifier {, identifier}] ) =>` without consuming tokens.
        index = self._current_index + 1
        expect_identifier = True
        while index < len(self._tokens):
            token_type = self._tokens[index].type
            if token_type == TokenType.RIGHT_PARENTHESIS:
                return index + 1 < len(self._tokens) and self._tokens[index + 1].type == TokenType.ARROW
            if token_type != (TokenType.IDENTIFIER if expect_identifier else TokenType.COMMA):
                return False
            expect_identifier = not expect_identifier
            index += 1
        return False

    def _array_literal(
        self,
        context: _ParseContext,
    ) -> Expression:
        self._expect(TokenType.LEFT_SQUARE_BRACKET, "'[' in array literal")  # This is a double-check.
        elements: Final[list[Expression]] = []
        while self._match(TokenType.RIGHT_SQUARE_BRACKET) is None:
            elements.append(self._expression(context, Precedence.UNKNOWN))
            if self._match(TokenType.COMMA) is None:
                self._expect(TokenType.RIGHT_SQUARE_BRACKET, "']' after array literal elements")
                break
        return ArrayLiteralExpression(elements=elements)

    def _object_literal(
        self,
        context: _ParseContext,
    ) -> Expression:
        self._expect(TokenType.LEFT_CURLY_BRACKET, "'{' in object literal")  # This is a double-check.
        entries: Final[list[ObjectEntry]] = []
        while self._match(TokenType.RIGHT_CURLY_BRACKET) is None:
            key = self._object_key()
            if any(entry.key == key for entry in entries):
                raise DuplicateObjectKeyError(key)
            self._expect(TokenType.COLON, "':' after object key")
            entries.append(ObjectEntry(key=key, value=self._expression(context, Precedence.UNKNOWN)))
            if self._match(TokenType.COMMA) is None:
                self._expect(TokenType.RIGHT_CURLY_BRACKET, "'}' after object literal entries")
                break
        return ObjectLiteralExpression(entries=entries)

    def _object_key(self) -> str:
        token: Final = self._current()
        if token.type in _PROPERTY_NAME_TOKEN_TYPES or token.type == TokenType.NUMBER_LITERAL:
            self._advance()
            return token.source_location.lexeme
        if token.type == TokenType.STRING_LITERAL:
            self._advance()
            return StringLiteralExpression.from_lexeme(token.source_location.lexeme).value
        raise ExpectedTokenError(token, "object key")

    def _is_at_end(self) -> bool:
        return (
            self._current_index >= len(self._tokens) or self._tokens[self._current_index].type == TokenType.END_OF_INPUT
        )

    def _current(self) -> Token:
        return self._tokens[-1] if self._is_at_end() else self._tokens[self._current_index]

    def _peek(self) -> Token:
        next_index: Final = self._current_index + 1
        return self._tokens[-1] if next_index >= len(self._tokens) else self._tokens[next_index]

    def _advance(self) -> Token:
        result: Final = self._current()
        if not self._is_at_end():
            self._current_index += 1
        return result

    def _match(self, token_type: TokenType) -> Optional[Token]:
        if self._is_at_end() or self._current().type != token_type:
            return None
        return self._advance()

    def _expect(self, token_type: TokenType, error_message: str) -> Token:
        token: Final = self._match(token_type)
        if token is None:
            raise ExpectedTokenError(self._current(), error_message)
        return token

    def _binary_expression(
        self,
        left_operand: Expression,
        context: _ParseContext,
    ) -> Expression:
        binary_operator: Final = _BINARY_OPERATOR_BY_TOKEN_TYPE.get(self._current().type)
        if binary_operator is None:
            msg = f"unexpected binary operator: {self._current().type}"
            raise AssertionError(msg)
        precedence: Final = Parser._PARSER_TABLE[self._current().type].infix_precedence
        self._advance()
        right_operand: Final = self._expression(context, precedence)
        return BinaryOperationExpression(left=left_operand, operator=binary_operator, right=right_operand)

    def _ternary_expression(
        self,
        left_operand: Expression,
        context: _ParseContext,
    ) -> Expression:
        self._expect(TokenType.QUESTION_MARK, "'?' in ternary expression")  # This is a double-check.
        true_expression: Final = self._expression(context, Precedence.UNKNOWN)
        self._expect(TokenType.COLON, "':' in ternary expression")
        # Parsing the false branch with the weakest precedence makes the operator right-associative.
        false_expression: Final = self._expression(context, Precedence.UNKNOWN)
        return TernaryOperationExpression(
            condition=left_operand,
            true_expression=true_expression,
            false_expression=false_expression,
        )

    def _member_access(
        self,
        left_operand: Expression,
        _context: _ParseContext,
    ) -> Expression:
        self._expect(TokenType.DOT, "'.' in member access")  # This is a double-check.
        return MemberAccessExpression(operand=left_operand, member=self._property_name())

    def _optional_chain(
        self,
        left_operand: Expression,
        context: _ParseContext,
    ) -> Expression:
        self._expect(TokenType.QUESTION_MARK_DOT, "'?.' in optional chain")  # This is a double-check.
        match self._current().type:
            case TokenType.LEFT_PARENTHESIS:
                self._advance()
                return CallOperationExpression(
                    callee=left_operand,
                    arguments=self._call_arguments(context),
                    optional=True,
                )
            case TokenType.LEFT_SQUARE_BRACKET:
                self._advance()
                return SubscriptOperationExpression(
                    operand=left_operand,
                    index=self._subscript_index(context),
                    optional=True,
                )
            case _:
                return MemberAccessExpression(operand=left_operand, member=self._property_name(), optional=True)

    def _property_name(self) -> str:
        token: Final = self._current()
        if token.type not in _PROPERTY_NAME_TOKEN_TYPES:
            raise ExpectedTokenError(token, "property name")
        self._advance()
        return token.source_location.lexeme

    def _call_operation(
        self,
        left_operand: Expression,
        context: _ParseContext,
    ) -> Expression:
        self._expect(TokenType.LEFT_PARENTHESIS, "'(' in function call")  # This is a double-check.
        return CallOperationExpression(
            callee=left_operand,
            arguments=self._call_arguments(context),
        )

    def _call_arguments(self, context: _ParseContext) -> list[Expression]:
        arguments: Final[list[Expression]] = []
        while self._match(TokenType.RIGHT_PARENTHESIS) is None:
            arguments.append(self._expression(context, Precedence.UNKNOWN))
            if self._match(TokenType.COMMA) is None:
                self._expect(TokenType.RIGHT_PARENTHESIS, "')' after function call arguments")
                break
        return arguments

    def _subscript_operator(
        self,
        left_operand: Expression,
        context: _ParseContext,
    ) -> Expression:
        self._expect(TokenType.LEFT_SQUARE_BRACKET, "'[' in subscript operator")  # This is a double-check.
        return SubscriptOperationExpression(operand=left_operand, index=self._subscript_index(context))

    def _subscript_index(self, context: _ParseContext) -> Expression:
        index: Final = self._expression(context, Precedence.UNKNOWN)
        self._expect(TokenType.RIGHT_SQUARE_BRACKET, "']' after subscript index")
        return index

    _PARSER_TABLE = {
        TokenType.COLON: _TableEntry.unused(),
        TokenType.COMMA: _TableEntry.unused(),
        TokenType.DOT: _TableEntry(None, _member_access, Precedence.CALL),
        TokenType.QUESTION_MARK_DOT: _TableEntry(None, _optional_chain, Precedence.CALL),
        TokenType.QUESTION_MARK: _TableEntry(None, _ternary_expression, Precedence.TERNARY),
        TokenType.QUESTION_MARK_QUESTION_MARK: _TableEntry(None, _binary_expression, Precedence.NULLISH),
        TokenType.EXCLAMATION_MARK: _TableEntry(_unary_operation, None, Precedence.UNARY),
        TokenType.EQUALS_EQUALS: _TableEntry(None, _binary_expression, Precedence.EQUALITY),
        TokenType.EQUALS_EQUALS_EQUALS: _TableEntry(None, _binary_expression, Precedence.EQUALITY),
        TokenType.EXCLAMATION_MARK_EQUALS: _TableEntry(None, _binary_expression, Precedence.EQUALITY),
        TokenType.EXCLAMATION_MARK_EQUALS_EQUALS: _TableEntry(None, _binary_expression, Precedence.EQUALITY),
        TokenType.LESS_THAN: _TableEntry(None, _binary_expression, Precedence.COMPARISON),
        TokenType.LESS_THAN_EQUALS: _TableEntry(None, _binary_expression, Precedence.COMPARISON),
        TokenType.GREATER_THAN: _TableEntry(None, _binary_expression, Precedence.COMPARISON),
        TokenType.GREATER_THAN_EQUALS: _TableEntry(None, _binary_expression, Precedence.COMPARISON),
        TokenType.AMPERSAND_AMPERSAND: _TableEntry(None, _binary_expression, Precedence.AND),
        TokenType.PIPE_PIPE: _TableEntry(None, _binary_expression, Precedence.OR),
        TokenType.ARROW: _TableEntry.unused(),
        TokenType.PLUS: _TableEntry(_unary_operation, _binary_expression, Precedence.SUM),
        TokenType.MINUS: _TableEntry(_unary_operation, _binary_expression, Precedence.SUM),
        TokenType.ASTERISK: _TableEntry(None, _binary_expression, Precedence.PRODUCT),
        TokenType.PERCENT: _TableEntry(None, _binary_expression, Precedence.PRODUCT),
        TokenType.SLASH: _TableEntry(None, _binary_expression, Precedence.PRODUCT),
        TokenType.LEFT_PARENTHESIS: _TableEntry(
            _grouped_expression_or_arrow_function,
            _call_operation,
            Precedence.CALL,
        ),
        TokenType.RIGHT_PARENTHESIS: _TableEntry.unused(),
        TokenType.LEFT_SQUARE_BRACKET: _TableEntry(_array_literal, _subscript_operator, Precedence.CALL),
        TokenType.RIGHT_SQUARE_BRACKET: _TableEntry.unused(),
        TokenType.LEFT_CURLY_BRACKET: _TableEntry(_object_literal, None, Precedence.UNKNOWN),
        TokenType.RIGHT_CURLY_BRACKET: _TableEntry.unused(),
        TokenType.IDENTIFIER: _TableEntry(_identifier, None, Precedence.UNARY),
        TokenType.STRING_LITERAL: _TableEntry(_string_literal, None, Precedence.UNARY),
        TokenType.NUMBER_LITERAL: _TableEntry(_number_literal, None, Precedence.UNARY),
        TokenType.BOOL_LITERAL: _TableEntry(_bool_literal, None, Precedence.UNARY),
        TokenType.NULL_LITERAL: _TableEntry(_null_literal, None, Precedence.UNARY),
        TokenType.UNDEFINED_LITERAL: _TableEntry(_null_literal, None, Precedence.UNARY),
        TokenType.END_OF_INPUT: _TableEntry.unused(),
    }

    if set(_PARSER_TABLE) != set(TokenType):
        missing_tokens: Final = set(TokenType) - set(_PARSER_TABLE)
        msg: Final = f"Parser table is missing entries for token types: {missing_tokens}"
        raise AssertionError(msg)
