from typing import Final
from typing import Optional
from typing import final

from appbinder.expression_engine.escape_characters import ESCAPE_CHARACTERS
from appbinder.expression_engine.source_location import SourceLocation
from appbinder.expression_engine.token import Token
from appbinder.expression_engine.token_types import TokenType
from appbinder.expression_engine.types.evaluation_error import ExpressionSyntaxError

_KEYWORDS = {
    "true": TokenType.BOOL_LITERAL,
    "false": TokenType.BOOL_LITERAL,
    "null": TokenType.NULL_LITERAL,
    "undefined": TokenType.UNDEFINED_LITERAL,
}

# Longest operators first, so that e.g. `===` is not lexed as `==` followed by `=`.
_OPERATOR_TOKENS = (
    ("===", TokenType.EQUALS_EQUALS_EQUALS),
    ("!==", TokenType.EXCLAMATION_MARK_EQUALS_EQUALS),
    ("==", TokenType.EQUALS_EQUALS),
    ("!=", TokenType.EXCLAMATION_MARK_EQUALS),
    ("<=", TokenType.LESS_THAN_EQUALS),
    (">=", TokenType.GREATER_THAN_EQUALS),
    ("&&", TokenType.AMPERSAND_AMPERSAND),
    ("||", TokenType.PIPE_PIPE),
    ("??", TokenType.QUESTION_MARK_QUESTION_MARK),
    ("?.", TokenType.QUESTION_MARK_DOT),
    ("=>", TokenType.ARROW),
    (":", TokenType.COLON),
    (",", TokenType.COMMA),
    (".", TokenType.DOT),
    ("?", TokenType.QUESTION_MARK),
    ("!", TokenType.EXCLAMATION_MARK),
    ("<", TokenType.LESS_THAN),
    (">", TokenType.GREATER_THAN),
    ("+", TokenType.PLUS),
    ("-", TokenType.MINUS),
    ("*", TokenType.ASTERISK),
    ("/", TokenType.SLASH),
    ("%", TokenType.PERCENT),
    ("(", TokenType.LEFT_PARENTHESIS),
    (")", TokenType.RIGHT_PARENTHESIS),
    ("[", TokenType.LEFT_SQUARE_BRACKET),
    ("]", TokenType.RIGHT_SQUARE_BRACKET),
    ("{", TokenType.LEFT_CURLY_BRACKET),
    ("}", TokenType.RIGHT_CURLY_BRACKET),
)


@final
class LexerError(ExpressionSyntaxError):
    def __init__(self, message: str, source_location: SourceLocation) -> None:
        super().__init__(f"{message} ({source_location.describe()})")
        self.source_location: Final = source_location


@final
class Lexer:
    def __init__(self, source: str) -> None:
        self._source: Final = source
        self._current_offset = 0

    def tokenize(self) -> list[Token]:
        tokens: Final[list[Token]] = []
        self._discard_whitespace()
        while not self._is_at_end():
            match self._current():
                case char if Lexer._is_digit(char) or (char == "." and Lexer._is_digit(self._peek())):
                    tokens.append(self._number_literal())
                case "'" | '"' as quote:
                    tokens.append(self._string_literal(quote))
                case char if Lexer._is_valid_identifier_start(char):
                    start_offset = self._current_offset
                    self._advance()
                    while Lexer._is_valid_identifier_continuation(self._current()):
                        self._advance()
                    lexeme = self._source[start_offset : self._current_offset]
                    tokens.append(self._create_token(_KEYWORDS.get(lexeme, TokenType.IDENTIFIER), start_offset))
                case _:
                    tokens.append(self._operator())
            self._discard_whitespace()
        tokens.append(
            Token(
                type=TokenType.END_OF_INPUT,
                source_location=self._current_source_location,
            )
        )
        return tokens

    def _number_literal(self) -> Token:
        start_offset: Final = self._current_offset
        while Lexer._is_digit(self._current()):
            self._advance()
        if self._current() == "." and Lexer._is_digit(self._peek()):
            self._advance()
            while Lexer._is_digit(self._current()):
                self._advance()
        if Lexer._is_valid_identifier_start(self._current()):
            raise LexerError("Invalid number format.", self._current_source_location)
        return self._create_token(TokenType.NUMBER_LITERAL, start_offset)

    def _string_literal(self, quote: str) -> Token:
        start_offset: Final = self._current_offset
        self._advance()  # Consume opening quote.
        while self._current() != quote:
            if self._is_at_end():
                raise LexerError("Unterminated string literal.", self._current_source_location)
            if self._current() == "\\":
                self._advance()
                if self._current() not in ESCAPE_CHARACTERS:
                    msg = f"Invalid escape sequence '\\{self._current()}'."
                    raise LexerError(msg, self._current_source_location)
            self._advance()
        self._advance()  # Consume closing quote.
        return self._create_token(TokenType.STRING_LITERAL, start_offset)

    def _operator(self) -> Token:
        for lexeme, token_type in _OPERATOR_TOKENS:
            if self._source.startswith(lexeme, self._current_offset):
                # `?.5` is a ternary followed by a number, not optional chaining.
                if token_type == TokenType.QUESTION_MARK_DOT and Lexer._is_digit(self._peek(2)):
                    continue
                start_offset = self._current_offset
                self._current_offset += len(lexeme)
                return self._create_token(token_type, start_offset)
        msg: Final = f"Unexpected character '{self._current()}'."
        raise LexerError(msg, self._current_source_location)

    @staticmethod
    def _is_digit(char: str) -> bool:
        return char.isascii() and char.isdigit()

    @staticmethod
    def _is_valid_identifier_start(char: str) -> bool:
        return (char.isascii() and char.isalpha()) or char in "_$"

    @staticmethod
    def _is_valid_identifier_continuation(char: str) -> bool:
        return Lexer._is_valid_identifier_start(char) or Lexer._is_digit(char)

    @property
    def _current_source_location(self) -> SourceLocation:
        return SourceLocation(
            source=self._source,
            offset=self._current_offset,
            length=1,
        )

    def _create_token(self, type_: TokenType, start_offset: Optional[int] = None) -> Token:
        if start_offset is None:
            start_offset = self._current_offset - 1
        return Token(
            type=type_,
            source_location=SourceLocation(
                source=self._source,
                offset=start_offset,
                length=self._current_offset - start_offset,
            ),
        )

    def _discard_whitespace(self) -> None:
        while not self._is_at_end() and self._current().isspace():
            self._advance()

    def _is_at_end(self) -> bool:
        return self._current_offset >= len(self._source)

    def _current(self) -> str:
        return "\0" if self._is_at_end() else self._source[self._current_offset]

    def _peek(self, distance: int = 1) -> str:
        offset: Final = self._current_offset + distance
        return "\0" if offset >= len(self._source) else self._source[offset]

    def _advance(self) -> str:
        result: Final = self._current()
        if self._is_at_end():
            return result
        self._current_offset += 1
        return result
