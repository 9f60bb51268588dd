from typing import Final

import pytest

from appbinder.expression_engine.lexer import Lexer
from appbinder.expression_engine.lexer import LexerError
from appbinder.expression_engine.source_location import SourceLocation
from appbinder.expression_engine.token import Token
from appbinder.expression_engine.token_types import TokenType


def _tokenize_source(source: str) -> list[Token]:
    lexer: Final = Lexer(source)
    return lexer.tokenize()


def _token_types(source: str) -> list[TokenType]:
    return [token.type for token in _tokenize_source(source)]


def test_tokenize_can_analyze_all_token_types() -> None:
    source: Final = (
        ": , . ?. ? ?? ! == === != !== < <= > >= && || => + - * % / ( ) [ ] { } "
        + "some_identifier_123 'single' 3.14 true null undefined"
    )
    tokens: Final = _tokenize_source(source)

    assert [token.type for token in tokens] == list(TokenType)
    assert [token.source_location.lexeme for token in tokens[:-1]] == source.split()


def test_tokenize_records_source_locations() -> None:
    source: Final = "widgets.input1.value"
    tokens: Final = _tokenize_source(source)

    assert tokens[0] == Token(TokenType.IDENTIFIER, SourceLocation(source, offset=0, length=7))
    assert tokens[1] == Token(TokenType.DOT, SourceLocation(source, offset=7, length=1))
    assert tokens[2] == Token(TokenType.IDENTIFIER, SourceLocation(source, offset=8, length=6))
    assert tokens[3] == Token(TokenType.DOT, SourceLocation(source, offset=14, length=1))
    assert tokens[4] == Token(TokenType.IDENTIFIER, SourceLocation(source, offset=15, length=5))
    assert tokens[5].type == TokenType.END_OF_INPUT
    assert tokens[5].source_location.offset == len(source)


def test_tokenize_empty_source_yields_only_end_of_input() -> None:
    assert _token_types("") == [TokenType.END_OF_INPUT]
    assert _token_types("   \n\t ") == [TokenType.END_OF_INPUT]


@pytest.mark.parametrize(
    ("source", "expected_types"),
    [
        ("a===b", [TokenType.IDENTIFIER, TokenType.EQUALS_EQUALS_EQUALS, TokenType.IDENTIFIER]),
        ("a!==b", [TokenType.IDENTIFIER, TokenType.EXCLAMATION_MARK_EQUALS_EQUALS, TokenType.IDENTIFIER]),
        ("a==b", [TokenType.IDENTIFIER, TokenType.EQUALS_EQUALS, TokenType.IDENTIFIER]),
        ("!!a", [TokenType.EXCLAMATION_MARK, TokenType.EXCLAMATION_MARK, TokenType.IDENTIFIER]),
        ("a??b", [TokenType.IDENTIFIER, TokenType.QUESTION_MARK_QUESTION_MARK, TokenType.IDENTIFIER]),
        ("a?.b", [TokenType.IDENTIFIER, TokenType.QUESTION_MARK_DOT, TokenType.IDENTIFIER]),
        ("x=>x", [TokenType.IDENTIFIER, TokenType.ARROW, TokenType.IDENTIFIER]),
        ("a<=b", [TokenType.IDENTIFIER, TokenType.LESS_THAN_EQUALS, TokenType.IDENTIFIER]),
    ],
)
def test_tokenize_prefers_longest_operator(source: str, expected_types: list[TokenType]) -> None:
    assert _token_types(source) == [*expected_types, TokenType.END_OF_INPUT]


def test_question_mark_dot_before_digit_is_a_ternary() -> None:
    assert _token_types("a?.5:1") == [
        TokenType.IDENTIFIER,
        TokenType.QUESTION_MARK,
        TokenType.NUMBER_LITERAL,
        TokenType.COLON,
        TokenType.NUMBER_LITERAL,
        TokenType.END_OF_INPUT,
    ]


@pytest.mark.parametrize(
    "source",
    ["0", "42", "3.14", ".5", "100.25"],
)
def test_tokenize_number_literals(source: str) -> None:
    tokens: Final = _tokenize_source(source)
    assert len(tokens) == 2
    assert tokens[0].type == TokenType.NUMBER_LITERAL
    assert tokens[0].source_location.lexeme == source


def test_number_followed_by_dot_and_identifier_is_member_access() -> None:
    assert _token_types("1.toString") == [
        TokenType.NUMBER_LITERAL,
        TokenType.DOT,
        TokenType.IDENTIFIER,
        TokenType.END_OF_INPUT,
    ]


@pytest.mark.parametrize(
    ("source", "lexeme"),
    [
        ("'hello'", "'hello'"),
        ('"hello"', '"hello"'),
        (r"'it\'s'", r"'it\'s'"),
        ("'say \"hi\"'", "'say \"hi\"'"),
        (r"'a\nb\tc\\'", r"'a\nb\tc\\'"),
        ("'üñíçødé 🐍'", "'üñíçødé 🐍'"),
    ],
)
def test_tokenize_string_literals(source: str, lexeme: str) -> None:
    tokens: Final = _tokenize_source(source)
    assert tokens[0].type == TokenType.STRING_LITERAL
    assert tokens[0].source_location.lexeme == lexeme


@pytest.mark.parametrize(
    ("source", "expected_type"),
    [
        ("true", TokenType.BOOL_LITERAL),
        ("false", TokenType.BOOL_LITERAL),
        ("null", TokenType.NULL_LITERAL),
        ("undefined", TokenType.UNDEFINED_LITERAL),
        ("trueish", TokenType.IDENTIFIER),
        ("$value", TokenType.IDENTIFIER),
        ("_private", TokenType.IDENTIFIER),
    ],
)
def test_tokenize_keywords_and_identifiers(source: str, expected_type: TokenType) -> None:
    assert _token_types(source) == [expected_type, TokenType.END_OF_INPUT]


def test_unterminated_string_raises() -> None:
    with pytest.raises(LexerError, match="Unterminated string literal"):
        _tokenize_source("'never closed")


def test_invalid_escape_sequence_raises() -> None:
    with pytest.raises(LexerError, match=r"Invalid escape sequence '\\q'"):
        _tokenize_source(r"'\q'")


def test_identifier_directly_after_number_raises() -> None:
    with pytest.raises(LexerError, match="Invalid number format"):
        _tokenize_source("12abc")


def test_unexpected_character_raises_with_position() -> None:
    source: Final = "widgets.a # 1"
    with pytest.raises(LexerError) as exception_info:
        _tokenize_source(source)
    error: Final = exception_info.value
    assert "Unexpected character '#'" in str(error)
    assert "column 11" in str(error)
    assert error.source_location == SourceLocation(source, offset=10, length=1)


def test_error_position_mentions_line_for_multi_line_sources() -> None:
    with pytest.raises(LexerError, match="line 2, column 3"):
        _tokenize_source("1 +\n2 ; 3")


def test_single_equals_sign_is_not_an_operator() -> None:
    with pytest.raises(LexerError, match="Unexpected character '='"):
        _tokenize_source("a = 1")


def test_advance_returns_sentinel_at_end() -> None:
    lexer: Final = Lexer("")
    assert lexer._advance() == "\0"  # type: ignore[reportPrivateUsage]
    assert lexer._advance() == "\0"  # type: ignore[reportPrivateUsage]
