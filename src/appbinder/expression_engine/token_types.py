from enum import Enum
from enum import auto
from typing import final


@final
class TokenType(Enum):
    COLON = auto()
    COMMA = auto()
    DOT = auto()
    QUESTION_MARK_DOT = auto()
    QUESTION_MARK = auto()
    QUESTION_MARK_QUESTION_MARK = auto()
    EXCLAMATION_MARK = auto()
    EQUALS_EQUALS = auto()
    EQUALS_EQUALS_EQUALS = auto()
    EXCLAMATION_MARK_EQUALS = auto()
    EXCLAMATION_MARK_EQUALS_EQUALS = auto()
    LESS_THAN = auto()
    LESS_THAN_EQUALS = auto()
    GREATER_THAN = auto()
    GREATER_THAN_EQUALS = auto()
    AMPERSAND_AMPERSAND = auto()
    PIPE_PIPE = auto()
    ARROW = auto()
    PLUS = auto()
    MINUS = auto()
    ASTERISK = auto()
    PERCENT = auto()
    SLASH = auto()
    LEFT_PARENTHESIS = auto()
    RIGHT_PARENTHESIS = auto()
    LEFT_SQUARE_BRACKET = auto()
    RIGHT_SQUARE_BRACKET = auto()
    LEFT_CURLY_BRACKET = auto()
    RIGHT_CURLY_BRACKET = auto()

    IDENTIFIER = auto()
    STRING_LITERAL = auto()
    NUMBER_LITERAL = auto()
    BOOL_LITERAL = auto()
    NULL_LITERAL = auto()
    UNDEFINED_LITERAL = auto()

    END_OF_INPUT = auto()
