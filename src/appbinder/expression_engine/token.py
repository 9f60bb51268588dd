from typing import NamedTuple
from typing import final

from appbinder.expression_engine.source_location import SourceLocation
from appbinder.expression_engine.token_types import TokenType


@final
class Token(NamedTuple):
    type: TokenType
    source_location: SourceLocation
