from decimal import Decimal
from enum import Enum, auto
from typing import NamedTuple, Union


class TokenType(Enum):
    LITERAL = auto()
    STRING = auto()
    ERROR = auto()
    NUMBER = auto()
    SYMBOL = auto()


class ErrorCode(str, Enum):
    REF = "#REF!"
    NAME = "#NAME?"
    VALUE = "#VALUE!"
    DIV0 = "#DIV/0!"
    NA = "#N/A"
    NUM = "#NUM!"


class Symbol(str, Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    POWER = "^"
    OPEN_BRACKET = "("
    CLOSE_BRACKET = ")"
    OPEN_SQUARE = "["
    CLOSE_SQUARE = "]"
    AMPERSAND = "&"
    COMMA = ","
    BANG = "!"
    COLON = ":"
    PERCENT = "%"
    EQUAL = "="
    NOT_EQUAL = "<>"
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN_OR_EQUAL = ">="

    @property
    def is_maths(self) -> bool:
        return self in MATHS_SYMBOLS

    @property
    def is_comparison(self) -> bool:
        return self in COMPARISON_SYMBOLS

    @property
    def is_close(self) -> bool:
        return self in (Symbol.CLOSE_BRACKET, Symbol.CLOSE_SQUARE)

    @property
    def precedence(self) -> int:
        return PRECEDENCE[self]


MATHS_SYMBOLS = frozenset({
    Symbol.ADD, Symbol.SUBTRACT, Symbol.MULTIPLY, Symbol.DIVIDE, Symbol.POWER,
})

COMPARISON_SYMBOLS = frozenset({
    Symbol.EQUAL, Symbol.NOT_EQUAL, Symbol.LESS_THAN, Symbol.GREATER_THAN,
    Symbol.LESS_THAN_OR_EQUAL, Symbol.GREATER_THAN_OR_EQUAL,
})

# lower binds more loosely
PRECEDENCE = {
    Symbol.BANG: 2000,
    Symbol.OPEN_BRACKET: 1000,
    Symbol.CLOSE_BRACKET: 1000,
    Symbol.OPEN_SQUARE: 1000,
    Symbol.CLOSE_SQUARE: 1000,
    Symbol.COMMA: 500,
    Symbol.COLON: 400,
    Symbol.PERCENT: 100,
    Symbol.POWER: 30,
    Symbol.MULTIPLY: 20,
    Symbol.DIVIDE: 20,
    Symbol.ADD: 10,
    Symbol.SUBTRACT: 10,
    Symbol.AMPERSAND: 1,
    **{s: 0 for s in COMPARISON_SYMBOLS},
}


TokenValue = Union[str, Decimal, ErrorCode, Symbol]


class Token(NamedTuple):
    type: TokenType
    value: TokenValue
    start: int
    end: int

    def is_symbol(self, symbol: Symbol) -> bool:
        return self.type == TokenType.SYMBOL and self.value == symbol

    @property
    def symbol(self):
        """the Symbol carried by this token, or None for non-symbol tokens."""
        return self.value if self.type == TokenType.SYMBOL else None

    def __str__(self) -> str:
        if isinstance(self.value, Enum):
            return self.value.value
        return str(self.value)
