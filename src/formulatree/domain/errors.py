from enum import Enum
from typing import Optional


class LexicalErrorKind(str, Enum):
    UNRECOGNIZED_CHARACTER = "unrecognized_character"
    INVALID_NUMBER = "invalid_number"
    UNTERMINATED_LITERAL = "unterminated_literal"


class ParseErrorKind(str, Enum):
    UNBALANCED_BRACKET = "unbalanced_bracket"
    MISSING_OPERAND = "missing_operand"
    UNEXPECTED_TOKEN = "unexpected_token"


class FormulaError(Exception):
    """base class for exceptions in formulatree."""

    def __init__(self, kind: Enum, message: str, start: int, end: Optional[int] = None,
                 formula: Optional[str] = None):
        self.kind = kind
        self.message = message
        self.start = start
        self.end = end if end is not None else start + 1
        self.formula = formula
        super().__init__(f"{message} (at offset {start})")


class LexicalError(FormulaError):
    """raised when the formula text cannot be split into tokens."""
    def __init__(self, kind: LexicalErrorKind, message: str, start: int, end: Optional[int] = None,
                 formula: Optional[str] = None):
        super().__init__(kind, message, start, end, formula)


class ParseError(FormulaError):
    """raised when the token stream does not form a valid expression."""
    def __init__(self, kind: ParseErrorKind, message: str, start: int, end: Optional[int] = None,
                 formula: Optional[str] = None):
        super().__init__(kind, message, start, end, formula)
