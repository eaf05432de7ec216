import logging
from decimal import Decimal, InvalidOperation
from enum import Enum, auto
from typing import Iterator, List, Optional, Tuple

from ..domain.errors import LexicalError, LexicalErrorKind
from ..domain.tokens import ErrorCode, Symbol, Token, TokenType

logger = logging.getLogger(__name__)


class ScanMode(Enum):
    OUTSIDE_SQUARE_BRACKETS = auto()
    INSIDE_SQUARE_BRACKETS = auto()


SYMBOL_CHARACTERS = "+-*/^()[]!:,&%=<>"
TWO_CHARACTER_SYMBOLS = ("<>", "<=", ">=")
LITERAL_FIRST_EXTRA = "_$"
LITERAL_EXTRA = "_.$"
ERROR_CHARACTERS = frozenset("".join(code.value for code in ErrorCode))
DIGITS = "0123456789"

# longest first so that no code shadows a longer one
ERROR_CODES = sorted(ErrorCode, key=lambda code: len(code.value), reverse=True)


class FormulaTokenizer:
    """
    lazy, single-pass tokenizer for spreadsheet formulas.

    whitespace is skipped and never emitted. scanning rules change inside
    square brackets (structured table references); the current rules are
    tracked by a ScanMode threaded through the scan loop.

    an instance can be iterated only once; create a new tokenizer to rescan.
    """

    def __init__(self, formula: str):
        self.formula = formula
        self._tokens = self._scan()

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        return next(self._tokens)

    # scan loop ---------------------------------------------------------

    def _scan(self) -> Iterator[Token]:
        s = self.formula
        pos = 0
        mode = ScanMode.OUTSIDE_SQUARE_BRACKETS

        while pos < len(s):
            ch = s[pos]
            if ch.isspace():
                pos += 1
                continue

            if mode is ScanMode.OUTSIDE_SQUARE_BRACKETS:
                token = self._next_outside(pos)
            else:
                token = self._next_inside(pos)

            if token.is_symbol(Symbol.OPEN_SQUARE):
                mode = ScanMode.INSIDE_SQUARE_BRACKETS
            elif token.is_symbol(Symbol.CLOSE_SQUARE):
                mode = ScanMode.OUTSIDE_SQUARE_BRACKETS

            logger.debug(f"scanned {token.type.name} {str(token)!r} at {token.start}")
            yield token
            pos = token.end

    def _next_outside(self, pos: int) -> Token:
        ch = self.formula[pos]
        if ch == "#":
            return self._error_code(pos)
        if ch == '"':
            value, end = self._escaped(pos, '"')
            return Token(TokenType.STRING, value, pos, end)
        if ch == "'":
            value, end = self._escaped(pos, "'")
            return Token(TokenType.LITERAL, value, pos, end)
        if ch in DIGITS:
            return self._number(pos)
        if ch in SYMBOL_CHARACTERS:
            return self._symbol(pos)
        if ch.isalnum() or ch in LITERAL_FIRST_EXTRA:
            return self._literal(pos)
        self._fail(LexicalErrorKind.UNRECOGNIZED_CHARACTER,
                   f"could not identify first character of the token: {ch!r}", pos)

    def _next_inside(self, pos: int) -> Token:
        ch = self.formula[pos]
        if ch == "[":
            return self._escaped_structured_literal(pos)
        if ch.isalnum() or ch in "'#":
            return self._structured_literal(pos)
        if ch in SYMBOL_CHARACTERS:
            return self._symbol(pos)
        self._fail(LexicalErrorKind.UNRECOGNIZED_CHARACTER,
                   f"could not identify first character of the structured reference token: {ch!r}", pos)

    # token scanners ----------------------------------------------------

    def _number(self, pos: int) -> Token:
        s = self.formula
        end = self._skip_digits(pos)
        if end < len(s) and s[end] == ".":
            end = self._skip_digits(end + 1)
        if end < len(s) and s[end] in "eE":
            end += 1
            if end < len(s) and s[end] in "+-":
                end += 1
            end = self._skip_digits(end)

        text = s[pos:end]
        try:
            value = Decimal(text)
        except InvalidOperation:
            self._fail(LexicalErrorKind.INVALID_NUMBER, f"could not convert {text!r} into a number", pos, end)
        return Token(TokenType.NUMBER, value, pos, end)

    def _skip_digits(self, pos: int) -> int:
        while pos < len(self.formula) and self.formula[pos] in DIGITS:
            pos += 1
        return pos

    def _symbol(self, pos: int) -> Token:
        pair = self.formula[pos:pos + 2]
        if pair in TWO_CHARACTER_SYMBOLS:
            return Token(TokenType.SYMBOL, Symbol(pair), pos, pos + 2)
        return Token(TokenType.SYMBOL, Symbol(self.formula[pos]), pos, pos + 1)

    def _literal(self, pos: int) -> Token:
        s = self.formula
        end = pos + 1
        while end < len(s) and (s[end].isalnum() or s[end] in LITERAL_EXTRA):
            end += 1
        return Token(TokenType.LITERAL, s[pos:end], pos, end)

    def _error_code(self, pos: int) -> Token:
        for code in ERROR_CODES:
            if self.formula.startswith(code.value, pos):
                return Token(TokenType.ERROR, code, pos, pos + len(code.value))

        end = pos + 1
        while end < len(self.formula) and self.formula[end] in ERROR_CHARACTERS:
            end += 1
        self._fail(LexicalErrorKind.UNRECOGNIZED_CHARACTER,
                   f"could not convert {self.formula[pos:end]!r} into an error code", pos, end)

    def _escaped(self, pos: int, marker: str) -> Tuple[str, int]:
        """
        scan a literal delimited by marker, where a doubled marker stands
        for one marker character.

        returns the decoded text and the offset just past the closing marker.
        """
        s = self.formula
        parts: List[str] = []
        start = pos + 1
        i = start
        while True:
            close = s.find(marker, i)
            if close == -1:
                self._fail(LexicalErrorKind.UNTERMINATED_LITERAL,
                           f"literal opened with {marker} is never closed", pos, len(s))
            if s.startswith(marker, close + 1):
                parts.append(s[i:close + 1])
                i = close + 2
                continue
            parts.append(s[i:close])
            return "".join(parts), close + 1

    def _structured_literal(self, pos: int) -> Token:
        """
        an unbracketed name inside a structured reference, e.g. ``Sales`` in
        ``Table1[Sales]``. a ``'`` escapes the following character and is
        dropped.
        """
        s = self.formula
        chars: List[str] = []
        end = pos
        # last offset that holds a non-space character of the literal
        content_end = pos
        content_len = 0
        if s[end] == "#":
            chars.append("#")
            end += 1
            content_end, content_len = end, len(chars)
        while end < len(s):
            ch = s[end]
            if ch == "'":
                if end + 1 >= len(s):
                    self._fail(LexicalErrorKind.UNTERMINATED_LITERAL,
                               "escape character at end of structured reference", end, end + 1)
                chars.append(s[end + 1])
                end += 2
                content_end, content_len = end, len(chars)
            elif ch.isalnum():
                chars.append(ch)
                end += 1
                content_end, content_len = end, len(chars)
            elif ch == " ":
                chars.append(ch)
                end += 1
            else:
                break
        # trailing spaces are left for the scan loop to skip
        return Token(TokenType.LITERAL, "".join(chars[:content_len]), pos, content_end)

    def _escaped_structured_literal(self, pos: int) -> Token:
        """
        a bracketed name inside a structured reference, e.g. ``[Sales Person]``.
        runs until an unescaped ``]``; a ``'`` and the character after it are
        both kept as written.
        """
        s = self.formula
        i = pos + 1
        while i < len(s):
            if s[i] == "'":
                i += 2
                continue
            if s[i] == "]":
                return Token(TokenType.LITERAL, s[pos + 1:i], pos, i + 1)
            i += 1
        self._fail(LexicalErrorKind.UNTERMINATED_LITERAL,
                   "structured reference column is never closed", pos, len(s))

    def _fail(self, kind: LexicalErrorKind, message: str, start: int, end: Optional[int] = None):
        raise LexicalError(kind, message, start, end, formula=self.formula)


def tokenize(formula: str) -> Iterator[Token]:
    """tokenize formula text lazily. the result can be consumed once."""
    return FormulaTokenizer(formula)
