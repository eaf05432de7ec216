"""
recursive-descent / precedence-climbing parser for spreadsheet formulas.

the parser pulls tokens on demand through a two-token LookaheadBuffer. a
primary expression is parsed first and then repeatedly "joined" with
whatever follows it (operators, ranges, text joins, comparisons, implicit
intersections) until nothing more applies.

operators of equal precedence accumulate into one flat MathsChain; an
operator that binds tighter than the current one is absorbed into the
right-hand operand first, producing a nested chain.
"""
import logging
from typing import Iterable, List, NoReturn, Optional, Tuple, Type, Union

from ..config import Settings, get_settings
from ..domain.errors import FormulaError, ParseError, ParseErrorKind
from ..domain.expressions import (
    BooleanValue,
    Bracketed,
    CellRef,
    Comparison,
    ComparisonOperator,
    Empty,
    ErrorValue,
    Expression,
    FunctionCall,
    Intersection,
    MathsChain,
    MathsOperation,
    MathsStep,
    NumberValue,
    Range,
    SheetRef,
    StringValue,
    StructuredRef,
    TableRef,
    TextJoin,
)
from ..domain.expressions import Union as UnionExpression
from ..domain.tokens import COMPARISON_SYMBOLS, MATHS_SYMBOLS, Symbol, Token, TokenType
from ..ui.markers import mark
from .lookahead import LookaheadBuffer
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

# symbols that extend an already-parsed expression. brackets, bang and
# comma have precedences too but never start a join.
JOIN_SYMBOLS = MATHS_SYMBOLS | COMPARISON_SYMBOLS | {Symbol.COLON, Symbol.PERCENT, Symbol.AMPERSAND}
# joins applied in place; the rest take everything after them as their right side
EAGER_JOIN_SYMBOLS = JOIN_SYMBOLS - {Symbol.AMPERSAND}


class FormulaParser:
    def __init__(self, tokens: Iterable[Token], formula: Optional[str] = None):
        self.tokens: LookaheadBuffer[Token] = LookaheadBuffer(tokens)
        self.formula = formula

    def parse(self) -> Optional[Expression]:
        """
        parse the whole token stream into one expression.

        returns None for an empty stream. raises ParseError if the stream is
        not a single well-formed expression.
        """
        if self._peek() is None:
            return None

        expression = self._result()
        leftover = self._peek()
        if leftover is not None:
            self._fail_unexpected(leftover, "unexpected token after the end of the expression")
        return expression

    # token helpers -----------------------------------------------------

    def _peek(self) -> Optional[Token]:
        return self.tokens.peek()

    def _next(self) -> Optional[Token]:
        return self.tokens.next()

    def _peek_symbol(self) -> Optional[Symbol]:
        token = self._peek()
        return token.symbol if token is not None else None

    # expressions -------------------------------------------------------

    def _result(self) -> Optional[Expression]:
        # '&' and intersections take the whole rest of the expression as their
        # right side. they are stacked and folded from the right once the
        # expression ends, so long chains do not recurse once per term.
        pending: List[Tuple[Type[Expression], Expression, Optional[Token]]] = []
        while True:
            parsed = self._parse_operand()
            if parsed is None:
                if not pending:
                    return None
                join, parsed, joiner = pending.pop()
                if join is TextJoin:
                    self._require(None, joiner, "nothing to join after '&'")
                # nothing here can start a value, so there was no intersection
                break

            while self._peek_symbol() in EAGER_JOIN_SYMBOLS:
                parsed = self._parse_join(parsed)

            if self._peek_symbol() is Symbol.AMPERSAND:
                pending.append((TextJoin, parsed, self._next()))
            elif self._peek() is not None:
                pending.append((Intersection, parsed, None))
            else:
                break

        for join, left, _ in reversed(pending):
            parsed = join(left=left, right=parsed)
        return parsed

    def _parse_negation(self) -> Optional[Expression]:
        """prefix minus in front of something other than a number, e.g. -(1+3)"""
        if self._peek_symbol() is not Symbol.SUBTRACT:
            return None
        minus = self._next()
        operand = self._require(self._parse_operand(), minus, "nothing to negate after '-'")
        return MathsChain(operations=[MathsOperation(kind=MathsStep.SUBTRACT, operand=operand)])

    def _parse_operand(self) -> Optional[Expression]:
        operand = self._parse_next_token()
        if operand is None:
            operand = self._parse_negation()
        return operand

    def _parse_next_token(self) -> Optional[Expression]:
        token = self._peek()
        if token is None:
            return None

        if token.type == TokenType.LITERAL:
            self._next()
            return self._parse_literal(token)

        if token.type == TokenType.STRING:
            self._next()
            return StringValue(value=token.value)

        if token.type == TokenType.ERROR:
            self._next()
            return ErrorValue(code=token.value)

        if token.type == TokenType.NUMBER:
            self._next()
            return NumberValue(value=token.value)

        symbol = token.symbol
        if symbol is Symbol.SUBTRACT:
            further = self.tokens.peek_further()
            if further is not None and further.type == TokenType.NUMBER:
                self._next()
                self._next()
                return NumberValue(value=further.value.copy_negate())
            return None

        if symbol is Symbol.OPEN_BRACKET:
            return self._parse_brackets()

        if symbol is Symbol.OPEN_SQUARE:
            return self._parse_structured()

        # closing tokens and anything else cannot start a value
        return None

    def _parse_literal(self, token: Token) -> Expression:
        name = token.value
        follow = self._peek_symbol()

        if follow is Symbol.OPEN_BRACKET:
            opener = self._next()
            args = self._parse_list(Symbol.COMMA, Symbol.CLOSE_BRACKET, opener)
            return FunctionCall(name=name, args=args)

        if name == "TRUE":
            return BooleanValue(value=True)
        if name == "FALSE":
            return BooleanValue(value=False)

        if follow is Symbol.BANG:
            bang = self._next()
            ref = self._require(self._parse_next_token(), bang, "nothing after '!'")
            return SheetRef(sheet=CellRef(name=name), ref=ref)

        if follow is Symbol.OPEN_SQUARE:
            opener = self._peek()
            structured = self._require(self._parse_next_token(), opener, "nothing after '['")
            return TableRef(table_name=name, structured_ref=structured)

        return CellRef(name=name)

    def _parse_brackets(self) -> Expression:
        opener = self._next()
        inner = self._result()
        if inner is None:
            inner = Empty()
        close = self._next()
        if close is None or not close.is_symbol(Symbol.CLOSE_BRACKET):
            self._fail(ParseErrorKind.UNBALANCED_BRACKET, "brackets not closed", opener)
        return Bracketed(inner=inner)

    def _parse_structured(self) -> Expression:
        opener = self._next()
        elements = self._parse_list(Symbol.COMMA, Symbol.CLOSE_SQUARE, opener)
        if not elements:
            return StructuredRef(inner=Empty())
        if len(elements) == 1:
            return StructuredRef(inner=elements[0])
        return StructuredRef(inner=UnionExpression(elements=elements))

    def _parse_list(self, separator: Symbol, close: Symbol, opener: Token) -> List[Expression]:
        parsed_expression = False
        items: List[Expression] = []
        while True:
            token = self._peek()
            if token is None:
                self._fail(ParseErrorKind.UNBALANCED_BRACKET, f"{opener} is never closed", opener)

            if token.is_symbol(separator):
                # (1,,3) == [1, Empty, 3]
                if not parsed_expression:
                    items.append(Empty())
                self._next()
                parsed_expression = False
                continue

            if token.is_symbol(close):
                self._next()
                # () == []
                if not items:
                    return items
                # (,) == [Empty, Empty]
                if not parsed_expression:
                    items.append(Empty())
                return items

            sub_expression = self._result()
            if sub_expression is None:
                self._fail_unexpected(token, f"unexpected {token} in list opened by {opener}")
            items.append(sub_expression)
            parsed_expression = True

    # joins -------------------------------------------------------------

    def _parse_join(self, left: Expression) -> Optional[Expression]:
        token = self._peek()
        if token is None:
            return None

        symbol = token.symbol
        if symbol is Symbol.COLON:
            return self._parse_range(left)
        if symbol in MATHS_SYMBOLS:
            return self._parse_operator(left)
        if symbol is Symbol.AMPERSAND:
            return self._parse_text_join(left)
        if symbol is Symbol.PERCENT:
            self._next()
            return MathsChain(operations=[MathsOperation(kind=MathsStep.PERCENT, operand=left)])
        if symbol in COMPARISON_SYMBOLS:
            return self._parse_comparison(left)
        return None

    def _absorb(self, operand: Expression, precedence: int) -> Expression:
        """extend operand with every pending join that binds tighter than precedence."""
        while True:
            symbol = self._peek_symbol()
            if symbol not in JOIN_SYMBOLS or symbol.precedence <= precedence:
                return operand
            operand = self._parse_join(operand)

    def _parse_operator(self, left: Expression) -> Expression:
        operator = self._next()
        precedence = operator.symbol.precedence
        operations = [MathsOperation(kind=MathsStep.START, operand=left)]

        while True:
            right = self._require(self._parse_operand(), operator, f"missing the right hand side of '{operator}'")
            right = self._absorb(right, precedence)
            operations.append(MathsOperation(kind=MathsStep.from_symbol(operator.symbol), operand=right))

            # same precedence continues this chain, anything else closes it
            symbol = self._peek_symbol()
            if symbol not in MATHS_SYMBOLS or symbol.precedence != precedence:
                break
            operator = self._next()

        return MathsChain(operations=operations)

    def _parse_comparison(self, left: Expression) -> Expression:
        operator = self._next()
        right = self._require(self._parse_operand(), operator, f"missing the right hand side of '{operator}'")
        right = self._absorb(right, operator.symbol.precedence)
        return Comparison(op=ComparisonOperator.from_symbol(operator.symbol), left=left, right=right)

    def _parse_range(self, left: Expression) -> Expression:
        colon = self._next()
        right = self._require(self._parse_next_token(), colon, "no right hand side to ':'")
        return Range(left=left, right=right)

    def _parse_text_join(self, left: Expression) -> Expression:
        ampersand = self._next()
        right = self._require(self._result(), ampersand, "nothing to join after '&'")
        return TextJoin(left=left, right=right)

    # failures ----------------------------------------------------------

    def _require(self, expression: Optional[Expression], after: Token, message: str) -> Expression:
        if expression is not None:
            return expression
        token = self._peek()
        if token is None:
            raise ParseError(ParseErrorKind.MISSING_OPERAND, message, after.end, formula=self.formula)
        self._fail(ParseErrorKind.UNEXPECTED_TOKEN, f"{message}, found {token}", token)

    def _fail_unexpected(self, token: Token, message: str) -> NoReturn:
        if token.symbol is not None and token.symbol.is_close:
            self._fail(ParseErrorKind.UNBALANCED_BRACKET, f"unmatched {token}", token)
        self._fail(ParseErrorKind.UNEXPECTED_TOKEN, message, token)

    def _fail(self, kind: ParseErrorKind, message: str, token: Token) -> NoReturn:
        raise ParseError(kind, message, token.start, token.end, formula=self.formula)


def parse(source: Union[str, Iterable[Token]], settings: Optional[Settings] = None) -> Optional[Expression]:
    """
    parse a formula (text or an already-tokenized stream) into an expression tree.

    returns None when there are no tokens. raises LexicalError or ParseError
    for malformed input.
    """
    settings = settings or get_settings()
    if isinstance(source, str):
        formula: Optional[str] = source
        tokens: Iterable[Token] = tokenize(source)
    else:
        formula = None
        tokens = source

    try:
        return FormulaParser(tokens, formula).parse()
    except FormulaError as e:
        if settings.show_markers and e.formula is not None:
            logger.debug(f"failed to parse formula: {e.message}\n{mark(e.formula, e.start, e.end)}")
        raise


def parse_formula(text: str, settings: Optional[Settings] = None) -> Optional[Expression]:
    """parse raw cell contents, dropping surrounding whitespace and one leading '='."""
    cleaned = text.strip()
    if cleaned.startswith("="):
        cleaned = cleaned[1:]
    return parse(cleaned, settings)
