"""test suite for the formula tokenizer."""
import pytest
import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from formulatree.domain.errors import LexicalError, LexicalErrorKind
from formulatree.domain.tokens import ErrorCode, Symbol, TokenType
from formulatree.parsing.tokenizer import FormulaTokenizer, tokenize


def scan(formula):
    return [(t.type, t.value) for t in tokenize(formula)]


def lit(text):
    return (TokenType.LITERAL, text)


def sym(symbol):
    return (TokenType.SYMBOL, symbol)


def num(text):
    return (TokenType.NUMBER, Decimal(text))


class TestBasicTypes:
    def test_empty(self):
        assert scan("") == []
        assert scan("   \t\n") == []

    @pytest.mark.parametrize("text", ["TRUE", "FALSE", "IF", "_IF", "IF2", "IF2.3", "IF_2.3", "$A$1"])
    def test_literals(self, text):
        assert scan(text) == [lit(text)]

    def test_escaped_literal(self):
        assert scan("'Sheet 1'") == [lit("Sheet 1")]

    def test_escaped_literal_doubled_quote(self):
        assert scan("'A sheet'''") == [lit("A sheet'")]

    @pytest.mark.parametrize("code", list(ErrorCode))
    def test_error_codes(self, code):
        assert scan(code.value) == [(TokenType.ERROR, code)]

    @pytest.mark.parametrize("text,expected", [
        ("1", "1"),
        ("1.1", "1.1"),
        ("1.1E1", "11"),
        ("1.1E-1", "0.11"),
        ("1E-1", "0.1"),
        ("1E10", "10000000000"),
        ("3.145e12", "3145000000000"),
    ])
    def test_numbers(self, text, expected):
        assert scan(text) == [num(expected)]

    @pytest.mark.parametrize("symbol", list(Symbol))
    def test_symbols(self, symbol):
        assert scan(symbol.value) == [sym(symbol)]

    def test_string(self):
        assert scan('"Hello world"') == [(TokenType.STRING, "Hello world")]

    def test_string_doubled_quote(self):
        assert scan('"Hello ""world"') == [(TokenType.STRING, 'Hello "world')]

    def test_string_keeps_inner_whitespace(self):
        assert scan('" a\nb "') == [(TokenType.STRING, " a\nb ")]


class TestSequences:
    def test_basic_sequence(self):
        assert scan("1+1") == [num("1"), sym(Symbol.ADD), num("1")]

    def test_error_in_sequence(self):
        assert scan("#DIV/0!+1") == [(TokenType.ERROR, ErrorCode.DIV0), sym(Symbol.ADD), num("1")]

    def test_whitespace_is_dropped(self):
        assert scan("A B") == [lit("A"), lit("B")]

    def test_whitespace_in_maths(self):
        assert scan(" 3.145e12 * 14e-6 ") == [num("3.145e12"), sym(Symbol.MULTIPLY), num("14e-6")]

    def test_sheet_and_string_join(self):
        assert scan("'A sheet'''!A1&\" a string\n\"\"Yes\"\"\n\"") == [
            lit("A sheet'"),
            sym(Symbol.BANG),
            lit("A1"),
            sym(Symbol.AMPERSAND),
            (TokenType.STRING, ' a string\n"Yes"\n'),
        ]

    def test_two_character_comparisons(self):
        assert scan("1<>2") == [num("1"), sym(Symbol.NOT_EQUAL), num("2")]
        assert scan("1<=2") == [num("1"), sym(Symbol.LESS_THAN_OR_EQUAL), num("2")]
        assert scan("1>=2") == [num("1"), sym(Symbol.GREATER_THAN_OR_EQUAL), num("2")]
        assert scan("1< =2") == [num("1"), sym(Symbol.LESS_THAN), sym(Symbol.EQUAL), num("2")]

    def test_minus_is_always_a_symbol(self):
        assert scan("-1") == [sym(Symbol.SUBTRACT), num("1")]

    def test_positions(self):
        tokens = list(tokenize("A1 + 'x y'"))
        assert [(t.start, t.end) for t in tokens] == [(0, 2), (3, 4), (5, 10)]


class TestStructuredReferences:
    def test_simple_column(self):
        assert scan("DeptSales[Sales]") == [
            lit("DeptSales"), sym(Symbol.OPEN_SQUARE), lit("Sales"), sym(Symbol.CLOSE_SQUARE),
        ]

    def test_unbracketed_column_with_space(self):
        assert scan("T[Sales Amount]") == [
            lit("T"), sym(Symbol.OPEN_SQUARE), lit("Sales Amount"), sym(Symbol.CLOSE_SQUARE),
        ]

    def test_trailing_space_is_not_part_of_column(self):
        tokens = list(tokenize("T[Sales ]"))
        assert tokens[2].value == "Sales"
        assert (tokens[2].start, tokens[2].end) == (2, 7)
        assert tokens[3].start == 8

    def test_bracketed_columns(self):
        assert scan("DeptSales[[Sales Person]:[Region]]") == [
            lit("DeptSales"),
            sym(Symbol.OPEN_SQUARE),
            lit("Sales Person"),
            sym(Symbol.COLON),
            lit("Region"),
            sym(Symbol.CLOSE_SQUARE),
        ]

    def test_special_items_and_punctuation(self):
        assert scan("T[[#All],[Sales Amount]:[% Commission]]") == [
            lit("T"),
            sym(Symbol.OPEN_SQUARE),
            lit("#All"),
            sym(Symbol.COMMA),
            lit("Sales Amount"),
            sym(Symbol.COLON),
            lit("% Commission"),
            sym(Symbol.CLOSE_SQUARE),
        ]

    def test_special_item_without_brackets(self):
        assert scan("T[#This Row]") == [
            lit("T"), sym(Symbol.OPEN_SQUARE), lit("#This Row"), sym(Symbol.CLOSE_SQUARE),
        ]

    def test_bracketed_escape_is_kept_verbatim(self):
        assert scan("T[['[x']]]") == [
            lit("T"), sym(Symbol.OPEN_SQUARE), lit("'[x']"), sym(Symbol.CLOSE_SQUARE),
        ]

    def test_unbracketed_escape_is_dropped(self):
        assert scan("T[a'#b]") == [
            lit("T"), sym(Symbol.OPEN_SQUARE), lit("a#b"), sym(Symbol.CLOSE_SQUARE),
        ]

    def test_scanning_returns_to_normal_after_close(self):
        assert scan("T[a]+'b c'") == [
            lit("T"), sym(Symbol.OPEN_SQUARE), lit("a"), sym(Symbol.CLOSE_SQUARE),
            sym(Symbol.ADD), lit("b c"),
        ]


class TestLaziness:
    def test_tokens_are_produced_on_demand(self):
        tokens = tokenize("1 ~")
        assert next(tokens).value == Decimal("1")
        with pytest.raises(LexicalError):
            next(tokens)

    def test_not_restartable(self):
        tokenizer = FormulaTokenizer("1+2")
        assert len(list(tokenizer)) == 3
        assert list(tokenizer) == []


class TestLexicalErrors:
    def _error(self, formula):
        with pytest.raises(LexicalError) as excinfo:
            list(tokenize(formula))
        return excinfo.value

    def test_unrecognized_character(self):
        error = self._error("1+~")
        assert error.kind == LexicalErrorKind.UNRECOGNIZED_CHARACTER
        assert error.start == 2
        assert error.formula == "1+~"

    def test_unknown_error_code(self):
        error = self._error("#FOO")
        assert error.kind == LexicalErrorKind.UNRECOGNIZED_CHARACTER
        assert error.start == 0

    def test_unterminated_string(self):
        error = self._error('"abc')
        assert error.kind == LexicalErrorKind.UNTERMINATED_LITERAL
        assert (error.start, error.end) == (0, 4)

    def test_unterminated_escaped_literal(self):
        assert self._error("'abc").kind == LexicalErrorKind.UNTERMINATED_LITERAL

    def test_unterminated_structured_column(self):
        assert self._error("T[[abc").kind == LexicalErrorKind.UNTERMINATED_LITERAL

    @pytest.mark.parametrize("formula", ["1E+", "1e"])
    def test_invalid_number(self, formula):
        error = self._error(formula)
        assert error.kind == LexicalErrorKind.INVALID_NUMBER
        assert error.start == 0

    def test_unrecognized_character_inside_brackets(self):
        error = self._error("T[;]")
        assert error.kind == LexicalErrorKind.UNRECOGNIZED_CHARACTER
        assert error.start == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
