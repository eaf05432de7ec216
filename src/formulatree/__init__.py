"""parse spreadsheet formulas into expression trees."""
from .domain.errors import FormulaError, LexicalError, LexicalErrorKind, ParseError, ParseErrorKind
from .domain.expressions import (
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
    Union,
)
from .domain.tokens import ErrorCode, Symbol, Token, TokenType
from .parsing import FormulaParser, FormulaTokenizer, LookaheadBuffer, parse, parse_formula, tokenize

__all__ = [
    "FormulaError",
    "LexicalError",
    "LexicalErrorKind",
    "ParseError",
    "ParseErrorKind",
    "BooleanValue",
    "Bracketed",
    "CellRef",
    "Comparison",
    "ComparisonOperator",
    "Empty",
    "ErrorValue",
    "Expression",
    "FunctionCall",
    "Intersection",
    "MathsChain",
    "MathsOperation",
    "MathsStep",
    "NumberValue",
    "Range",
    "SheetRef",
    "StringValue",
    "StructuredRef",
    "TableRef",
    "TextJoin",
    "Union",
    "ErrorCode",
    "Symbol",
    "Token",
    "TokenType",
    "FormulaParser",
    "FormulaTokenizer",
    "LookaheadBuffer",
    "parse",
    "parse_formula",
    "tokenize",
]
