"""tokenizing and parsing of formula text."""
from .lookahead import LookaheadBuffer
from .tokenizer import FormulaTokenizer, ScanMode, tokenize
from .parser import FormulaParser, parse, parse_formula

__all__ = [
    "LookaheadBuffer",
    "FormulaTokenizer",
    "ScanMode",
    "tokenize",
    "FormulaParser",
    "parse",
    "parse_formula",
]
