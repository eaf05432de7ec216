"""caret-style markers pointing at the offending part of a formula."""
from typing import Optional

from rich.console import Console
from rich.text import Text

from ..domain.errors import FormulaError

# tabs and newlines shown as single spaces so the carets stay aligned
_FLATTEN = str.maketrans({"\t": " ", "\n": " ", "\r": " "})


def mark(formula: str, start: int, end: Optional[int] = None) -> str:
    """
    return the formula on one line and carets under ``formula[start:end]``
    on the next. at least one caret is always drawn, past the end of the
    text if needed.
    """
    if end is None or end <= start:
        end = start + 1
    return f"{formula.translate(_FLATTEN)}\n{' ' * start}{'^' * (end - start)}"


def print_error(error: FormulaError, console: Optional[Console] = None) -> None:
    """print a formula error and, when the source text is known, its marker."""
    console = console or Console(stderr=True)
    console.print(Text(f"error: {error.message}", style="bold red"))
    if error.formula is None:
        console.print(Text(f"at offset {error.start}", style="dim"))
        return
    formula_line, caret_line = mark(error.formula, error.start, error.end).split("\n")
    console.print(Text(formula_line))
    console.print(Text(caret_line, style="red"))
