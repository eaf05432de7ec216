"""expression tree produced by the parser.

every node is a frozen pydantic model; children are owned by exactly one
parent and nodes are never mutated after construction; equality is
structural.
"""
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterator, List

from pydantic import BaseModel, ConfigDict

from .tokens import ErrorCode, Symbol


class MathsStep(str, Enum):
    START = "start"
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    POWER = "power"
    PERCENT = "percent"

    @classmethod
    def from_symbol(cls, symbol: Symbol) -> "MathsStep":
        return _STEP_FOR_SYMBOL[symbol]


_STEP_FOR_SYMBOL = {
    Symbol.ADD: MathsStep.ADD,
    Symbol.SUBTRACT: MathsStep.SUBTRACT,
    Symbol.MULTIPLY: MathsStep.MULTIPLY,
    Symbol.DIVIDE: MathsStep.DIVIDE,
    Symbol.POWER: MathsStep.POWER,
}


class ComparisonOperator(str, Enum):
    EQUAL = "="
    NOT_EQUAL = "<>"
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN_OR_EQUAL = ">="

    @classmethod
    def from_symbol(cls, symbol: Symbol) -> "ComparisonOperator":
        return cls(symbol.value)


class Expression(BaseModel):
    """base class for all expression nodes."""
    model_config = ConfigDict(frozen=True)

    def children(self) -> List["Expression"]:
        return []

    def reference_children(self) -> List["Expression"]:
        """children that can hold references to other cells."""
        return self.children()

    def walk(self) -> Iterator["Expression"]:
        """yield this node and every descendant, depth-first, parents first."""
        return _depth_first(self, lambda node: node.children())

    def references(self) -> Iterator["CellRef"]:
        """
        yield every cell/name reference in the tree, in source order.

        sheet names and table columns are qualifiers rather than references,
        so the sheet of a SheetRef and everything inside a StructuredRef are
        skipped.
        """
        for node in _depth_first(self, lambda node: node.reference_children()):
            if isinstance(node, CellRef):
                yield node


def _depth_first(root: Expression, children: Callable[[Expression], List[Expression]]) -> Iterator[Expression]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(children(node)))


class Empty(Expression):
    pass


class StringValue(Expression):
    value: str


class ErrorValue(Expression):
    code: ErrorCode


class NumberValue(Expression):
    value: Decimal


class BooleanValue(Expression):
    value: bool


class CellRef(Expression):
    name: str


class Bracketed(Expression):
    inner: Expression

    def children(self) -> List[Expression]:
        return [self.inner]


class FunctionCall(Expression):
    name: str
    args: List[Expression] = []

    def children(self) -> List[Expression]:
        return list(self.args)


class Comparison(Expression):
    op: ComparisonOperator
    left: Expression
    right: Expression

    def children(self) -> List[Expression]:
        return [self.left, self.right]


class MathsOperation(BaseModel):
    """one element of a MathsChain: a step applied to its operand."""
    model_config = ConfigDict(frozen=True)

    kind: MathsStep
    operand: Expression


class MathsChain(Expression):
    operations: List[MathsOperation]

    def children(self) -> List[Expression]:
        return [op.operand for op in self.operations]


class Intersection(Expression):
    left: Expression
    right: Expression

    def children(self) -> List[Expression]:
        return [self.left, self.right]


class Union(Expression):
    elements: List[Expression]

    def children(self) -> List[Expression]:
        return list(self.elements)


class TextJoin(Expression):
    left: Expression
    right: Expression

    def children(self) -> List[Expression]:
        return [self.left, self.right]


class Range(Expression):
    left: Expression
    right: Expression

    def children(self) -> List[Expression]:
        return [self.left, self.right]


class SheetRef(Expression):
    sheet: Expression
    ref: Expression

    def children(self) -> List[Expression]:
        return [self.sheet, self.ref]

    def reference_children(self) -> List[Expression]:
        return [self.ref]


class StructuredRef(Expression):
    inner: Expression

    def children(self) -> List[Expression]:
        return [self.inner]

    def reference_children(self) -> List[Expression]:
        return []


class TableRef(Expression):
    table_name: str
    structured_ref: Expression

    def children(self) -> List[Expression]:
        return [self.structured_ref]
