"""Abstract Syntax Tree (AST) definitions for matex.

The parser produces these nodes and the runtime walks them. Statements
sit at the top level of a program; everything else is an expression
that evaluates to a value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import List


class Precedence(IntEnum):
    NONE = 0
    ASSIGNMENT = 1
    COMPARISON = 2
    TERM = 3
    FACTOR = 4
    UNARY = 5
    EXPONENT = 6
    CALL = 7


class BinOp(Enum):
    ADD = '+'
    SUBTRACT = '-'
    MULTIPLY = '*'
    DIVIDE = '/'
    POWER = '^'
    EQUAL = '=='
    LESS = '<'
    LESS_EQUAL = '<='
    GREATER = '>'
    GREATER_EQUAL = '>='

    def precedence(self) -> Precedence:
        if self in (BinOp.ADD, BinOp.SUBTRACT):
            return Precedence.TERM
        if self in (BinOp.MULTIPLY, BinOp.DIVIDE):
            return Precedence.FACTOR
        if self is BinOp.POWER:
            return Precedence.EXPONENT
        return Precedence.COMPARISON

    @classmethod
    def from_symbol(cls, symbol: str) -> 'BinOp':
        return cls(symbol)


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Statement(Node):
    pass


@dataclass
class Expr(Node):
    pass


@dataclass
class Parameter:
    name: str
    type_name: str = ''


@dataclass
class Program(Statement):
    body: List[Statement]


@dataclass
class FunctionDefinition(Statement):
    name: str
    params: List[Parameter]
    body: Expr


@dataclass
class UnsetVariable(Statement):
    name: str


@dataclass
class ExpressionStatement(Statement):
    expr: Expr


@dataclass
class NumberLit(Expr):
    value: float


@dataclass
class BoolLit(Expr):
    value: bool


@dataclass
class Variable(Expr):
    name: str


@dataclass
class VectorLit(Expr):
    elements: List[Expr]


@dataclass
class Unary(Expr):
    operand: Expr


@dataclass
class Simplify(Expr):
    expr: Expr


@dataclass
class BinaryOp(Expr):
    left: Expr
    op: BinOp
    right: Expr


@dataclass
class Assignment(Expr):
    holder: Expr
    value: Expr


@dataclass
class If(Expr):
    condition: Expr
    body: Expr
    else_body: Expr


@dataclass
class FunctionCall(Expr):
    name: str
    args: List[Expr]
