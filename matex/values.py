"""Runtime value model for matex.

Every expression evaluates to one of the `Value` variants defined here.
Values are immutable: the arithmetic combinators below never modify
their operands, they build new values. Containers (`Sum`, `Product`)
are built lazily and only become canonical once passed through
`matex.simplify.simplify`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from .ast import BinOp
from .errors import TypeMismatch, UnsupportedComparison, UnsupportedOperation

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Value:
    """Base class of all runtime values.

    `simplified` memoizes canonicalization and takes no part in equality.
    """
    simplified: bool = field(default=False, compare=False, kw_only=True, repr=False)


@dataclass(frozen=True)
class Unit(Value):
    pass


@dataclass(frozen=True)
class Undefined(Value):
    pass


@dataclass(frozen=True)
class Number(Value):
    value: float


@dataclass(frozen=True)
class Symbol(Value):
    name: str


@dataclass(frozen=True)
class Bool(Value):
    value: bool


@dataclass(frozen=True)
class Vector(Value):
    items: Tuple[Value, ...] = ()


@dataclass(frozen=True)
class Sum(Value):
    terms: Tuple[Value, ...] = ()


@dataclass(frozen=True)
class Product(Value):
    factors: Tuple[Value, ...] = ()


@dataclass(frozen=True)
class Exponent(Value):
    base: Value
    exponent: Value


@dataclass(frozen=True)
class Function(Value):
    """A call that could not be resolved, kept symbolically."""
    name: str
    args: Tuple[Value, ...] = ()


def type_name(value: Value) -> str:
    return type(value).__name__


def children(value: Value) -> Tuple[Value, ...]:
    if isinstance(value, Sum):
        return value.terms
    if isinstance(value, Product):
        return value.factors
    if isinstance(value, Exponent):
        return (value.base, value.exponent)
    if isinstance(value, Vector):
        return value.items
    if isinstance(value, Function):
        return value.args
    return ()


def nesting_depth(value: Value) -> int:
    """Height of the value tree, counting an atom as 1."""
    deepest = 0
    pending = [(value, 1)]
    while pending:
        value, depth = pending.pop()
        deepest = max(deepest, depth)
        pending.extend((child, depth + 1) for child in children(value))
    return deepest


def _check_operands(operation: str, lhs: Value, rhs: Value) -> Optional[Value]:
    """Return `Undefined` for poisoned operands, raise for meaningless ones."""
    if isinstance(lhs, (Unit, Undefined)) or isinstance(rhs, (Unit, Undefined)):
        return Undefined()
    if isinstance(lhs, Bool) or isinstance(rhs, Bool):
        raise TypeMismatch(f'cannot {operation} {type_name(lhs)} and {type_name(rhs)}')
    if isinstance(lhs, Vector) or isinstance(rhs, Vector):
        raise UnsupportedOperation(f'cannot {operation} {type_name(lhs)} and {type_name(rhs)}')
    return None


def add(lhs: Value, rhs: Value) -> Value:
    poisoned = _check_operands('add', lhs, rhs)
    if poisoned is not None:
        return poisoned
    _logger.debug('add %r %r', lhs, rhs)
    if isinstance(lhs, Number) and isinstance(rhs, Number):
        return Number(lhs.value + rhs.value)
    if isinstance(lhs, Sum) and isinstance(rhs, Sum):
        return Sum(lhs.terms + rhs.terms)
    if isinstance(lhs, Sum):
        return Sum(lhs.terms + (rhs,))
    if isinstance(rhs, Sum):
        return Sum((lhs,) + rhs.terms)
    return Sum((lhs, rhs))


def multiply(lhs: Value, rhs: Value) -> Value:
    poisoned = _check_operands('multiply', lhs, rhs)
    if poisoned is not None:
        return poisoned
    _logger.debug('multiply %r %r', lhs, rhs)
    if isinstance(lhs, Number) and isinstance(rhs, Number):
        return Number(lhs.value * rhs.value)
    if isinstance(lhs, Product) and isinstance(rhs, Product):
        return Product(lhs.factors + rhs.factors)
    if isinstance(lhs, Product):
        return Product(lhs.factors + (rhs,))
    if isinstance(rhs, Product):
        return Product((lhs,) + rhs.factors)
    return Product((lhs, rhs))


def power(base: Value, exponent: Value) -> Value:
    poisoned = _check_operands('raise', base, exponent)
    if poisoned is not None:
        return poisoned
    _logger.debug('power %r %r', base, exponent)
    # (a^b)^c = a^(b*c)
    if isinstance(base, Exponent):
        return Exponent(base.base, multiply(base.exponent, exponent))
    return Exponent(base, exponent)


def negate(value: Value) -> Value:
    return multiply(value, Number(-1.0))


def subtract(lhs: Value, rhs: Value) -> Value:
    return add(lhs, multiply(rhs, Number(-1.0)))


def divide(lhs: Value, rhs: Value) -> Value:
    return multiply(lhs, power(rhs, Number(-1.0)))


def _compare(symbol: str, test: Callable[[float, float], bool]) -> Callable[[Value, Value], Value]:
    def compare(lhs: Value, rhs: Value) -> Value:
        if isinstance(lhs, Number) and isinstance(rhs, Number):
            return Bool(test(lhs.value, rhs.value))
        raise UnsupportedComparison(f'{type_name(lhs)} {symbol} {type_name(rhs)} is not supported')
    compare.__name__ = symbol
    return compare


equal = _compare('==', lambda a, b: a == b)
less = _compare('<', lambda a, b: a < b)
less_equal = _compare('<=', lambda a, b: a <= b)
greater = _compare('>', lambda a, b: a > b)
greater_equal = _compare('>=', lambda a, b: a >= b)


BINARY_OPERATIONS: Dict[BinOp, Callable[[Value, Value], Value]] = {
    BinOp.ADD: add,
    BinOp.SUBTRACT: subtract,
    BinOp.MULTIPLY: multiply,
    BinOp.DIVIDE: divide,
    BinOp.POWER: power,
    BinOp.EQUAL: equal,
    BinOp.LESS: less,
    BinOp.LESS_EQUAL: less_equal,
    BinOp.GREATER: greater,
    BinOp.GREATER_EQUAL: greater_equal,
}
