"""Canonicalization of runtime values.

`simplify` rewrites a value bottom-up into its canonical form:

* nested sums and products are spliced into their parent,
* like terms are merged by adding their numeric coefficients,
* numeric terms of a sum are folded into a single trailing constant,
* numeric factors of a product are folded into a single leading coefficient,
* like factors are merged by adding their exponents,
* single-child containers collapse to the child.

The `simplified` flag on a value memoizes the work: an already
canonical value is only flattened.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from typing import List, Sequence, Tuple, Type

from .values import (
    Value, Number, Symbol, Vector, Sum, Product, Exponent, Function, multiply,
)

_logger = logging.getLogger(__name__)


def simplify(value: Value, force: bool = False) -> Value:
    """Return the canonical form of `value`.

    With `force`, the memo flag of `value` itself is ignored; children
    keep theirs.
    """
    if value.simplified and not force:
        return flatten(value)
    if isinstance(value, Sum):
        result = _simplify_sum(value)
    elif isinstance(value, Product):
        result = _simplify_product(value)
    elif isinstance(value, Exponent):
        result = _simplify_exponent(value)
    elif isinstance(value, Vector):
        result = Vector(tuple(simplify(item) for item in value.items))
    elif isinstance(value, Function):
        result = Function(value.name, tuple(simplify(arg) for arg in value.args))
    else:
        result = value
    result = flatten(result)
    if not result.simplified:
        result = dataclasses.replace(result, simplified=True)
    _logger.debug('simplify %r -> %r', value, result)
    return result


def flatten(value: Value) -> Value:
    """Collapse empty and single-child sums and products."""
    if isinstance(value, Sum):
        if not value.terms:
            return Number(0.0, simplified=True)
        if len(value.terms) == 1:
            return flatten(value.terms[0])
    if isinstance(value, Product):
        if not value.factors:
            return Number(1.0, simplified=True)
        if len(value.factors) == 1:
            return flatten(value.factors[0])
    return value


def _members(value: Value) -> Tuple[Value, ...]:
    if isinstance(value, Sum):
        return value.terms
    if isinstance(value, Product):
        return value.factors
    return (value,)


def _spliced(children: Sequence[Value], kind: Type[Value]) -> List[Value]:
    result: List[Value] = []
    for child in children:
        if isinstance(child, kind):
            result.extend(_members(child))
        else:
            result.append(child)
    return result


def _simplify_sum(value: Sum) -> Value:
    terms = _spliced([simplify(term) for term in value.terms], Sum)
    terms = _spliced(combine_like_terms(terms), Sum)
    terms = combine_integers(terms)
    if not terms:
        return Number(0.0)
    if len(terms) == 1:
        return terms[0]
    return Sum(tuple(terms))


def _simplify_product(value: Product) -> Value:
    factors = _spliced([simplify(factor) for factor in value.factors], Product)
    coefficient, factors = extract_coefficient(factors)
    if coefficient == 0:
        return Number(0.0)
    factors = _spliced(combine_like_factors(factors), Product)
    # merged exponents of zero leave a 1 behind
    extra, factors = extract_coefficient(factors)
    coefficient *= extra
    if coefficient == 0:
        return Number(0.0)
    if not factors:
        return Number(coefficient)
    if coefficient != 1:
        factors.insert(0, Number(coefficient))
    if len(factors) == 1:
        return factors[0]
    return Product(tuple(factors))


def _simplify_exponent(value: Exponent) -> Value:
    base = simplify(value.base)
    exponent = simplify(value.exponent)
    if isinstance(base, Exponent):
        exponent = simplify(multiply(base.exponent, exponent))
        base = base.base
    if isinstance(exponent, Number):
        if isinstance(base, Number):
            return Number(safe_pow(base.value, exponent.value))
        if exponent.value == 0:
            return Number(1.0)
        if exponent.value == 1:
            return base
    return Exponent(base, exponent)


def safe_pow(base: float, exponent: float) -> float:
    """`base ** exponent` with IEEE results instead of exceptions."""
    try:
        return math.pow(base, exponent)
    except ZeroDivisionError:
        return math.inf
    except ValueError:
        if base == 0 and exponent < 0:
            return math.inf
        return math.nan
    except OverflowError:
        if base < 0 and exponent.is_integer() and exponent % 2 == 1:
            return -math.inf
        return math.inf


def extract_coefficient(factors: Sequence[Value]) -> Tuple[float, List[Value]]:
    """Split `factors` into the product of its numbers and the rest."""
    coefficient = 1.0
    rest: List[Value] = []
    for factor in factors:
        if isinstance(factor, Number):
            coefficient *= factor.value
        else:
            rest.append(factor)
    return coefficient, rest


def _split_term(term: Value) -> Tuple[float, Value]:
    if isinstance(term, Product):
        coefficient, rest = extract_coefficient(term.factors)
        if not rest:
            return coefficient, Number(1.0)
        if len(rest) == 1:
            return coefficient, rest[0]
        return coefficient, Product(tuple(rest), simplified=True)
    return 1.0, term


def combine_like_terms(terms: Sequence[Value]) -> List[Value]:
    """Merge terms equal up to their numeric coefficient.

    Pure numbers are passed through untouched, after the symbolic terms,
    for `combine_integers` to fold.
    """
    numbers: List[Value] = []
    pairs: List[Tuple[float, Value]] = []
    for term in terms:
        if isinstance(term, Number):
            numbers.append(term)
        else:
            pairs.append(_split_term(term))

    combined: List[Value] = []
    while pairs:
        coefficient, remainder = pairs.pop(0)
        unmatched = []
        for other_coefficient, other in pairs:
            if struct_equal(remainder, other):
                coefficient += other_coefficient
            else:
                unmatched.append((other_coefficient, other))
        pairs = unmatched
        if coefficient == 0:
            continue
        if coefficient == 1:
            combined.append(remainder)
        else:
            combined.append(simplify(multiply(Number(coefficient), remainder)))
    return combined + numbers


def combine_integers(terms: Sequence[Value]) -> List[Value]:
    """Fold every numeric term into one constant placed last."""
    constant = 0.0
    found = False
    rest: List[Value] = []
    for term in terms:
        if isinstance(term, Number):
            constant += term.value
            found = True
        else:
            rest.append(term)
    if found and (constant != 0 or not rest):
        rest.append(Number(constant, simplified=True))
    return rest


def combine_like_factors(factors: Sequence[Value]) -> List[Value]:
    """Merge factors sharing a base by adding their exponents."""
    pairs: List[Tuple[Value, Value]] = []
    for factor in factors:
        if isinstance(factor, Exponent):
            pairs.append((factor.base, factor.exponent))
        else:
            pairs.append((factor, Number(1.0)))

    combined: List[Value] = []
    while pairs:
        base, exponent = pairs.pop(0)
        exponents = [exponent]
        unmatched = []
        for other_base, other_exponent in pairs:
            if struct_equal(base, other_base):
                exponents.append(other_exponent)
            else:
                unmatched.append((other_base, other_exponent))
        pairs = unmatched
        if len(exponents) > 1:
            exponent = simplify(Sum(tuple(exponents)))
        combined.append(simplify(Exponent(base, exponent)))
    return combined


def struct_equal(lhs: Value, rhs: Value) -> bool:
    """Structural equality deciding whether two terms or factors are alike.

    Sums and products compare as multisets of their children. Anything
    other than sums, products, exponents, numbers and symbols is never
    alike.
    """
    if isinstance(lhs, Sum) and isinstance(rhs, Sum):
        return _multiset_equal(lhs.terms, rhs.terms)
    if isinstance(lhs, Product) and isinstance(rhs, Product):
        return _multiset_equal(lhs.factors, rhs.factors)
    if isinstance(lhs, Exponent) and isinstance(rhs, Exponent):
        return struct_equal(lhs.base, rhs.base) and struct_equal(lhs.exponent, rhs.exponent)
    if isinstance(lhs, Number) and isinstance(rhs, Number):
        return lhs.value == rhs.value
    if isinstance(lhs, Symbol) and isinstance(rhs, Symbol):
        return lhs.name == rhs.name
    return False


def _multiset_equal(lhs: Sequence[Value], rhs: Sequence[Value]) -> bool:
    if len(lhs) != len(rhs):
        return False
    remaining = list(rhs)
    for item in lhs:
        for index, candidate in enumerate(remaining):
            if struct_equal(item, candidate):
                del remaining[index]
                break
        else:
            return False
    return True


def is_negative(value: Value) -> bool:
    """True for negative numbers and products with a negative coefficient."""
    if isinstance(value, Number):
        return value.value < 0
    if isinstance(value, Product):
        negatives = sum(1 for f in value.factors if isinstance(f, Number) and f.value < 0)
        return negatives % 2 == 1
    return False


def rearrange(value: Value) -> Value:
    """Order the terms of sums for display: negative terms go last.

    The sort is stable and is applied recursively. It never changes the
    meaning of the value.
    """
    if isinstance(value, Sum):
        terms = [rearrange(term) for term in value.terms]
        terms.sort(key=is_negative)
        return Sum(tuple(terms), simplified=value.simplified)
    if isinstance(value, Product):
        return Product(tuple(rearrange(f) for f in value.factors), simplified=value.simplified)
    if isinstance(value, Exponent):
        return Exponent(rearrange(value.base), rearrange(value.exponent), simplified=value.simplified)
    if isinstance(value, Function):
        return Function(value.name, tuple(rearrange(a) for a in value.args), simplified=value.simplified)
    if isinstance(value, Vector):
        return Vector(tuple(rearrange(i) for i in value.items), simplified=value.simplified)
    return value
