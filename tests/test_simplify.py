import math

import pytest

from matex.simplify import (
    simplify, flatten, combine_like_terms, combine_integers, combine_like_factors,
    extract_coefficient, struct_equal, rearrange, is_negative,
)
from matex.values import (
    Number, Symbol, Sum, Product, Exponent, Function, Vector, add, subtract, divide, power,
)

x = Symbol('x')
y = Symbol('y')
a = Symbol('a')
b = Symbol('b')


def test_x_plus_x():
    assert simplify(Sum((x, x))) == Product((Number(2), x))


def test_coefficients_are_added():
    terms = Sum((Product((Number(2), x)), Product((Number(3), x))))
    assert simplify(terms) == Product((Number(5), x))


def test_x_minus_x_is_zero():
    assert simplify(subtract(x, x)) == Number(0)


def test_integers_fold():
    assert simplify(Sum((Number(2), Number(3)))) == Number(5)


def test_constant_goes_last():
    assert simplify(Sum((Number(1), x, Number(2)))) == Sum((x, Number(3)))


def test_zero_constant_is_dropped():
    assert simplify(Sum((x, Number(2), Number(-2)))) == x


def test_x_times_x():
    assert simplify(Product((x, x))) == Exponent(x, Number(2))


def test_exponents_of_like_factors_add():
    factors = Product((Exponent(x, Number(2)), Exponent(x, Number(3))))
    assert simplify(factors) == Exponent(x, Number(5))


def test_exponent_of_exponent():
    assert simplify(Exponent(Exponent(x, Number(2)), Number(3))) == Exponent(x, Number(6))
    assert simplify(power(Exponent(x, Number(2)), Number(3))) == Exponent(x, Number(6))


def test_cancelled_factors_leave_one():
    assert simplify(divide(x, x)) == Number(1)
    assert simplify(Product((Number(3), x, Exponent(x, Number(-1))))) == Number(3)


def test_number_powers_are_folded():
    assert simplify(Exponent(Number(2), Number(10))) == Number(1024)
    assert simplify(Exponent(Number(0), Number(-1))) == Number(math.inf)
    assert math.isnan(simplify(Exponent(Number(-8), Number(1 / 3))).value)


def test_trivial_exponents():
    assert simplify(Exponent(x, Number(1))) == x
    assert simplify(Exponent(x, Number(0))) == Number(1)


def test_symbolic_coefficients_do_not_combine():
    result = simplify(Sum((Product((a, x)), Product((b, x)))))
    assert isinstance(result, Sum)
    assert len(result.terms) == 2


def test_product_coefficient_leads():
    assert simplify(Product((x, Number(2), Number(3)))) == Product((Number(6), x))
    assert simplify(Product((x, Number(0)))) == Number(0)


def test_nested_containers_are_spliced():
    nested = Sum((x, Sum((y, Number(1))), Number(2)))
    assert simplify(nested) == Sum((x, y, Number(3)))
    assert simplify(Product((x, Product((y, Number(2)))))) == Product((Number(2), x, y))


def test_children_of_vectors_and_functions_are_simplified():
    assert simplify(Vector((Sum((x, x)),))) == Vector((Product((Number(2), x)),))
    assert simplify(Function('f', (Sum((Number(1), Number(1))),))) == Function('f', (Number(2),))


def test_result_is_marked_simplified():
    result = simplify(Sum((x, y)))
    assert result.simplified


def test_memoized_value_is_only_flattened():
    # not canonical, but trusted because of the flag
    stale = Sum((x, x), simplified=True)
    assert simplify(stale) == Sum((x, x))
    assert simplify(stale, force=True) == Product((Number(2), x))


@pytest.mark.parametrize('value', [
    Sum((x, x, x)),
    Sum((Product((a, x)), Product((b, x)), Number(1))),
    subtract(Product((Number(2), x)), y),
    Product((x, Exponent(x, y), Number(4))),
    Exponent(Sum((x, Number(1))), Number(2)),
    add(Function('sin', (x,)), Number(3)),
    divide(Number(1), x),
])
def test_simplify_is_idempotent(value):
    once = simplify(value)
    assert simplify(once) == once
    assert simplify(once, force=True) == once


def test_flatten():
    assert flatten(Sum((x,))) == x
    assert flatten(Product((Sum((y,)),))) == y
    assert flatten(Sum(())) == Number(0)
    assert flatten(Product(())) == Number(1)
    assert flatten(Sum((x, y))) == Sum((x, y))


def test_combine_like_terms():
    assert combine_like_terms([x, Product((Number(2), x)), y]) == [Product((Number(3), x)), y]
    assert combine_like_terms([Number(1), x, Product((Number(-1), x))]) == [Number(1)]


def test_combine_integers():
    assert combine_integers([x, Number(1), Number(2)]) == [x, Number(3)]
    assert combine_integers([Number(0)]) == [Number(0)]
    assert combine_integers([x, Number(0)]) == [x]
    assert combine_integers([x]) == [x]


def test_extract_coefficient():
    assert extract_coefficient([Number(2), x, Number(3)]) == (6.0, [x])
    assert extract_coefficient([x]) == (1.0, [x])


def test_combine_like_factors():
    assert combine_like_factors([x, Exponent(x, y)]) == [Exponent(x, Sum((y, Number(1))))]
    assert combine_like_factors([x, Exponent(x, Number(-1))]) == [Number(1)]
    assert combine_like_factors([x, y]) == [x, y]


def test_struct_equal_ignores_order():
    assert struct_equal(Product((x, y)), Product((y, x)))
    assert struct_equal(Sum((x, Exponent(y, Number(2)))), Sum((Exponent(y, Number(2)), x)))


def test_struct_equal_matches_full_multisets():
    assert not struct_equal(Sum((x, x, y)), Sum((x, y, y)))
    assert not struct_equal(Product((x, y)), Product((x, y, y)))


def test_struct_equal_atoms():
    assert struct_equal(Number(2), Number(2))
    assert not struct_equal(Number(2), Number(3))
    assert struct_equal(x, Symbol('x'))
    assert not struct_equal(x, y)
    assert not struct_equal(Exponent(x, Number(2)), Exponent(x, Number(3)))
    assert not struct_equal(Function('f', (x,)), Function('f', (x,)))
    assert not struct_equal(x, Product((x,)))


def test_rearrange_moves_negative_terms_last():
    value = Sum((Product((Number(-2), y)), x, Number(-1), Number(3)))
    assert rearrange(value) == Sum((x, Number(3), Product((Number(-2), y)), Number(-1)))


def test_is_negative():
    assert is_negative(Number(-1))
    assert not is_negative(x)
    assert is_negative(Product((Number(-3), x)))
    assert not is_negative(Product((Number(-1), Number(-1), x)))
