import pytest

from matex.ast import BinOp
from matex.errors import TypeMismatch, UnsupportedComparison, UnsupportedOperation
from matex.values import (
    Unit, Undefined, Number, Symbol, Bool, Vector, Sum, Product, Exponent, Function,
    add, multiply, power, subtract, divide, negate, less, less_equal, greater, greater_equal,
    equal, BINARY_OPERATIONS,
)

x = Symbol('x')
y = Symbol('y')
z = Symbol('z')


def test_numbers_combine_directly():
    assert add(Number(2), Number(3)) == Number(5)
    assert multiply(Number(2), Number(3)) == Number(6)


def test_add_appends_to_existing_sum():
    terms = Sum((x, y))
    assert add(terms, z) == Sum((x, y, z))
    assert add(z, terms) == Sum((z, x, y))
    assert add(terms, Sum((z,))) == Sum((x, y, z))
    # operands are never modified
    assert terms == Sum((x, y))


def test_add_builds_two_term_sum():
    assert add(x, Number(1)) == Sum((x, Number(1)))
    assert add(Product((Number(2), x)), Exponent(y, Number(2))) == Sum((Product((Number(2), x)), Exponent(y, Number(2))))


def test_multiply_appends_to_existing_product():
    assert multiply(Product((x, y)), z) == Product((x, y, z))
    assert multiply(Number(2), Product((x, y))) == Product((Number(2), x, y))
    assert multiply(x, Sum((y, z))) == Product((x, Sum((y, z))))


@pytest.mark.parametrize('operation', [add, multiply, power])
@pytest.mark.parametrize('poison', [Unit(), Undefined()])
def test_poison_propagates(operation, poison):
    assert operation(poison, x) == Undefined()
    assert operation(Number(1), poison) == Undefined()


@pytest.mark.parametrize('operation', [add, multiply, power])
def test_bool_arithmetic_is_a_type_mismatch(operation):
    with pytest.raises(TypeMismatch):
        operation(Bool(True), Number(1))
    with pytest.raises(TypeMismatch):
        operation(Bool(True), Bool(False))


def test_vector_arithmetic_is_unsupported():
    with pytest.raises(UnsupportedOperation):
        add(Vector((Number(1),)), Number(1))


def test_power_is_deferred():
    assert power(Number(2), Number(3)) == Exponent(Number(2), Number(3))
    assert power(x, y) == Exponent(x, y)


def test_power_of_exponent_multiplies_exponents():
    assert power(Exponent(x, Number(2)), Number(3)) == Exponent(x, Number(6))
    assert power(Exponent(x, y), Number(3)) == Exponent(x, Product((y, Number(3))))


def test_subtract_and_divide_are_sums_and_products():
    assert subtract(x, y) == Sum((x, Product((y, Number(-1)))))
    assert divide(x, y) == Product((x, Exponent(y, Number(-1))))
    assert negate(x) == Product((x, Number(-1)))


def test_comparisons():
    assert less(Number(1), Number(2)) == Bool(True)
    assert less_equal(Number(2), Number(2)) == Bool(True)
    assert greater(Number(1), Number(2)) == Bool(False)
    assert greater_equal(Number(1), Number(2)) == Bool(False)
    assert equal(Number(3), Number(3)) == Bool(True)


@pytest.mark.parametrize('operation', [less, less_equal, greater, greater_equal, equal])
def test_comparison_needs_numbers(operation):
    with pytest.raises(UnsupportedComparison):
        operation(x, Number(1))
    with pytest.raises(UnsupportedComparison):
        operation(Bool(True), Bool(True))


def test_simplified_flag_is_not_part_of_equality():
    assert Number(1, simplified=True) == Number(1)
    assert Sum((x, y), simplified=True) == Sum((x, y))
    assert Function('f', (x,)) != Function('g', (x,))


def test_every_operator_has_an_operation():
    assert set(BINARY_OPERATIONS) == set(BinOp)
