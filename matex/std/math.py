"""Standard constants and intrinsics.

Each intrinsic takes a single value. Numbers are computed with the
`math` module, poisoned values stay poisoned and anything symbolic is
kept as an unresolved `Function` so it can be computed once its
arguments are known.
"""

import math
from typing import Callable

from matex.environment import Environment
from matex.errors import TypeMismatch
from matex.functions import Intrinsic
from matex.values import Value, Number, Bool, Unit, Undefined, Function


def _ln(x: float) -> float:
    if x == 0:
        return -math.inf
    return math.log(x)


def _numeric(name: str, fn: Callable[[float], float]) -> Intrinsic:
    def apply(arg: Value) -> Value:
        if isinstance(arg, (Unit, Undefined)):
            return Undefined()
        if isinstance(arg, Bool):
            raise TypeMismatch(f'{name} is not defined for Bool')
        if isinstance(arg, Number):
            try:
                return Number(float(fn(arg.value)))
            except ValueError:
                return Number(math.nan)
            except OverflowError:
                return Number(math.inf)
        return Function(name, (arg,))
    return Intrinsic(name, 1, apply)


MATH_FUNCTIONS = {
    'sin': math.sin,
    'cos': math.cos,
    'tan': math.tan,
    'sqrt': math.sqrt,
    'ln': _ln,
    'exp': math.exp,
    'abs': abs,
}


def populate_math_environment(env: Environment) -> Environment:
    env.add_constant('PI', Number(math.pi))
    env.add_constant('π', Number(math.pi))
    env.add_constant('E', Number(math.e))
    for name, fn in MATH_FUNCTIONS.items():
        env.add_intrinsic(_numeric(name, fn))
    return env
