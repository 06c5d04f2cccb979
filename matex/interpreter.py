"""Tree-walking evaluator for matex.

`Runtime` walks the AST produced by `matex.parser`, keeps program
state in an `Environment` and returns canonical values: every
expression result is passed through `simplify` before it is handed back
to its caller. A single `Runtime` may run many programs in turn; state
accumulates between them, which is what the REPL relies on.
"""

from __future__ import annotations

import logging
import pathlib
import sys
from contextlib import contextmanager
from typing import Iterator, List, Optional, Union

from .ast import (
    Statement, Expr, Program, FunctionDefinition, UnsetVariable, ExpressionStatement,
    NumberLit, BoolLit, Variable, VectorLit, Unary, Simplify, BinaryOp, Assignment, If,
    FunctionCall,
)
from .environment import Environment, Scope
from .errors import (
    InvalidAssignmentTarget, RecursionLimitExceeded, TypeMismatch, UnsupportedOperation,
)
from .functions import UserFunction
from .parser import parse_program
from .simplify import simplify
from .std import populate_math_environment
from .values import (
    Value, Unit, Number, Symbol, Bool, Vector, Sum, Product, Exponent, Function,
    BINARY_OPERATIONS, negate, nesting_depth, type_name,
)

_logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 1000

# Python frames one level of `Runtime.evaluate` can take, at most.
_FRAMES_PER_LEVEL = 6


def reserve_stack(max_depth: int):
    """Raise the interpreter's recursion limit to fit `max_depth` nested evaluations."""
    needed = max_depth * _FRAMES_PER_LEVEL + 1000
    if sys.getrecursionlimit() < needed:
        _logger.debug('recursion limit raised to %d', needed)
        sys.setrecursionlimit(needed)


class Runtime:
    """Evaluates statements and expressions against one environment.

    Two flags steer how variables are read:

    * `assign` is set while the target of an assignment is evaluated, so
      that the name itself is captured instead of its current value.
    * `in_func_call` is set while a user function body runs and turns
      off reactive substitution of bound variables.
    """
    def __init__(self, standard_environment: bool = True, max_depth: int = DEFAULT_MAX_DEPTH):
        self.environment = Environment()
        self.assign = False
        self.in_func_call = False
        self.max_depth = max_depth
        self._depth = 0
        reserve_stack(max_depth)
        if standard_environment:
            populate_math_environment(self.environment)

    @contextmanager
    def _flags(self, assign: Optional[bool] = None, in_func_call: Optional[bool] = None) -> Iterator[None]:
        prev_assign, prev_in_func_call = self.assign, self.in_func_call
        if assign is not None:
            self.assign = assign
        if in_func_call is not None:
            self.in_func_call = in_func_call
        try:
            yield
        finally:
            self.assign, self.in_func_call = prev_assign, prev_in_func_call

    def run(self, program: Program) -> Value:
        try:
            return self.execute(program)
        except RecursionError:
            raise RecursionLimitExceeded('maximum recursion depth exceeded') from None

    def execute(self, node: Statement) -> Value:
        if isinstance(node, Program):
            result: Value = Unit()
            for statement in node.body:
                result = self.execute(statement)
            return result
        if isinstance(node, FunctionDefinition):
            _logger.info('define %s/%d', node.name, len(node.params))
            self.environment.set_function(UserFunction(node.name, list(node.params), node.body))
            return Unit()
        if isinstance(node, UnsetVariable):
            _logger.info('unset %s', node.name)
            self.environment.remove_variable(node.name)
            return Unit()
        if isinstance(node, ExpressionStatement):
            value = self.evaluate(node.expr)
            _logger.info('statement result %r', value)
            return value
        raise UnsupportedOperation(f'unknown statement {type(node).__name__}')

    def evaluate(self, node: Expr) -> Value:
        self._depth += 1
        try:
            if self._depth > self.max_depth:
                raise RecursionLimitExceeded(f'evaluation nested deeper than {self.max_depth} levels')
            value = self._evaluate(node)
        finally:
            self._depth -= 1
        return simplify(value)

    def _evaluate(self, node: Expr) -> Value:
        if isinstance(node, NumberLit):
            return Number(float(node.value))
        if isinstance(node, BoolLit):
            return Bool(node.value)
        if isinstance(node, Variable):
            return self.read_variable(node.name)
        if isinstance(node, VectorLit):
            return Vector(tuple(self.evaluate(e) for e in node.elements))
        if isinstance(node, Unary):
            return negate(self.evaluate(node.operand))
        if isinstance(node, Simplify):
            return simplify(self.evaluate(node.expr), force=True)
        if isinstance(node, BinaryOp):
            return self._evaluate_chain(node)
        if isinstance(node, Assignment):
            return self.assign_variable(node)
        if isinstance(node, If):
            condition = self.evaluate(node.condition)
            if not isinstance(condition, Bool):
                _logger.error('if condition must be Bool, got %s', type_name(condition))
                return Unit()
            return self.evaluate(node.body if condition.value else node.else_body)
        if isinstance(node, FunctionCall):
            return self.call_function(node.name, node.args)
        raise UnsupportedOperation(f'unknown expression {type(node).__name__}')

    def _evaluate_chain(self, node: BinaryOp) -> Value:
        """Evaluate a left-nested run of binary operations such as `a + b - c + d`.

        The run is unwound into a loop, so its length does not count
        against `max_depth`; only right operands nest.
        """
        chain: List[BinaryOp] = []
        while isinstance(node, BinaryOp):
            chain.append(node)
            node = node.left
        value = self.evaluate(node)
        for link in reversed(chain):
            right = self.evaluate(link.right)
            operation = BINARY_OPERATIONS.get(link.op)
            if operation is None:
                raise UnsupportedOperation(f'unknown operator {link.op}')
            value = simplify(operation(value, right))
        return value

    def read_variable(self, name: str) -> Value:
        if self.assign:
            return Symbol(name)
        value = self.environment.get_variable(name)
        if value is None:
            return Symbol(name)
        if not self.in_func_call:
            value = self.get_reactive_value(value)
            if nesting_depth(value) > self.max_depth:
                raise RecursionLimitExceeded(f'value of {name} nested deeper than {self.max_depth} levels')
        return value

    def assign_variable(self, node: Assignment) -> Value:
        if not isinstance(node.holder, Variable):
            raise InvalidAssignmentTarget(f'cannot assign to {type(node.holder).__name__}')
        with self._flags(assign=True):
            target = self.evaluate(node.holder)
        value = self.evaluate(node.value)
        _logger.info('assign %s = %r', target.name, value)
        self.environment.set_variable(target.name, value)
        return value

    def call_function(self, name: str, args: List[Expr]) -> Value:
        intrinsic = self.environment.get_intrinsic(name)
        if intrinsic is not None:
            return intrinsic(self._evaluate_args(args))

        function = self.environment.get_function(name)
        if function is None:
            return Function(name, tuple(self._evaluate_args(args)))

        if len(args) != function.arity:
            raise TypeMismatch(f'{name} expects {function.arity} argument(s), got {len(args)}')
        values = self._evaluate_args(args)
        scope = Scope(variables={p.name: v for p, v in zip(function.params, values)})
        _logger.debug('call %s with %r', name, scope.variables)
        with self.environment.scope(scope), self._flags(assign=False, in_func_call=True):
            return self.evaluate(function.body)

    def _evaluate_args(self, args: List[Expr]) -> List[Value]:
        with self._flags(assign=False):
            return [self.evaluate(arg) for arg in args]

    def get_reactive_value(self, value: Value) -> Value:
        """Replace bound symbols in `value` by their current bindings.

        Only one level is substituted: a replacement is not searched for
        further symbols. A symbol bound to itself is left alone.
        """
        if isinstance(value, Symbol):
            bound = self.environment.get_variable(value.name)
            if bound is None or bound == value:
                return value
            return bound
        if isinstance(value, Sum):
            return Sum(tuple(self.get_reactive_value(t) for t in value.terms))
        if isinstance(value, Product):
            return Product(tuple(self.get_reactive_value(f) for f in value.factors))
        if isinstance(value, Exponent):
            return Exponent(self.get_reactive_value(value.base), self.get_reactive_value(value.exponent))
        if isinstance(value, Vector):
            return Vector(tuple(self.get_reactive_value(i) for i in value.items))
        if isinstance(value, Function):
            args = [self.get_reactive_value(a) for a in value.args]
            intrinsic = self.environment.get_intrinsic(value.name)
            if intrinsic is not None:
                return intrinsic([simplify(a) for a in args])
            return Function(value.name, tuple(args))
        return value


def run_program(source: str, runtime: Optional[Runtime] = None) -> Value:
    """Parse and run `source`, returning the value of its last statement."""
    runtime = runtime if runtime is not None else Runtime()
    return runtime.run(parse_program(source))


def run_file(path: Union[str, pathlib.Path], runtime: Optional[Runtime] = None) -> Value:
    source = pathlib.Path(path).read_text(encoding='utf-8')
    return run_program(source, runtime)
