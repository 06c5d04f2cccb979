import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .errors import UnboundScope
from .functions import Intrinsic, UserFunction
from .values import Value

_logger = logging.getLogger(__name__)


@dataclass
class Scope:
    """Functions and variables bound by one program or function call."""
    functions: Dict[str, UserFunction] = field(default_factory=dict)
    variables: Dict[str, Value] = field(default_factory=dict)


class Environment:
    """A stack of scopes plus constants and intrinsics that are never popped.

    Variables are looked up in the innermost scope only, then in the
    constants. Functions are looked up through every scope, innermost
    first, so a function defined by an outer caller stays callable.
    """
    def __init__(self):
        self.scopes: List[Scope] = [Scope()]
        self.constants: Dict[str, Value] = {}
        self.intrinsics: Dict[str, Intrinsic] = {}

    @property
    def current_scope(self) -> Scope:
        if not self.scopes:
            raise UnboundScope('scope stack is empty')
        return self.scopes[-1]

    def push_scope(self, scope: Optional[Scope] = None) -> Scope:
        scope = scope if scope is not None else Scope()
        self.scopes.append(scope)
        _logger.debug('push scope (depth %d)', len(self.scopes))
        return scope

    def pop_scope(self) -> Scope:
        if not self.scopes:
            raise UnboundScope('cannot pop from an empty scope stack')
        _logger.debug('pop scope (depth %d)', len(self.scopes))
        return self.scopes.pop()

    @contextmanager
    def scope(self, scope: Optional[Scope] = None) -> Iterator[Scope]:
        pushed = self.push_scope(scope)
        try:
            yield pushed
        finally:
            self.pop_scope()

    def get_variable(self, name: str) -> Optional[Value]:
        variables = self.current_scope.variables
        if name in variables:
            return variables[name]
        return self.constants.get(name)

    def set_variable(self, name: str, value: Value):
        self.current_scope.variables[name] = value

    def remove_variable(self, name: str):
        if self.current_scope.variables.pop(name, None) is None:
            _logger.debug('unset of unbound variable %s ignored', name)

    def get_function(self, name: str) -> Optional[UserFunction]:
        for scope in reversed(self.scopes):
            if name in scope.functions:
                return scope.functions[name]
        return None

    def set_function(self, function: UserFunction):
        self.current_scope.functions[function.name] = function

    def get_intrinsic(self, name: str) -> Optional[Intrinsic]:
        return self.intrinsics.get(name)

    def add_intrinsic(self, intrinsic: Intrinsic):
        self.intrinsics[intrinsic.name] = intrinsic

    def add_constant(self, name: str, value: Value):
        self.constants[name] = value
