from dataclasses import dataclass
from typing import Callable, List, Sequence

from .ast import Expr, Parameter
from .errors import TypeMismatch
from .values import Value


@dataclass
class Intrinsic:
    """A native function available to every program."""
    name: str
    arity: int
    fn: Callable[..., Value]

    def __call__(self, args: Sequence[Value]) -> Value:
        if len(args) != self.arity:
            raise TypeMismatch(f'{self.name} expects {self.arity} argument(s), got {len(args)}')
        return self.fn(*args)

    def __repr__(self) -> str:
        return f"<intrinsic {self.name}>"


@dataclass
class UserFunction:
    name: str
    params: List[Parameter]
    body: Expr

    @property
    def arity(self) -> int:
        return len(self.params)

    def __repr__(self) -> str:
        params = ', '.join(p.name for p in self.params)
        return f"<function {self.name}({params})>"
