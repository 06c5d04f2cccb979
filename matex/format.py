"""Text rendering of runtime values.

`NormalFormatter` renders values the way a user would type them back
in. `DebugFormatter` dumps the value tree in prefix form, marking
containers that have not been simplified with braces instead of
parentheses.
"""

from __future__ import annotations

import math
from typing import List, Tuple

from .ast import Precedence
from .values import (
    Value, Unit, Undefined, Number, Symbol, Bool, Vector, Sum, Product, Exponent, Function,
)


def format_number(n: float) -> str:
    if math.isnan(n):
        return 'NaN'
    if math.isinf(n):
        return 'inf' if n > 0 else '-inf'
    if n.is_integer() and abs(n) < 1e16:
        return str(int(n))
    return repr(n)


class NormalFormatter:
    @classmethod
    def format(cls, value: Value) -> str:
        return cls._format(value, Precedence.NONE)

    @classmethod
    def _format(cls, value: Value, prec: Precedence) -> str:
        if isinstance(value, Unit):
            return 'unit'
        if isinstance(value, Undefined):
            return 'undefined'
        if isinstance(value, Number):
            text = format_number(value.value)
            if text.startswith('-') and prec >= Precedence.EXPONENT:
                return f'({text})'
            return text
        if isinstance(value, Symbol):
            return value.name
        if isinstance(value, Bool):
            return 'true' if value.value else 'false'
        if isinstance(value, Vector):
            return '[' + ', '.join(cls.format(item) for item in value.items) + ']'
        if isinstance(value, Function):
            return f"{value.name}({', '.join(cls.format(arg) for arg in value.args)})"
        if isinstance(value, Sum):
            text = cls._format_sum(value)
            return f'({text})' if prec > Precedence.TERM else text
        if isinstance(value, Product):
            negative, text = cls._format_product(value)
            if negative:
                text = '-' + text
            return f'({text})' if prec > Precedence.FACTOR else text
        if isinstance(value, Exponent):
            base = cls._format(value.base, Precedence.EXPONENT)
            # unary binds looser than ^, so x^-1 reads back unchanged
            exponent = cls._format(value.exponent, Precedence.UNARY)
            return f'{base}^{exponent}'
        return repr(value)

    @classmethod
    def _format_sum(cls, value: Sum) -> str:
        parts: List[str] = []
        for i, term in enumerate(value.terms):
            negative, text = cls._signed_term(term)
            if i == 0:
                parts.append('-' + text if negative else text)
            else:
                parts.append((' - ' if negative else ' + ') + text)
        return ''.join(parts)

    @classmethod
    def _signed_term(cls, term: Value) -> Tuple[bool, str]:
        if isinstance(term, Number) and term.value < 0:
            return True, format_number(-term.value)
        if isinstance(term, Product):
            return cls._format_product(term)
        return False, cls._format(term, Precedence.TERM)

    @classmethod
    def _format_product(cls, value: Product) -> Tuple[bool, str]:
        negative = False
        parts: List[str] = []
        for factor in value.factors:
            if isinstance(factor, Number) and factor.value < 0:
                negative = not negative
                if factor.value == -1:
                    continue
                parts.append(format_number(-factor.value))
                continue
            parts.append(cls._format(factor, Precedence.FACTOR))
        if not parts:
            parts.append('1')
        return negative, ' * '.join(parts)


class DebugFormatter:
    @classmethod
    def format(cls, value: Value) -> str:
        if isinstance(value, Unit):
            return 'Unit'
        if isinstance(value, Undefined):
            return 'Undefined'
        if isinstance(value, Number):
            return format_number(value.value)
        if isinstance(value, Symbol):
            return f"'{value.name}'"
        if isinstance(value, Bool):
            return 'true' if value.value else 'false'
        if isinstance(value, Vector):
            return cls._wrap(value, '[]', [cls.format(i) for i in value.items])
        if isinstance(value, Function):
            return cls._wrap(value, value.name, [cls.format(a) for a in value.args])
        if isinstance(value, Sum):
            return cls._wrap(value, '+', [cls.format(t) for t in value.terms])
        if isinstance(value, Product):
            return cls._wrap(value, '*', [cls.format(f) for f in value.factors])
        if isinstance(value, Exponent):
            return cls._wrap(value, '^', [cls.format(value.base), cls.format(value.exponent)])
        return repr(value)

    @staticmethod
    def _wrap(value: Value, tag: str, parts: List[str]) -> str:
        inner = ', '.join([tag] + parts)
        return f'({inner})' if value.simplified else f'{{{inner}}}'
