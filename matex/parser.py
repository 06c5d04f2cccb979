"""Parser for matex source text.

Source is fed into a Lark LALR parser configured with the grammar
below. `ASTTransformer` is attached to the parser, so the dataclass AST
of `matex.ast` comes out of the parse directly.

Statements are separated by newlines or semicolons; `#` starts a
comment running to the end of the line. A statement of the form
`name(a, b) = body` defines a function; any other `=` assigns a
variable.

Lark exceptions never escape this module: they are mapped onto the
`ParseError` subclasses of `matex.errors`.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, List, Optional

from lark import Lark, Token, Transformer
from lark.exceptions import (
    UnexpectedCharacters, UnexpectedEOF, UnexpectedToken,
)

from .ast import (
    Program, Statement, FunctionDefinition, UnsetVariable, ExpressionStatement, Parameter,
    Expr, NumberLit, BoolLit, Variable, VectorLit, Unary, Simplify, BinaryOp, BinOp,
    Assignment, If, FunctionCall,
)
from .errors import (
    ParseError, WrongToken, WrongKeyword, NotIdentifier, NotComparison, EndOfStream,
    UnexpectedEndOfStream, NestingTooDeep,
)

_logger = logging.getLogger(__name__)


MATEX_GRAMMAR = r"""
    ?start: program
    program: _SEP? [statement (_SEP statement)* _SEP?]

    ?statement: "~" NAME -> unset
              | expression -> expr_stmt

    ?expression: if_expr
               | simplify_expr
               | assignment

    if_expr: "if" expression "then" expression "else" expression
    simplify_expr: "simplify" expression

    ?assignment: comparison "=" expression -> assign
               | comparison

    ?comparison: term
               | comparison COMP_OP term -> compare
    ?term: factor
         | term "+" factor -> add
         | term "-" factor -> sub
    ?factor: unary
           | factor "*" unary -> mul
           | factor "/" unary -> div
    ?unary: "-" unary -> neg
          | power
    ?power: atom "^" unary -> pow
          | atom
    ?atom: NUMBER -> number
         | "true" -> true
         | "false" -> false
         | NAME -> variable
         | NAME "(" [arguments] ")" -> call
         | "[" [arguments] "]" -> vector
         | "(" expression ")"

    arguments: argument ("," argument)*
    ?argument: expression
             | NAME ":" NAME -> typed_param

    COMP_OP: "==" | "<=" | ">=" | "<" | ">"
    NAME: /(?!\d)\w+/
    _SEP: /(?:[\r\n;]|#[^\n]*)(?:[\s;]|#[^\n]*)*/

    %import common.NUMBER
    %import common.WS_INLINE
    %ignore WS_INLINE
"""


def _walk(node: Any):
    """Yield `node` and every AST node or parameter below it."""
    pending = [node]
    while pending:
        node = pending.pop()
        yield node
        if isinstance(node, list):
            pending.extend(node)
        elif dataclasses.is_dataclass(node):
            for f in dataclasses.fields(node):
                child = getattr(node, f.name)
                if isinstance(child, (list, Expr, Parameter)):
                    pending.append(child)


def _reject_parameters(expr: Expr):
    for node in _walk(expr):
        if isinstance(node, Parameter):
            raise NotIdentifier(f'type annotation on {node.name} is only allowed in a function definition')


def _binary(items, op: BinOp) -> BinaryOp:
    left, right = items
    return BinaryOp(left=left, op=op, right=right)


class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def program(self, items):
        return Program(body=list(items))

    def unset(self, items):
        return UnsetVariable(name=str(items[0]))

    def expr_stmt(self, items):
        expr = items[0]
        if isinstance(expr, Assignment) and isinstance(expr.holder, FunctionCall):
            definition = self._function_definition(expr.holder, expr.value)
            if definition is not None:
                return definition
        _reject_parameters(expr)
        return ExpressionStatement(expr=expr)

    def _function_definition(self, head: FunctionCall, body: Expr):
        params: List[Parameter] = []
        for arg in head.args:
            if isinstance(arg, Parameter):
                params.append(arg)
            elif isinstance(arg, Variable):
                params.append(Parameter(name=arg.name))
            else:
                return None
        _reject_parameters(body)
        return FunctionDefinition(name=head.name, params=params, body=body)

    def if_expr(self, items):
        condition, body, else_body = items
        return If(condition=condition, body=body, else_body=else_body)

    def simplify_expr(self, items):
        return Simplify(expr=items[0])

    def assign(self, items):
        holder, value = items
        return Assignment(holder=holder, value=value)

    def compare(self, items):
        left, op, right = items
        return BinaryOp(left=left, op=BinOp.from_symbol(str(op)), right=right)

    def add(self, items):
        return _binary(items, BinOp.ADD)

    def sub(self, items):
        return _binary(items, BinOp.SUBTRACT)

    def mul(self, items):
        return _binary(items, BinOp.MULTIPLY)

    def div(self, items):
        return _binary(items, BinOp.DIVIDE)

    def pow(self, items):
        return _binary(items, BinOp.POWER)

    def neg(self, items):
        return Unary(operand=items[0])

    def number(self, items):
        return NumberLit(value=float(items[0]))

    def true(self, items):
        return BoolLit(value=True)

    def false(self, items):
        return BoolLit(value=False)

    def variable(self, items):
        return Variable(name=str(items[0]))

    def call(self, items):
        name = str(items[0])
        args = items[1] if len(items) > 1 else []
        return FunctionCall(name=name, args=args)

    def vector(self, items):
        return VectorLit(elements=items[0] if items else [])

    def arguments(self, items):
        return list(items)

    def typed_param(self, items):
        return Parameter(name=str(items[0]), type_name=str(items[1]))


# The transformer runs as each rule is reduced, so the AST is built without
# recursing over the parse tree.
MATEX_PARSER = Lark(
    MATEX_GRAMMAR,
    parser='lalr',
    propagate_positions=True,
    maybe_placeholders=False,
    lexer='basic',
    transformer=ASTTransformer(),
)


def _describe(token: Token) -> str:
    return repr(str(token))


def _pending_keyword(e: UnexpectedToken) -> Optional[str]:
    """The keyword the innermost unfinished `if` is waiting for, if any."""
    interactive = getattr(e, 'interactive_parser', None)
    if interactive is None:
        return None
    pending: List[str] = []
    for item in interactive.parser_state.value_stack:
        if not isinstance(item, Token):
            continue
        if item.type == 'IF':
            pending.append('then')
        elif item.type == 'THEN' and pending:
            pending[-1] = 'else'
        elif item.type == 'ELSE' and pending:
            pending.pop()
    return pending[-1] if pending else None


def _token_error(e: UnexpectedToken) -> ParseError:
    token = e.token
    if token.type == '$END':
        return UnexpectedEndOfStream('unexpected end of input')
    expected = set(e.expected or ())
    keyword = _pending_keyword(e)
    if keyword is not None and keyword.upper() in expected:
        return WrongKeyword(f'expected {keyword}, got {_describe(token)}', e.line, e.column)
    if token.type == 'COMP_OP':
        return NotComparison(f'comparison {_describe(token)} is missing its left operand', e.line, e.column)
    if expected == {'NAME'}:
        return NotIdentifier(f'expected an identifier, got {_describe(token)}', e.line, e.column)
    return WrongToken(f'unexpected token {_describe(token)}', e.line, e.column)


def parse_program(source: str) -> Program:
    """Parse a complete source text into a `Program`."""
    try:
        program = MATEX_PARSER.parse(source)
    except RecursionError:
        raise NestingTooDeep('input is nested too deeply to parse') from None
    except UnexpectedEOF:
        raise UnexpectedEndOfStream('unexpected end of input') from None
    except UnexpectedToken as e:
        raise _token_error(e) from None
    except UnexpectedCharacters as e:
        raise WrongToken(f'unexpected character {e.char!r}', e.line, e.column) from None
    _logger.debug('parsed %d statement(s)', len(program.body))
    return program


def parse_statement(source: str) -> Statement:
    """Parse source holding exactly one statement."""
    program = parse_program(source)
    if not program.body:
        raise EndOfStream('no statement to parse')
    if len(program.body) > 1:
        raise WrongToken(f'expected a single statement, found {len(program.body)}')
    return program.body[0]


def tokenize(source: str) -> List[Token]:
    try:
        return list(MATEX_PARSER.lex(source))
    except UnexpectedCharacters as e:
        raise WrongToken(f'unexpected character {e.char!r}', e.line, e.column) from None
