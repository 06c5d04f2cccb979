"""JSON serialization/deserialization for the matex AST.

This module converts between AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Every node type
round-trips; binary operators are stored by their symbol.
"""

from __future__ import annotations

from typing import Any

from .ast import (
    Program,
    FunctionDefinition,
    UnsetVariable,
    ExpressionStatement,
    Parameter,
    NumberLit,
    BoolLit,
    Variable,
    VectorLit,
    Unary,
    Simplify,
    BinaryOp,
    BinOp,
    Assignment,
    If,
    FunctionCall,
)


def ast_to_obj(node: Any) -> Any:
    if isinstance(node, Program):
        return {"type": "Program", "body": [ast_to_obj(n) for n in node.body]}
    if isinstance(node, FunctionDefinition):
        return {
            "type": "FunctionDefinition",
            "name": node.name,
            "params": [ast_to_obj(p) for p in node.params],
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, Parameter):
        return {"type": "Parameter", "name": node.name, "type_name": node.type_name}
    if isinstance(node, UnsetVariable):
        return {"type": "UnsetVariable", "name": node.name}
    if isinstance(node, ExpressionStatement):
        return {"type": "ExpressionStatement", "expr": ast_to_obj(node.expr)}
    if isinstance(node, NumberLit):
        return {"type": "NumberLit", "value": node.value}
    if isinstance(node, BoolLit):
        return {"type": "BoolLit", "value": node.value}
    if isinstance(node, Variable):
        return {"type": "Variable", "name": node.name}
    if isinstance(node, VectorLit):
        return {"type": "VectorLit", "elements": [ast_to_obj(e) for e in node.elements]}
    if isinstance(node, Unary):
        return {"type": "Unary", "operand": ast_to_obj(node.operand)}
    if isinstance(node, Simplify):
        return {"type": "Simplify", "expr": ast_to_obj(node.expr)}
    if isinstance(node, BinaryOp):
        return {
            "type": "BinaryOp",
            "op": node.op.value,
            "left": ast_to_obj(node.left),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, Assignment):
        return {"type": "Assignment", "holder": ast_to_obj(node.holder), "value": ast_to_obj(node.value)}
    if isinstance(node, If):
        return {
            "type": "If",
            "condition": ast_to_obj(node.condition),
            "body": ast_to_obj(node.body),
            "else_body": ast_to_obj(node.else_body),
        }
    if isinstance(node, FunctionCall):
        return {"type": "FunctionCall", "name": node.name, "args": [ast_to_obj(a) for a in node.args]}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Program":
        return Program(body=[ast_from_obj(n) for n in obj["body"]])
    if t == "FunctionDefinition":
        return FunctionDefinition(
            name=obj["name"],
            params=[ast_from_obj(p) for p in obj["params"]],
            body=ast_from_obj(obj["body"]),
        )
    if t == "Parameter":
        return Parameter(name=obj["name"], type_name=obj.get("type_name", ""))
    if t == "UnsetVariable":
        return UnsetVariable(name=obj["name"])
    if t == "ExpressionStatement":
        return ExpressionStatement(expr=ast_from_obj(obj["expr"]))
    if t == "NumberLit":
        return NumberLit(value=float(obj["value"]))
    if t == "BoolLit":
        return BoolLit(value=bool(obj["value"]))
    if t == "Variable":
        return Variable(name=obj["name"])
    if t == "VectorLit":
        return VectorLit(elements=[ast_from_obj(e) for e in obj["elements"]])
    if t == "Unary":
        return Unary(operand=ast_from_obj(obj["operand"]))
    if t == "Simplify":
        return Simplify(expr=ast_from_obj(obj["expr"]))
    if t == "BinaryOp":
        return BinaryOp(
            left=ast_from_obj(obj["left"]),
            op=BinOp.from_symbol(obj["op"]),
            right=ast_from_obj(obj["right"]),
        )
    if t == "Assignment":
        return Assignment(holder=ast_from_obj(obj["holder"]), value=ast_from_obj(obj["value"]))
    if t == "If":
        return If(
            condition=ast_from_obj(obj["condition"]),
            body=ast_from_obj(obj["body"]),
            else_body=ast_from_obj(obj["else_body"]),
        )
    if t == "FunctionCall":
        return FunctionCall(name=obj["name"], args=[ast_from_obj(a) for a in obj["args"]])

    raise TypeError(f"Unknown AST node type: {t}")
