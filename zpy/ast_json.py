"""JSON serialization/deserialization for ZPy ASTs.

This module converts between ZPy AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Every node becomes an
object tagged with `"__node__"` and carrying its `line`/`column`, so a
round-trip restores positions as well as structure.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import (
    Program,
    Literal,
    Identifier,
    UnaryOp,
    BinaryOp,
    Call,
    Index,
    Attribute,
    ListLiteral,
    MapLiteral,
    Lambda,
    ExprStmt,
    Assign,
    AugAssign,
    If,
    While,
    For,
    FunctionDef,
    Return,
    Break,
    Continue,
    Pass,
    Delete,
    Node,
)
from .types import CHUNK_BASE, format_integer, parse_integer


def tagged(node: Node, **fields: Any) -> Dict[str, Any]:
    obj: Dict[str, Any] = {"__node__": type(node).__name__, "line": node.line, "column": node.column}
    obj.update(fields)
    return obj


def body_to_obj(body):
    return [ast_to_obj(stmt) for stmt in body]


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    if isinstance(node, Program):
        return tagged(node, body=body_to_obj(node.body))
    if isinstance(node, ExprStmt):
        return tagged(node, expr=ast_to_obj(node.expr))
    if isinstance(node, Assign):
        return tagged(node, target=ast_to_obj(node.target), value=ast_to_obj(node.value))
    if isinstance(node, AugAssign):
        return tagged(node, target=ast_to_obj(node.target), op=node.op, value=ast_to_obj(node.value))
    if isinstance(node, If):
        return tagged(
            node,
            branches=[[ast_to_obj(cond), body_to_obj(body)] for cond, body in node.branches],
            else_body=None if node.else_body is None else body_to_obj(node.else_body),
        )
    if isinstance(node, While):
        return tagged(node, condition=ast_to_obj(node.condition), body=body_to_obj(node.body))
    if isinstance(node, For):
        return tagged(node, name=node.name, iterable=ast_to_obj(node.iterable), body=body_to_obj(node.body))
    if isinstance(node, FunctionDef):
        return tagged(node, name=node.name, params=list(node.params), body=body_to_obj(node.body))
    if isinstance(node, Return):
        return tagged(node, value=ast_to_obj(node.value))
    if isinstance(node, (Break, Continue, Pass)):
        return tagged(node)
    if isinstance(node, Delete):
        return tagged(node, target=ast_to_obj(node.target))

    if isinstance(node, Literal):
        value = node.value
        # digit strings past the json module's int limit
        if node.literal_type == "Integer" and abs(value) >= CHUNK_BASE:
            value = format_integer(value)
        return tagged(node, value=value, literal_type=node.literal_type)
    if isinstance(node, Identifier):
        return tagged(node, name=node.name)
    if isinstance(node, UnaryOp):
        return tagged(node, op=node.op, operand=ast_to_obj(node.operand))
    if isinstance(node, BinaryOp):
        return tagged(node, op=node.op, left=ast_to_obj(node.left), right=ast_to_obj(node.right))
    if isinstance(node, Call):
        return tagged(node, func=ast_to_obj(node.func), args=[ast_to_obj(a) for a in node.args])
    if isinstance(node, Index):
        return tagged(node, target=ast_to_obj(node.target), index=ast_to_obj(node.index))
    if isinstance(node, Attribute):
        return tagged(node, target=ast_to_obj(node.target), name=node.name)
    if isinstance(node, ListLiteral):
        return tagged(node, elements=[ast_to_obj(e) for e in node.elements])
    if isinstance(node, MapLiteral):
        return tagged(node, entries=[[ast_to_obj(k), ast_to_obj(v)] for k, v in node.entries])
    if isinstance(node, Lambda):
        return tagged(node, params=list(node.params), body=ast_to_obj(node.body))

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def body_from_obj(objs):
    return [ast_from_obj(o) for o in objs]


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict) or "__node__" not in obj:
        raise TypeError("Invalid AST object")
    t = obj["__node__"]
    pos = {"line": obj.get("line", 0), "column": obj.get("column", 0)}

    if t == "Program":
        return Program(body_from_obj(obj["body"]), **pos)
    if t == "ExprStmt":
        return ExprStmt(ast_from_obj(obj["expr"]), **pos)
    if t == "Assign":
        return Assign(ast_from_obj(obj["target"]), ast_from_obj(obj["value"]), **pos)
    if t == "AugAssign":
        return AugAssign(ast_from_obj(obj["target"]), obj["op"], ast_from_obj(obj["value"]), **pos)
    if t == "If":
        branches = [(ast_from_obj(cond), body_from_obj(body)) for cond, body in obj["branches"]]
        else_body = obj.get("else_body")
        return If(branches, None if else_body is None else body_from_obj(else_body), **pos)
    if t == "While":
        return While(ast_from_obj(obj["condition"]), body_from_obj(obj["body"]), **pos)
    if t == "For":
        return For(obj["name"], ast_from_obj(obj["iterable"]), body_from_obj(obj["body"]), **pos)
    if t == "FunctionDef":
        return FunctionDef(obj["name"], list(obj["params"]), body_from_obj(obj["body"]), **pos)
    if t == "Return":
        return Return(ast_from_obj(obj.get("value")), **pos)
    if t == "Break":
        return Break(**pos)
    if t == "Continue":
        return Continue(**pos)
    if t == "Pass":
        return Pass(**pos)
    if t == "Delete":
        return Delete(ast_from_obj(obj["target"]), **pos)

    if t == "Literal":
        value = obj["value"]
        if obj["literal_type"] == "Integer" and isinstance(value, str):
            value = parse_integer(value)
        return Literal(value, obj["literal_type"], **pos)
    if t == "Identifier":
        return Identifier(obj["name"], **pos)
    if t == "UnaryOp":
        return UnaryOp(obj["op"], ast_from_obj(obj["operand"]), **pos)
    if t == "BinaryOp":
        return BinaryOp(obj["op"], ast_from_obj(obj["left"]), ast_from_obj(obj["right"]), **pos)
    if t == "Call":
        return Call(ast_from_obj(obj["func"]), [ast_from_obj(a) for a in obj["args"]], **pos)
    if t == "Index":
        return Index(ast_from_obj(obj["target"]), ast_from_obj(obj["index"]), **pos)
    if t == "Attribute":
        return Attribute(ast_from_obj(obj["target"]), obj["name"], **pos)
    if t == "ListLiteral":
        return ListLiteral([ast_from_obj(e) for e in obj["elements"]], **pos)
    if t == "MapLiteral":
        return MapLiteral([(ast_from_obj(k), ast_from_obj(v)) for k, v in obj["entries"]], **pos)
    if t == "Lambda":
        return Lambda(list(obj["params"]), ast_from_obj(obj["body"]), **pos)

    raise ValueError(f"Unknown AST node type: {t}")
