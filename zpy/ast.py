"""Abstract Syntax Tree (AST) definitions for the ZPy language.

The AST classes defined in this module represent the syntactic structure
of parsed ZPy programs. They are produced by the parser (and by the
reference grammar in `zpy.grammar`) and walked by the interpreter. Every
node carries the source position it was parsed from; positions are
excluded from equality so that two parses of the same program compare
equal regardless of how they attribute positions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple


@dataclass
class Node:
    """Base class for all AST nodes."""
    line: int = field(default=0, kw_only=True, compare=False)
    column: int = field(default=0, kw_only=True, compare=False)


# Expressions


@dataclass
class Literal(Node):
    value: Any
    literal_type: str  # 'Integer', 'Float', 'Boolean', 'String', 'None'


@dataclass
class Identifier(Node):
    name: str


@dataclass
class UnaryOp(Node):
    op: str  # '-' or 'not'
    operand: Node


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass
class Call(Node):
    func: Node
    args: List[Node]


@dataclass
class Index(Node):
    target: Node
    index: Node


@dataclass
class Attribute(Node):
    target: Node
    name: str


@dataclass
class ListLiteral(Node):
    elements: List[Node]


@dataclass
class MapLiteral(Node):
    entries: List[Tuple[Node, Node]]


@dataclass
class Lambda(Node):
    params: List[str]
    body: Node


# Statements


@dataclass
class ExprStmt(Node):
    expr: Node


@dataclass
class Assign(Node):
    target: Node  # Identifier or Index
    value: Node


@dataclass
class AugAssign(Node):
    target: Node  # Identifier or Index
    op: str  # the arithmetic operator, e.g. '+' for '+='
    value: Node


@dataclass
class If(Node):
    branches: List[Tuple[Node, List[Node]]]  # the 'if' and every 'elif'
    else_body: Optional[List[Node]]


@dataclass
class While(Node):
    condition: Node
    body: List[Node]


@dataclass
class For(Node):
    name: str
    iterable: Node
    body: List[Node]


@dataclass
class FunctionDef(Node):
    name: str
    params: List[str]
    body: List[Node]


@dataclass
class Return(Node):
    value: Optional[Node]


@dataclass
class Break(Node):
    pass


@dataclass
class Continue(Node):
    pass


@dataclass
class Pass(Node):
    pass


@dataclass
class Delete(Node):
    target: Index


@dataclass
class Program(Node):
    body: List[Node]


