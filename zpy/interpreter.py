"""Tree-walking evaluator for ZPy programs.

`Interpreter.execute` runs one statement and returns a `Signal` telling
the enclosing block whether to continue, or whether a `return`, `break` or
`continue` is travelling outward. Blocks stop at the first signal that is
not NORMAL and hand it to their caller; loops consume BREAK and CONTINUE
and function calls consume RETURN. Control flow never uses exceptions;
exceptions are reserved for runtime errors, which abort the program.

Builtins are reached through a `BuiltinRegistry`. A `NativeFunction`
value only names its registry entry, so a host can swap the registry
without touching the evaluator.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, List, Optional

from .ast import (
    Program, Literal, Identifier, UnaryOp, BinaryOp, Call, Index, Attribute,
    ListLiteral, MapLiteral, Lambda, ExprStmt, Assign, AugAssign, If, While, For,
    FunctionDef, Return, Break, Continue, Pass, Delete, Node,
)
from .builtin_function import BuiltinRegistry
from .environment import Environment
from .errors import BuiltinFailure, ZpyRuntimeError
from .operations import (
    binary, unary, require_boolean, check_key, get_item, set_item, delete_item, iteration_items,
)
from .parser import parse_program
from .std import default_registry
from .types import NONE, ListVal, MapVal, FunctionVal, NativeFunction, type_name, to_repr

# Python frames used per ZPy call, with headroom; sizes the host recursion limit.
FRAMES_PER_CALL = 30

METHOD_PREFIXES = (
    (str, 'str'),
    (ListVal, 'list'),
    (MapVal, 'map'),
)


class Flow(Enum):
    NORMAL = auto()
    RETURN = auto()
    BREAK = auto()
    CONTINUE = auto()


@dataclass
class Signal:
    """Completion of a statement; `value` is only meaningful for RETURN."""
    flow: Flow
    value: Any = NONE


NORMAL = Signal(Flow.NORMAL)
BREAK = Signal(Flow.BREAK)
CONTINUE = Signal(Flow.CONTINUE)


def install_builtins(env: Environment, registry: BuiltinRegistry) -> Environment:
    """Bind every plain builtin name that the outermost scope of `env` leaves free."""
    root = env
    while root.parent is not None:
        root = root.parent
    for name in registry.global_names():
        if name not in root.values:
            root.define(name, NativeFunction(name))
    return env


def global_environment(registry: BuiltinRegistry) -> Environment:
    """Create a global scope binding every plain builtin name."""
    return install_builtins(Environment(), registry)


class Interpreter:
    """Core interpreter that executes ZPy ASTs."""
    def __init__(self, builtins: Optional[BuiltinRegistry] = None, debug_level: int = 0,
                 debug_file: str = 'debug.txt', max_depth: int = 200):
        self.builtins = builtins if builtins is not None else default_registry()
        self.global_env = global_environment(self.builtins)
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None
        self.max_depth = max_depth
        self.depth = 0

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp is None:
                self.debug_fp = open(self.debug_file, 'a', encoding='utf-8')
            self.debug_fp.write(msg + '\n')
            self.debug_fp.flush()

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def run(self, program: Program, env: Optional[Environment] = None) -> Environment:
        """Execute a whole program and return the environment it ran in."""
        if env is None:
            env = self.global_env
        elif env is not self.global_env:
            install_builtins(env, self.builtins)
        limit = sys.getrecursionlimit()
        needed = self.max_depth * FRAMES_PER_CALL + 1000
        if needed > limit:
            sys.setrecursionlimit(needed)
        try:
            self.execute_block(program.body, env)
            return env
        finally:
            sys.setrecursionlimit(limit)
            self.close()

    def execute_block(self, statements: List[Node], env: Environment) -> Signal:
        for stmt in statements:
            signal = self.execute(stmt, env)
            if signal.flow is not Flow.NORMAL:
                return signal
        return NORMAL

    def execute(self, node: Node, env: Environment) -> Signal:
        try:
            return self.execute_statement(node, env)
        except ZpyRuntimeError as e:
            raise e.locate(node.line, node.column)

    def execute_statement(self, node: Node, env: Environment) -> Signal:
        if self.debug_level >= 4:
            self.debug(f"{node.line}:{node.column}: {type(node).__name__}")
        if isinstance(node, ExprStmt):
            self.evaluate(node.expr, env)
            return NORMAL
        if isinstance(node, Assign):
            value = self.evaluate(node.value, env)
            self.assign_target(node.target, value, env)
            return NORMAL
        if isinstance(node, AugAssign):
            self.augmented_assign(node, env)
            return NORMAL
        if isinstance(node, If):
            for condition, body in node.branches:
                taken = self.condition(condition, env, 'if condition')
                if self.debug_level >= 3:
                    self.debug(f"{condition.line}:{condition.column}: branch -> {to_repr(taken)}")
                if taken:
                    return self.execute_block(body, env)
            if node.else_body is not None:
                if self.debug_level >= 3:
                    self.debug(f"{node.line}:{node.column}: else branch")
                return self.execute_block(node.else_body, env)
            return NORMAL
        if isinstance(node, While):
            iteration = 0
            while self.condition(node.condition, env, 'while condition'):
                iteration += 1
                if self.debug_level >= 3:
                    self.debug(f"{node.line}:{node.column}: while iteration {iteration}")
                signal = self.execute_block(node.body, env)
                if signal.flow is Flow.BREAK:
                    break
                if signal.flow is Flow.RETURN:
                    return signal
            return NORMAL
        if isinstance(node, For):
            items = iteration_items(self.evaluate(node.iterable, env))
            for item in items:
                env.define(node.name, item)
                if self.debug_level >= 3:
                    self.debug(f"{node.line}:{node.column}: for {node.name} = {to_repr(item)}")
                signal = self.execute_block(node.body, env)
                if signal.flow is Flow.BREAK:
                    break
                if signal.flow is Flow.RETURN:
                    return signal
            return NORMAL
        if isinstance(node, FunctionDef):
            env.define(node.name, FunctionVal(node.name, node.params, node.body, env))
            if self.debug_level >= 2:
                self.debug(f"define function {node.name}({', '.join(node.params)})")
            return NORMAL
        if isinstance(node, Return):
            value = self.evaluate(node.value, env) if node.value is not None else NONE
            return Signal(Flow.RETURN, value)
        if isinstance(node, Break):
            return BREAK
        if isinstance(node, Continue):
            return CONTINUE
        if isinstance(node, Pass):
            return NORMAL
        if isinstance(node, Delete):
            container = self.evaluate(node.target.target, env)
            key = self.evaluate(node.target.index, env)
            delete_item(container, key)
            return NORMAL
        raise ZpyRuntimeError('TypeError', f"cannot execute node type {type(node).__name__}")

    def condition(self, expr: Node, env: Environment, what: str) -> bool:
        value = self.evaluate(expr, env)
        try:
            return require_boolean(value, what)
        except ZpyRuntimeError as e:
            raise e.locate(expr.line, expr.column)

    def evaluate(self, node: Node, env: Environment) -> Any:
        try:
            return self.evaluate_expression(node, env)
        except ZpyRuntimeError as e:
            raise e.locate(node.line, node.column)

    def evaluate_expression(self, node: Node, env: Environment) -> Any:
        if isinstance(node, Literal):
            return NONE if node.literal_type == 'None' else node.value
        if isinstance(node, Identifier):
            return env.get(node.name)
        if isinstance(node, BinaryOp):
            if node.op in ('and', 'or'):
                return self.logical(node, env)
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return binary(node.op, left, right)
        if isinstance(node, UnaryOp):
            return unary(node.op, self.evaluate(node.operand, env))
        if isinstance(node, Call):
            func = self.evaluate(node.func, env)
            args = [self.evaluate(arg, env) for arg in node.args]
            return self.call_function(func, args)
        if isinstance(node, Index):
            target = self.evaluate(node.target, env)
            index = self.evaluate(node.index, env)
            return get_item(target, index)
        if isinstance(node, Attribute):
            target = self.evaluate(node.target, env)
            return self.bind_method(target, node.name)
        if isinstance(node, ListLiteral):
            return ListVal([self.evaluate(element, env) for element in node.elements])
        if isinstance(node, MapLiteral):
            mapping = MapVal()
            for key_node, value_node in node.entries:
                key = self.evaluate(key_node, env)
                try:
                    check_key(key)
                except ZpyRuntimeError as e:
                    raise e.locate(key_node.line, key_node.column)
                mapping.set(key, self.evaluate(value_node, env))
            return mapping
        if isinstance(node, Lambda):
            body = [Return(node.body, line=node.body.line, column=node.body.column)]
            return FunctionVal('<lambda>', node.params, body, env)
        raise ZpyRuntimeError('TypeError', f"cannot evaluate node type {type(node).__name__}")

    def logical(self, node: BinaryOp, env: Environment) -> bool:
        what = f"operand of '{node.op}'"
        left = self.evaluate(node.left, env)
        try:
            require_boolean(left, what)
        except ZpyRuntimeError as e:
            raise e.locate(node.left.line, node.left.column)
        if node.op == 'and' and not left:
            return False
        if node.op == 'or' and left:
            return True
        right = self.evaluate(node.right, env)
        try:
            return require_boolean(right, what)
        except ZpyRuntimeError as e:
            raise e.locate(node.right.line, node.right.column)

    def bind_method(self, target: Any, name: str) -> NativeFunction:
        for kind, prefix in METHOD_PREFIXES:
            if isinstance(target, kind):
                qualified = f"{prefix}.{name}"
                if qualified in self.builtins:
                    return NativeFunction(qualified, receiver=target)
                break
        raise ZpyRuntimeError('TypeError', f"{type_name(target)} has no attribute {name!r}")

    def assign_target(self, target: Node, value: Any, env: Environment):
        if isinstance(target, Identifier):
            env.assign(target.name, value)
            if self.debug_level >= 2:
                self.debug(f"assign {target.name} = {to_repr(value)}")
            return
        if isinstance(target, Index):
            container = self.evaluate(target.target, env)
            key = self.evaluate(target.index, env)
            set_item(container, key, value)
            return
        raise ZpyRuntimeError('TypeError', 'invalid assignment target')

    def augmented_assign(self, node: AugAssign, env: Environment):
        target = node.target
        if isinstance(target, Identifier):
            current = self.evaluate(target, env)
            result = binary(node.op, current, self.evaluate(node.value, env))
            env.assign(target.name, result)
            if self.debug_level >= 2:
                self.debug(f"assign {target.name} = {to_repr(result)}")
            return
        # The container and key are evaluated once and reused for the store.
        container = self.evaluate(target.target, env)
        key = self.evaluate(target.index, env)
        current = get_item(container, key)
        set_item(container, key, binary(node.op, current, self.evaluate(node.value, env)))

    def call_function(self, func: Any, args: List[Any]) -> Any:
        if isinstance(func, FunctionVal):
            if len(args) != len(func.params):
                raise ZpyRuntimeError('ArityMismatch',
                                      f"{func.name} expects {len(func.params)} arguments, got {len(args)}")
            if self.depth >= self.max_depth:
                raise ZpyRuntimeError('RecursionLimitExceeded',
                                      f"maximum call depth {self.max_depth} exceeded in {func.name}")
            call_env = func.closure.child()
            for param, arg in zip(func.params, args):
                call_env.define(param, arg)
            if self.debug_level >= 1:
                self.debug(f"call {func.name}({', '.join(to_repr(a) for a in args)}) depth={self.depth + 1}")
            self.depth += 1
            try:
                signal = self.execute_block(func.body, call_env)
            except RecursionError:
                raise ZpyRuntimeError('RecursionLimitExceeded',
                                      f"host stack exhausted in {func.name}") from None
            finally:
                self.depth -= 1
            return signal.value if signal.flow is Flow.RETURN else NONE
        if isinstance(func, NativeFunction):
            return self.call_builtin(func, args)
        raise ZpyRuntimeError('TypeError', f"{type_name(func)} is not callable")

    def call_builtin(self, func: NativeFunction, args: List[Any]) -> Any:
        if func.name not in self.builtins:
            raise ZpyRuntimeError('NameError', f"unknown builtin {func.name}")
        if func.receiver is not None:
            args = [func.receiver] + args
        if self.debug_level >= 1:
            self.debug(f"builtin {func.name}({', '.join(to_repr(a) for a in args)})")
        try:
            result = self.builtins[func.name](args)
        except BuiltinFailure as e:
            raise ZpyRuntimeError('BuiltinError', f"{func.name}: {e.message}", builtin=func.name) from None
        except (OverflowError, ValueError) as e:
            raise ZpyRuntimeError('BuiltinError', f"{func.name}: {e}", builtin=func.name) from None
        return NONE if result is None else result


def execute(program: Program, environment: Environment, builtins: Optional[BuiltinRegistry] = None):
    """Run `program` against `environment`, raising ZpyRuntimeError on failure."""
    Interpreter(builtins=builtins).run(program, environment)


def run_program(source: str, environment: Optional[Environment] = None, debug_level: int = 0) -> Environment:
    """Convenience function to parse and run ZPy source, returning its environment."""
    program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level)
    return interpreter.run(program, environment)
