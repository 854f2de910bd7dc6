"""`math_*` builtins. Arguments may be Integer or Float; results are Float
except for the rounding functions, which return Integer."""

import math
from typing import Any, Callable, List

from zpy.builtin_function import BuiltinRegistry
from zpy.errors import BuiltinFailure
from .checks import expect_kind

UNARY = {
    'math_sqrt': math.sqrt,
    'math_exp': math.exp,
    'math_log': math.log,
    'math_sin': math.sin,
    'math_cos': math.cos,
    'math_tan': math.tan,
    'math_asin': math.asin,
    'math_acos': math.acos,
    'math_atan': math.atan,
    'math_fabs': math.fabs,
}

ROUNDING = {
    'math_floor': math.floor,
    'math_ceil': math.ceil,
    'math_trunc': math.trunc,
    # half away from zero, unlike Python's round()
    'math_round': lambda x: int(math.copysign(math.floor(abs(x) + 0.5), x)),
}

BINARY = {
    'math_fmod': math.fmod,
    'math_hypot': math.hypot,
    'math_pow': math.pow,
}

CONSTANTS = {
    'math_pi': math.pi,
    'math_e': math.e,
    'math_tau': math.tau,
    'math_inf': math.inf,
    'math_nan': math.nan,
}


def apply(name: str, fn: Callable[..., Any], args: List[Any]) -> Any:
    numbers = [expect_kind(name, 'argument', arg, 'Number') for arg in args]
    try:
        return fn(*[float(n) for n in numbers])
    except ValueError:
        raise BuiltinFailure('math domain error') from None
    except OverflowError:
        raise BuiltinFailure('math range error') from None


def numeric_builtin(name: str, fn: Callable[..., Any]):
    return lambda args: apply(name, fn, args)


def constant_builtin(value: float):
    return lambda args: value


def register_math(registry: BuiltinRegistry):
    for name, fn in UNARY.items():
        registry.register(name, 1, numeric_builtin(name, fn))
    for name, fn in ROUNDING.items():
        registry.register(name, 1, numeric_builtin(name, fn))
    for name, fn in BINARY.items():
        registry.register(name, 2, numeric_builtin(name, fn))
    for name, value in CONSTANTS.items():
        registry.register(name, 0, constant_builtin(value))
