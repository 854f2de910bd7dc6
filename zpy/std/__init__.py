"""Standard library builtins for ZPy."""

from zpy.builtin_function import BuiltinRegistry
from .core import register_core
from .methods import register_methods
from .io import populate_io_registry
from .os_methods import register_os
from .math_methods import register_math
from .json_methods import register_json
from .csv_methods import register_csv


def default_registry() -> BuiltinRegistry:
    """Build a registry holding every standard builtin and method."""
    registry = BuiltinRegistry()
    register_core(registry)
    register_methods(registry)
    populate_io_registry(registry)
    register_os(registry)
    register_math(registry)
    register_json(registry)
    register_csv(registry)
    return registry
