from typing import Any, Dict, Iterator, Optional

from zpy.errors import ZpyRuntimeError


class Environment:
    """A scope mapping identifiers to values, linked to its parent scope.

    Parents are shared, never copied: every closure created in a scope and
    every call frame running in it hold the same object, so an `assign`
    through any of them is visible to all.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Any] = {}

    def child(self) -> 'Environment':
        return Environment(parent=self)

    def define(self, name: str, value: Any):
        self.values[name] = value

    def get(self, name: str) -> Any:
        env = self
        while env is not None:
            if name in env.values:
                return env.values[name]
            env = env.parent
        raise ZpyRuntimeError('NameError', f'undefined variable {name}')

    def contains(self, name: str) -> bool:
        return self._resolve(name) is not None

    def assign(self, name: str, value: Any):
        # Mutate the nearest scope that already binds the name; otherwise
        # the binding is created in this (innermost) scope.
        owner = self._resolve(name)
        if owner is None:
            owner = self
        owner.values[name] = value

    def _resolve(self, name: str) -> Optional['Environment']:
        env = self
        while env is not None:
            if name in env.values:
                return env
            env = env.parent
        return None

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __repr__(self) -> str:
        names = ', '.join(sorted(self.values))
        return f"<Environment [{names}]{' +parent' if self.parent else ''}>"
