"""`os_*` builtins: working directory, environment variables and path helpers."""

import os
from typing import Any, List

from zpy.builtin_function import BuiltinRegistry
from zpy.errors import BuiltinFailure
from zpy.types import NONE, ListVal, MapVal
from .checks import expect_kind


def os_error(action: str, path: str, e: OSError) -> BuiltinFailure:
    return BuiltinFailure(f"cannot {action} {path}: {e.strerror}")


def register_os(registry: BuiltinRegistry):

    def os_getcwd(args: List[Any]) -> Any:
        return os.getcwd()

    def os_chdir(args: List[Any]) -> Any:
        path = expect_kind('os_chdir', 'path', args[0], 'String')
        try:
            os.chdir(path)
        except OSError as e:
            raise os_error('change directory to', path, e) from None
        return NONE

    def os_getenv(args: List[Any]) -> Any:
        name = expect_kind('os_getenv', 'name', args[0], 'String')
        value = os.environ.get(name)
        if value is None:
            return args[1] if len(args) > 1 else NONE
        return value

    def os_setenv(args: List[Any]) -> Any:
        name = expect_kind('os_setenv', 'name', args[0], 'String')
        value = expect_kind('os_setenv', 'value', args[1], 'String')
        os.environ[name] = value
        return NONE

    def os_unsetenv(args: List[Any]) -> Any:
        name = expect_kind('os_unsetenv', 'name', args[0], 'String')
        return os.environ.pop(name, None) is not None

    def os_environ(args: List[Any]) -> Any:
        return MapVal(sorted(os.environ.items()))

    def os_remove(args: List[Any]) -> Any:
        path = expect_kind('os_remove', 'path', args[0], 'String')
        try:
            os.remove(path)
        except OSError as e:
            raise os_error('remove', path, e) from None
        return NONE

    def os_mkdir(args: List[Any]) -> Any:
        path = expect_kind('os_mkdir', 'path', args[0], 'String')
        try:
            os.mkdir(path)
        except OSError as e:
            raise os_error('create directory', path, e) from None
        return NONE

    def os_rmdir(args: List[Any]) -> Any:
        path = expect_kind('os_rmdir', 'path', args[0], 'String')
        try:
            os.rmdir(path)
        except OSError as e:
            raise os_error('remove directory', path, e) from None
        return NONE

    def os_path_join(args: List[Any]) -> Any:
        parts = [expect_kind('os_path_join', 'part', part, 'String') for part in args]
        if not parts:
            raise BuiltinFailure('os_path_join expects at least 1 argument')
        return os.path.join(*parts)

    def os_path_exists(args: List[Any]) -> Any:
        return os.path.exists(expect_kind('os_path_exists', 'path', args[0], 'String'))

    def os_path_isdir(args: List[Any]) -> Any:
        return os.path.isdir(expect_kind('os_path_isdir', 'path', args[0], 'String'))

    def os_path_isfile(args: List[Any]) -> Any:
        return os.path.isfile(expect_kind('os_path_isfile', 'path', args[0], 'String'))

    def os_path_basename(args: List[Any]) -> Any:
        return os.path.basename(expect_kind('os_path_basename', 'path', args[0], 'String'))

    def os_path_dirname(args: List[Any]) -> Any:
        return os.path.dirname(expect_kind('os_path_dirname', 'path', args[0], 'String'))

    def os_path_splitext(args: List[Any]) -> Any:
        root, ext = os.path.splitext(expect_kind('os_path_splitext', 'path', args[0], 'String'))
        return ListVal([root, ext])

    def os_path_abspath(args: List[Any]) -> Any:
        return os.path.abspath(expect_kind('os_path_abspath', 'path', args[0], 'String'))

    def os_path_normpath(args: List[Any]) -> Any:
        return os.path.normpath(expect_kind('os_path_normpath', 'path', args[0], 'String'))

    registry.register('os_getcwd', 0, os_getcwd)
    registry.register('os_chdir', 1, os_chdir)
    registry.register('os_getenv', 1, os_getenv, max_arity=2)
    registry.register('os_setenv', 2, os_setenv)
    registry.register('os_unsetenv', 1, os_unsetenv)
    registry.register('os_environ', 0, os_environ)
    registry.register('os_remove', 1, os_remove)
    registry.register('os_mkdir', 1, os_mkdir)
    registry.register('os_rmdir', 1, os_rmdir)
    registry.register('os_path_join', None, os_path_join)
    registry.register('os_path_exists', 1, os_path_exists)
    registry.register('os_path_isdir', 1, os_path_isdir)
    registry.register('os_path_isfile', 1, os_path_isfile)
    registry.register('os_path_basename', 1, os_path_basename)
    registry.register('os_path_dirname', 1, os_path_dirname)
    registry.register('os_path_splitext', 1, os_path_splitext)
    registry.register('os_path_abspath', 1, os_path_abspath)
    registry.register('os_path_normpath', 1, os_path_normpath)
