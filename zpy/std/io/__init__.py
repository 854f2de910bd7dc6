from .basic_io import BasicIO
from zpy.builtin_function import BuiltinRegistry
from zpy.std.checks import expect_kind
from zpy.types import NONE, ListVal
from typing import List, Any


def populate_io_registry(registry: BuiltinRegistry) -> BuiltinRegistry:
    basic_io = BasicIO()

    def std_file_read(args: List[Any]) -> Any:
        filename = expect_kind('file_read', 'path', args[0], 'String')
        return basic_io.read_file(filename)

    def std_file_write(args: List[Any]) -> Any:
        filename = expect_kind('file_write', 'path', args[0], 'String')
        data = expect_kind('file_write', 'content', args[1], 'String')
        basic_io.write_file(filename, data)
        return NONE

    def std_file_append(args: List[Any]) -> Any:
        filename = expect_kind('file_append', 'path', args[0], 'String')
        data = expect_kind('file_append', 'content', args[1], 'String')
        basic_io.write_file(filename, data, mode='a')
        return NONE

    def std_file_delete(args: List[Any]) -> Any:
        filename = expect_kind('file_delete', 'path', args[0], 'String')
        return basic_io.delete_file(filename)

    def std_file_exists(args: List[Any]) -> Any:
        filename = expect_kind('file_exists', 'path', args[0], 'String')
        return basic_io.file_exists(filename)

    def std_file_rename(args: List[Any]) -> Any:
        old_filename = expect_kind('file_rename', 'old path', args[0], 'String')
        new_filename = expect_kind('file_rename', 'new path', args[1], 'String')
        basic_io.rename_file(old_filename, new_filename)
        return NONE

    def std_file_copy(args: List[Any]) -> Any:
        source_filename = expect_kind('file_copy', 'source path', args[0], 'String')
        dest_filename = expect_kind('file_copy', 'destination path', args[1], 'String')
        basic_io.copy_file(source_filename, dest_filename)
        return NONE

    def std_dir_list(args: List[Any]) -> Any:
        path = expect_kind('dir_list', 'path', args[0], 'String')
        return ListVal(basic_io.list_dir(path))

    def std_dir_create(args: List[Any]) -> Any:
        path = expect_kind('dir_create', 'path', args[0], 'String')
        basic_io.create_dir(path)
        return NONE

    def std_dir_exists(args: List[Any]) -> Any:
        path = expect_kind('dir_exists', 'path', args[0], 'String')
        return basic_io.dir_exists(path)

    registry.register('file_read', 1, std_file_read)
    registry.register('file_write', 2, std_file_write)
    registry.register('file_append', 2, std_file_append)
    registry.register('file_delete', 1, std_file_delete)
    registry.register('file_exists', 1, std_file_exists)
    registry.register('file_rename', 2, std_file_rename)
    registry.register('file_copy', 2, std_file_copy)
    registry.register('dir_list', 1, std_dir_list)
    registry.register('dir_create', 1, std_dir_create)
    registry.register('dir_exists', 1, std_dir_exists)

    return registry
