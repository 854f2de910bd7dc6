import os
import shutil
from typing import List

from zpy.errors import BuiltinFailure


class BasicIO:
    """Path based file operations backing the `file_*` and `dir_*` builtins."""
    def __init__(self, encoding: str = 'utf-8'):
        self.encoding = encoding

    def read_file(self, filename: str) -> str:
        try:
            with open(filename, 'r', encoding=self.encoding) as f:
                return f.read()
        except FileNotFoundError:
            raise BuiltinFailure(f"file not found: {filename}") from None
        except UnicodeDecodeError:
            raise BuiltinFailure(f"cannot decode {filename} as {self.encoding}") from None
        except OSError as e:
            raise BuiltinFailure(f"error reading {filename}: {e.strerror}") from None

    def write_file(self, filename: str, data: str, mode: str = 'w'):
        try:
            with open(filename, mode, encoding=self.encoding) as f:
                f.write(data)
        except OSError as e:
            raise BuiltinFailure(f"error writing {filename}: {e.strerror}") from None

    def delete_file(self, filename: str) -> bool:
        try:
            os.remove(filename)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise BuiltinFailure(f"error deleting {filename}: {e.strerror}") from None

    def rename_file(self, old_filename: str, new_filename: str):
        try:
            os.rename(old_filename, new_filename)
        except OSError as e:
            raise BuiltinFailure(f"error renaming {old_filename}: {e.strerror}") from None

    def copy_file(self, source_filename: str, dest_filename: str):
        try:
            shutil.copy(source_filename, dest_filename)
        except OSError as e:
            raise BuiltinFailure(f"error copying {source_filename}: {e.strerror}") from None

    def file_exists(self, filename: str) -> bool:
        return os.path.isfile(filename)

    def list_dir(self, path: str) -> List[str]:
        try:
            return sorted(os.listdir(path))
        except OSError as e:
            raise BuiltinFailure(f"error listing {path}: {e.strerror}") from None

    def create_dir(self, path: str):
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise BuiltinFailure(f"error creating {path}: {e.strerror}") from None

    def dir_exists(self, path: str) -> bool:
        return os.path.isdir(path)
