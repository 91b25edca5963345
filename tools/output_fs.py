# -*- coding: utf-8 -*-
import os
from pathlib import Path

from dzi_errors import DirectoryError


class LocalFilesystem:
    """Directory and file operations on the local disk used for pyramid output."""

    def exists(self, path):
        return os.path.lexists(path)

    def create_directory(self, path):
        """Creates a directory and its parents; an existing directory is reused."""
        path = Path(path)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryError(f"Unable to create directory ({e.strerror or e})", path) from e
        return path

    def delete_file(self, path):
        path = Path(path)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise DirectoryError(f"Failed to delete file ({e.strerror or e})", path) from e

    def delete_directory_recursive(self, path):
        """
        Removes a directory tree, deepest entries first.
        A missing path is not an error, so an interrupted delete can simply
        be run again.
        """
        path = Path(path)
        if not self.exists(path):
            return
        if path.is_symlink() or not path.is_dir():
            self.delete_file(path)
            return

        for root, dirs, files in os.walk(path, topdown=False):
            for name in files:
                self.delete_file(Path(root) / name)
            for name in dirs:
                entry = Path(root) / name
                # os.walk lists directory symlinks here without descending into them
                if entry.is_symlink():
                    self.delete_file(entry)
                else:
                    self._remove_empty_dir(entry)
        self._remove_empty_dir(path)

    def _remove_empty_dir(self, path):
        try:
            path.rmdir()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise DirectoryError(f"Failed to delete directory ({e.strerror or e})", path) from e
