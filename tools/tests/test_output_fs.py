import unittest
from unittest.mock import patch
import os
import sys
import tempfile
from pathlib import Path

# Add parent dir to path so we can import output_fs
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
import output_fs
from dzi_errors import DirectoryError

class TestLocalFilesystem(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.fs = output_fs.LocalFilesystem()

    def tearDown(self):
        self._tmp.cleanup()

    def build_tree(self):
        base = self.root / "photo"
        for level in range(3):
            (base / str(level)).mkdir(parents=True)
            (base / str(level) / "0_0.jpg").write_bytes(b"tile")
        (base / "2" / "nested").mkdir()
        (base / "2" / "nested" / "deep.txt").write_text("x")
        return base

    def test_create_directory_reuses_existing(self):
        target = self.root / "a" / "b"
        self.fs.create_directory(target)
        self.fs.create_directory(target)
        self.assertTrue(target.is_dir())

    def test_create_directory_over_file_fails(self):
        target = self.root / "taken"
        target.write_text("file")
        with self.assertRaises(DirectoryError) as ctx:
            self.fs.create_directory(target)
        self.assertEqual(ctx.exception.path, target)

    def test_exists(self):
        self.assertFalse(self.fs.exists(self.root / "nope"))
        (self.root / "yes").write_text("1")
        self.assertTrue(self.fs.exists(self.root / "yes"))

    def test_delete_file_missing_is_noop(self):
        self.fs.delete_file(self.root / "ghost.xml")

    def test_delete_directory_recursive(self):
        base = self.build_tree()
        self.fs.delete_directory_recursive(base)
        self.assertFalse(base.exists())
        self.assertTrue(self.root.exists())

    def test_delete_directory_recursive_is_idempotent(self):
        base = self.build_tree()
        self.fs.delete_directory_recursive(base)
        self.fs.delete_directory_recursive(base)
        self.assertFalse(base.exists())

    def test_delete_directory_recursive_on_file(self):
        target = self.root / "photo.xml"
        target.write_text("<Image/>")
        self.fs.delete_directory_recursive(target)
        self.assertFalse(target.exists())

    @unittest.skipIf(os.name == "nt", "symlinks need privileges on Windows")
    def test_delete_does_not_follow_symlinks(self):
        outside = self.root / "keep"
        outside.mkdir()
        (outside / "precious.txt").write_text("keep me")
        base = self.build_tree()
        os.symlink(outside, base / "link")

        self.fs.delete_directory_recursive(base)
        self.assertFalse(base.exists())
        self.assertTrue((outside / "precious.txt").exists())

    def test_delete_failure_raises_directory_error(self):
        base = self.build_tree()
        with patch("pathlib.Path.rmdir", side_effect=PermissionError(13, "Permission denied")):
            with self.assertRaises(DirectoryError):
                self.fs.delete_directory_recursive(base)

if __name__ == "__main__":
    unittest.main()
