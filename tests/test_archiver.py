"""
Unit tests for package archive creation.
"""

import os
import shutil
import tempfile
import unittest
import zipfile
from pathlib import Path
from unittest import mock

from git_satis.core.config import ArchiveConfig
from git_satis.core.exceptions import ArchiveError
from git_satis.packaging.archiver import PackageArchiver


class TestPackageArchiver(unittest.TestCase):
    """Tests for the package archiver."""

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp()).resolve()
        self.out_dir = self.tmpdir / "out"
        self.package_root = self.tmpdir / "src" / "widget"
        self._create_package()
        self.archiver = PackageArchiver(self.out_dir, "https://pkg.example.com")

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _create_package(self):
        files = {
            "composer.json": '{"name": "acme/widget"}',
            "src/Widget.php": "<?php class Widget {}",
            "src/Util/Helper.php": "<?php class Helper {}",
            "README.md": "# Widget",
        }
        for relative, content in files.items():
            path = self.package_root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)

    def test_dist_url_derivation(self):
        """Test the public URL of a scoped package archive."""
        url = self.archiver.dist_url("acme/widget", "abcdef1")

        self.assertEqual(url, "https://pkg.example.com/dist/acme/widget-abcdef1.zip")

    def test_trailing_slash_on_public_uri(self):
        archiver = PackageArchiver(self.out_dir, "https://pkg.example.com/")

        self.assertEqual(
            archiver.dist_url("acme/widget", "abcdef1"),
            "https://pkg.example.com/dist/acme/widget-abcdef1.zip",
        )

    def test_archive_path_derivation(self):
        path = self.archiver.archive_path("acme/widget", "abcdef1")

        self.assertEqual(path, self.out_dir / "dist" / "acme" / "widget-abcdef1.zip")

    def test_creates_archive_with_relative_paths(self):
        result = self.archiver.ensure_archive(self.package_root, "acme/widget", "abcdef1")

        self.assertTrue(result.created)
        self.assertEqual(result.file_count, 4)
        self.assertEqual(result.path, self.out_dir / "dist" / "acme" / "widget-abcdef1.zip")
        self.assertEqual(result.url, "https://pkg.example.com/dist/acme/widget-abcdef1.zip")

        with zipfile.ZipFile(result.path) as zf:
            names = sorted(zf.namelist())
            self.assertEqual(
                names,
                ["README.md", "composer.json", "src/Util/Helper.php", "src/Widget.php"],
            )
            self.assertEqual(zf.read("src/Widget.php"), b"<?php class Widget {}")

    def test_scoped_name_creates_directories(self):
        """Test that intermediate directories are created for scoped names."""
        self.assertFalse(self.out_dir.exists())

        result = self.archiver.ensure_archive(self.package_root, "acme/widget", "abc")

        self.assertTrue((self.out_dir / "dist" / "acme").is_dir())
        self.assertTrue(result.path.is_file())

    def test_second_call_is_cache_hit(self):
        """Test that an existing archive is never rebuilt."""
        with mock.patch.object(
            self.archiver, "_write_archive", wraps=self.archiver._write_archive
        ) as write:
            first = self.archiver.ensure_archive(self.package_root, "acme/widget", "abc")
            second = self.archiver.ensure_archive(self.package_root, "acme/widget", "abc")

        self.assertEqual(write.call_count, 1)
        self.assertTrue(first.created)
        self.assertFalse(second.created)
        self.assertEqual(first.path, second.path)

    def test_cache_hit_ignores_changed_content(self):
        first = self.archiver.ensure_archive(self.package_root, "acme/widget", "abc")
        original = first.path.read_bytes()

        (self.package_root / "NEW.txt").write_text("new")
        self.archiver.ensure_archive(self.package_root, "acme/widget", "abc")

        self.assertEqual(first.path.read_bytes(), original)

    def test_different_commit_builds_new_archive(self):
        self.archiver.ensure_archive(self.package_root, "acme/widget", "abc")
        second = self.archiver.ensure_archive(self.package_root, "acme/widget", "def")

        self.assertTrue(second.created)
        self.assertEqual(len(list((self.out_dir / "dist" / "acme").iterdir())), 2)

    def test_failed_write_leaves_no_archive(self):
        """Test that a failed write does not leave a partial archive."""
        with mock.patch(
            "git_satis.packaging.archiver.zipfile.ZipFile.write",
            side_effect=OSError("No space left on device"),
        ):
            with self.assertRaises(ArchiveError):
                self.archiver.ensure_archive(self.package_root, "acme/widget", "abc")

        self.assertEqual(list((self.out_dir / "dist" / "acme").iterdir()), [])

        result = self.archiver.ensure_archive(self.package_root, "acme/widget", "abc")
        self.assertTrue(result.created)

    def test_exclude_patterns(self):
        archiver = PackageArchiver(
            self.out_dir,
            "https://pkg.example.com",
            ArchiveConfig(exclude_patterns=["*.md", "Util"]),
        )

        result = archiver.ensure_archive(self.package_root, "acme/widget", "abc")

        with zipfile.ZipFile(result.path) as zf:
            self.assertEqual(sorted(zf.namelist()), ["composer.json", "src/Widget.php"])

    def test_stored_compression(self):
        archiver = PackageArchiver(
            self.out_dir, "https://pkg.example.com", ArchiveConfig(compression="stored")
        )

        result = archiver.ensure_archive(self.package_root, "widget", "abc")

        with zipfile.ZipFile(result.path) as zf:
            self.assertTrue(
                all(info.compress_type == zipfile.ZIP_STORED for info in zf.infolist())
            )

    def test_unknown_compression(self):
        with self.assertRaises(ValueError):
            PackageArchiver(self.out_dir, "https://x", ArchiveConfig(compression="lzma9"))

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks not supported")
    def test_broken_symlinks_are_skipped(self):
        os.symlink(self.tmpdir / "nowhere", self.package_root / "dangling")

        result = self.archiver.ensure_archive(self.package_root, "acme/widget", "abc")

        with zipfile.ZipFile(result.path) as zf:
            self.assertNotIn("dangling", zf.namelist())


if __name__ == "__main__":
    unittest.main()
