"""
Package archive creation.

Builds one zip per (package name, commit hash). The archive path is
derived from that pair alone, so an existing file is a cache hit and
is never rebuilt or verified.
"""

import fnmatch
import logging
import os
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Tuple

from git_satis.core.config import ArchiveConfig
from git_satis.core.exceptions import ArchiveError

logger = logging.getLogger(__name__)

COMPRESSION_METHODS = {
    "deflated": zipfile.ZIP_DEFLATED,
    "stored": zipfile.ZIP_STORED,
}

ARCHIVE_MODE = 0o644


@dataclass
class ArchiveResult:
    """Location of a package archive and whether this call created it."""

    package_name: str
    commit_hash: str
    path: Path
    url: str
    created: bool
    file_count: int = 0


class PackageArchiver:
    """
    Creates package archives under <out_dir>/<dist_dir>/.

    Archives are written to a temporary file next to their final path
    and renamed into place once complete, so an interrupted run never
    leaves a truncated archive behind to be mistaken for a cache hit.
    """

    def __init__(self, out_dir: Path, public_uri: str, config: ArchiveConfig = None):
        self.config = config or ArchiveConfig()
        self.out_dir = Path(out_dir)
        self.public_uri = public_uri[:-1] if public_uri.endswith("/") else public_uri

        if self.config.compression not in COMPRESSION_METHODS:
            raise ValueError(f"Unknown compression: {self.config.compression}")
        self.compression = COMPRESSION_METHODS[self.config.compression]

    @property
    def dist_dir(self) -> Path:
        return self.out_dir / self.config.dist_dir

    @staticmethod
    def archive_name(package_name: str, commit_hash: str) -> str:
        return f"{package_name}-{commit_hash}.zip"

    def archive_path(self, package_name: str, commit_hash: str) -> Path:
        """Filesystem path of the archive for a package at a commit."""
        return self.dist_dir / self.archive_name(package_name, commit_hash)

    def dist_url(self, package_name: str, commit_hash: str) -> str:
        """Public download URL of the archive for a package at a commit."""
        return (
            f"{self.public_uri}/{self.config.dist_dir}/"
            f"{self.archive_name(package_name, commit_hash)}"
        )

    def ensure_archive(
        self, package_root: Path, package_name: str, commit_hash: str
    ) -> ArchiveResult:
        """
        Make sure the archive for a package at a commit exists.

        Args:
            package_root: Directory holding the package manifest.
            package_name: Package name, possibly scoped ('vendor/name').
            commit_hash: Commit the package content was taken from.

        Returns:
            ArchiveResult; created is False on a cache hit.

        Raises:
            ArchiveError: If the archive cannot be written.
        """
        path = self.archive_path(package_name, commit_hash)
        url = self.dist_url(package_name, commit_hash)

        if path.exists():
            logger.debug(f"Archive cached: {path}")
            return ArchiveResult(package_name, commit_hash, path, url, created=False)

        file_count = self._write_archive(Path(package_root), path)
        logger.info(f"Created archive {path} ({file_count} files)")
        return ArchiveResult(
            package_name, commit_hash, path, url, created=True, file_count=file_count
        )

    def _write_archive(self, package_root: Path, path: Path) -> int:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
            )
            os.close(fd)
        except OSError as e:
            raise ArchiveError(
                f"Cannot prepare archive {path}: {e}", details={"path": str(path)}
            ) from e

        tmp_path = Path(tmp_name)
        file_count = 0
        try:
            with zipfile.ZipFile(
                tmp_path, "w", self.compression, strict_timestamps=False
            ) as zf:
                for file_path, arcname in self.iter_package_files(package_root):
                    zf.write(file_path, arcname)
                    file_count += 1
            os.chmod(tmp_path, ARCHIVE_MODE)
            os.replace(tmp_path, path)
        except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            _unlink_quietly(tmp_path)
            raise ArchiveError(
                f"Cannot write archive {path}: {e}",
                details={"path": str(path), "package_root": str(package_root)},
            ) from e
        except BaseException:
            _unlink_quietly(tmp_path)
            raise

        return file_count

    def iter_package_files(self, package_root: Path) -> Iterator[Tuple[Path, str]]:
        """
        Yield (file path, archive name) for every file below package_root.

        Archive names are POSIX paths relative to package_root. Broken
        symlinks are skipped and symlinked directories are not entered.
        """
        patterns = self.config.exclude_patterns

        for dirpath, dirnames, filenames in os.walk(package_root):
            dirnames.sort()
            for filename in sorted(filenames):
                file_path = Path(dirpath) / filename
                if file_path.is_dir() or not file_path.exists():
                    continue
                arcname = file_path.relative_to(package_root).as_posix()
                if patterns and _is_excluded(arcname, patterns):
                    continue
                yield file_path, arcname


def _is_excluded(arcname: str, patterns: List[str]) -> bool:
    parts = arcname.split("/")
    for pattern in patterns:
        if fnmatch.fnmatch(arcname, pattern):
            return True
        if any(fnmatch.fnmatch(part, pattern) for part in parts):
            return True
    return False


def _unlink_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to remove temporary archive {path}: {e}")
