"""
Package manifest discovery and parsing.

Finds composer.json files anywhere in a checked-out tree and reads
them into Manifests. Unusable manifests come back as non-OK
LoadResults; they never raise.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterator, Set, Tuple

from git_satis.core.results import LoadResult, LoadStatus

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "composer.json"


@dataclass
class Manifest:
    """A package descriptor found inside a checked-out tree."""

    name: str
    fields: Dict[str, Any] = field(default_factory=dict)
    path: Path = None

    @property
    def root_path(self) -> Path:
        """Directory whose contents make up the package."""
        return self.path.parent

    def to_record(self, version: str, dist_url: str) -> Dict[str, Any]:
        """Catalog entry for this manifest at a given version."""
        record = dict(self.fields)
        record["version"] = version
        record["dist"] = {
            "url": dist_url,
            "type": "zip",
        }
        return record


def is_safe_package_name(name: str) -> bool:
    """
    Check that a package name stays inside the dist directory.

    Scoped names like 'acme/widget' are fine; absolute paths,
    backslashes and '..' segments are not.
    """
    if not name or "\\" in name or "\x00" in name:
        return False
    path = PurePosixPath(name)
    if path.is_absolute():
        return False
    return all(part not in ("", ".", "..") for part in name.split("/"))


def read_manifest(path: Path) -> LoadResult[Manifest]:
    """
    Read a manifest file.

    Args:
        path: Path to a composer.json file.

    Returns:
        LoadResult holding the Manifest, or the reason it was rejected.
    """
    path = Path(path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        return LoadResult.failed(LoadStatus.MALFORMED, f"invalid JSON: {e}")
    except (OSError, UnicodeDecodeError) as e:
        return LoadResult.failed(LoadStatus.UNREADABLE, str(e))

    if not isinstance(data, dict):
        return LoadResult.failed(LoadStatus.INVALID, "manifest is not a JSON object")

    name = data.get("name")
    if not isinstance(name, str) or not name:
        return LoadResult.failed(LoadStatus.INVALID, "manifest has no name")

    if not is_safe_package_name(name):
        return LoadResult.failed(LoadStatus.INVALID, f"unsafe package name: {name!r}")

    return LoadResult.loaded(Manifest(name=name, fields=data, path=Path(os.path.abspath(path))))


class ManifestLocator:
    """
    Lazily finds manifest files below a root directory.

    Every iteration walks the tree again, depth-first, with entries in
    sorted order. Nothing is excluded, '.git' included. Symlinked
    directories are skipped unless follow_symlinks is set, in which
    case each real directory is entered at most once so symlink
    cycles terminate.
    """

    def __init__(
        self,
        root: Path,
        filename: str = MANIFEST_FILENAME,
        follow_symlinks: bool = False,
    ):
        self.root = Path(root).resolve()
        self.filename = filename
        self.follow_symlinks = follow_symlinks

    def __iter__(self) -> Iterator[Path]:
        visited: Set[Tuple[int, int]] = set()

        for dirpath, dirnames, filenames in os.walk(
            self.root, followlinks=self.follow_symlinks
        ):
            if self.follow_symlinks:
                key = self._dir_key(dirpath)
                if key in visited:
                    dirnames[:] = []
                    continue
                visited.add(key)

            dirnames.sort()

            for filename in sorted(filenames):
                if filename != self.filename:
                    continue
                candidate = Path(dirpath) / filename
                if candidate.is_dir():
                    continue
                yield candidate

    @staticmethod
    def _dir_key(dirpath: str) -> Tuple[int, int]:
        stat = os.stat(dirpath)
        return stat.st_dev, stat.st_ino

    def manifests(self) -> Iterator[Tuple[Path, LoadResult[Manifest]]]:
        """Yield each manifest path together with its parse result."""
        for path in self:
            logger.debug(f"Found manifest: {path}")
            yield path, read_manifest(path)
