"""
The packages.json catalog.

Maps package name -> version -> manifest record with dist info.
Entries only ever accumulate: a run starts from whatever catalog is
already on disk and writes the merged result back.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from git_satis.core.exceptions import CatalogError
from git_satis.core.results import LoadResult, LoadStatus
from git_satis.packaging.manifest import Manifest

logger = logging.getLogger(__name__)

PACKAGES_KEY = "packages"


def read_catalog(path: Path) -> LoadResult[Dict[str, Any]]:
    """
    Read an existing catalog document.

    Returns:
        LoadResult with the parsed document, or why it could not be used.
    """
    path = Path(path)
    if not path.exists():
        return LoadResult.failed(LoadStatus.MISSING, f"{path} does not exist")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        return LoadResult.failed(LoadStatus.MALFORMED, f"invalid JSON: {e}")
    except (OSError, UnicodeDecodeError) as e:
        return LoadResult.failed(LoadStatus.UNREADABLE, str(e))

    if not isinstance(data, dict):
        return LoadResult.failed(LoadStatus.INVALID, "catalog is not a JSON object")

    return LoadResult.loaded(data)


class Catalog:
    """
    In-memory package catalog.

    Top-level keys other than 'packages' found in a loaded document are
    kept and written back untouched.
    """

    def __init__(self, document: Dict[str, Any] = None):
        self.document: Dict[str, Any] = dict(document or {})
        if not isinstance(self.document.get(PACKAGES_KEY), dict):
            if PACKAGES_KEY in self.document:
                logger.warning("Catalog 'packages' entry is not an object, resetting it")
            self.document[PACKAGES_KEY] = {}

    @classmethod
    def load(cls, path: Path) -> "Catalog":
        """
        Load the catalog at path, or start an empty one.

        A missing file is normal on a first run. A file that exists but
        cannot be used is logged as a warning because it will be
        replaced when the catalog is saved.
        """
        result = read_catalog(path)

        if result.ok:
            catalog = cls(result.value)
            logger.info(
                f"Loaded catalog {path}: {len(catalog.packages)} packages, "
                f"{catalog.version_count()} versions"
            )
            return catalog

        if result.status is LoadStatus.MISSING:
            logger.info(f"No existing catalog at {path}, starting empty")
        else:
            logger.warning(
                f"Ignoring existing catalog {path} ({result.status.value}: "
                f"{result.reason}); it will be overwritten"
            )
        return cls()

    @property
    def packages(self) -> Dict[str, Dict[str, Any]]:
        return self.document[PACKAGES_KEY]

    def package_names(self) -> List[str]:
        return list(self.packages.keys())

    def versions(self, package_name: str) -> Dict[str, Any]:
        """Version -> record mapping for a package (empty if unknown)."""
        return self.packages.get(package_name, {})

    def version_count(self) -> int:
        return sum(
            len(versions) for versions in self.packages.values()
            if isinstance(versions, dict)
        )

    def upsert(self, manifest: Manifest, version: str, dist_url: str) -> Dict[str, Any]:
        """
        Insert or replace the record for a package version.

        Returns:
            The stored record.
        """
        versions = self.packages.get(manifest.name)
        if not isinstance(versions, dict):
            versions = {}
            self.packages[manifest.name] = versions

        record = manifest.to_record(version, dist_url)
        versions[version] = record
        return record

    def to_dict(self) -> Dict[str, Any]:
        return self.document

    def save(self, path: Path, indent: int = 4) -> None:
        """
        Write the whole catalog, replacing any previous file.

        Raises:
            CatalogError: If the file cannot be written.
        """
        path = Path(path)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self.document, f, indent=indent)
                f.write("\n")
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise CatalogError(
                f"Cannot write catalog {path}: {e}", details={"path": str(path)}
            ) from e

        logger.info(f"Catalog saved to {path}")
