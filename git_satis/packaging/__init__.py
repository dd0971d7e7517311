"""
Manifest discovery and package archiving.
"""

from git_satis.packaging.manifest import (
    Manifest,
    ManifestLocator,
    is_safe_package_name,
    read_manifest,
)
from git_satis.packaging.archiver import ArchiveResult, PackageArchiver

__all__ = [
    "Manifest",
    "ManifestLocator",
    "is_safe_package_name",
    "read_manifest",
    "ArchiveResult",
    "PackageArchiver",
]
