"""
Core module containing configuration, build state and exceptions.
"""

from git_satis.core.config import (
    Config,
    BuildConfig,
    GitConfig,
    ManifestConfig,
    ArchiveConfig,
    CatalogConfig,
)
from git_satis.core.pipeline import BuildState, RefResult, RefStatus
from git_satis.core.results import LoadResult, LoadStatus
from git_satis.core.exceptions import (
    BuildError,
    ArgumentValidationError,
    RepositoryError,
    CloneError,
    ReferenceListError,
    CheckoutError,
    ArchiveError,
    CatalogError,
)

__all__ = [
    "Config",
    "BuildConfig",
    "GitConfig",
    "ManifestConfig",
    "ArchiveConfig",
    "CatalogConfig",
    "BuildState",
    "RefResult",
    "RefStatus",
    "LoadResult",
    "LoadStatus",
    "BuildError",
    "ArgumentValidationError",
    "RepositoryError",
    "CloneError",
    "ReferenceListError",
    "CheckoutError",
    "ArchiveError",
    "CatalogError",
]
