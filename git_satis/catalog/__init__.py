"""
Package catalog (packages.json) loading, merging and persistence.
"""

from git_satis.catalog.catalog import Catalog, read_catalog

__all__ = [
    "Catalog",
    "read_catalog",
]
