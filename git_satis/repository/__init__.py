"""
Repository access: cloning, reference enumeration and checkouts.
"""

from git_satis.repository.git_handler import GitHandler
from git_satis.repository.references import (
    Reference,
    ReferenceEnumerator,
    RefKind,
    branch_version_label,
)
from git_satis.repository.snapshot import Snapshot, SnapshotMaterializer

__all__ = [
    "GitHandler",
    "Reference",
    "ReferenceEnumerator",
    "RefKind",
    "branch_version_label",
    "Snapshot",
    "SnapshotMaterializer",
]
