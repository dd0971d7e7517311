"""
Snapshot materialization.

A clone has a single working tree, so only one reference can be on
disk at a time. The materializer switches the tree and hands back a
Snapshot naming what is checked out where.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from git_satis.repository.references import Reference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """The content of one reference, materialized at root."""

    reference: Reference
    root: Path

    @property
    def commit_hash(self) -> str:
        return self.reference.commit_hash

    @property
    def version(self) -> str:
        return self.reference.version_label


class SnapshotMaterializer:
    """Checks out references into the shared working tree of a clone."""

    def __init__(self, git_handler, repo_path: Path):
        self.git_handler = git_handler
        self.repo_path = Path(repo_path)

    def materialize(self, reference: Reference) -> Snapshot:
        """
        Destructively switch the working tree to a reference.

        The enumerated commit is checked out rather than the short ref
        name, which can resolve to a different ref in the clone.
        Any Snapshot returned earlier is invalid once this is called.

        Raises:
            CheckoutError: If the reference cannot be checked out.
        """
        logger.info(f"Checking out {reference.name} ({reference.commit_hash[:12]})")
        self.git_handler.checkout(self.repo_path, reference.commit_hash)
        return Snapshot(reference=reference, root=self.repo_path)
