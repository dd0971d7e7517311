"""
Reference enumeration.

Turns the tags and remote branches of a clone into References
carrying the catalog-facing version label.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, List

logger = logging.getLogger(__name__)

BRANCH_VERSION_PREFIX = "dev-"


class RefKind(Enum):
    """Kind of git reference."""
    TAG = "tag"
    BRANCH = "branch"


def branch_version_label(branch_name: str) -> str:
    """
    Map a remote branch to its version label.

    The remote segment is dropped: 'origin/feature-x' -> 'dev-feature-x'.
    """
    _, sep, branch = branch_name.partition("/")
    return BRANCH_VERSION_PREFIX + (branch if sep else branch_name)


@dataclass(frozen=True)
class Reference:
    """A named pointer to a commit, with its catalog version label."""

    name: str
    version_label: str
    commit_hash: str
    kind: RefKind

    @classmethod
    def from_tag(cls, name: str, commit_hash: str) -> "Reference":
        return cls(name=name, version_label=name, commit_hash=commit_hash, kind=RefKind.TAG)

    @classmethod
    def from_branch(cls, name: str, commit_hash: str) -> "Reference":
        return cls(
            name=name,
            version_label=branch_version_label(name),
            commit_hash=commit_hash,
            kind=RefKind.BRANCH,
        )


class ReferenceEnumerator:
    """
    Lists the references of a cloned repository.

    Iteration yields all tags, then all remote branches, in the order
    git reports them. Tags and branches sharing a version label are
    both kept.
    """

    def __init__(self, git_handler, repo_path: Path):
        self.git_handler = git_handler
        self.repo_path = Path(repo_path)

    def tags(self) -> List[Reference]:
        return [
            Reference.from_tag(name, commit)
            for name, commit in self.git_handler.list_tags(self.repo_path)
        ]

    def branches(self) -> List[Reference]:
        return [
            Reference.from_branch(name, commit)
            for name, commit in self.git_handler.list_remote_branches(self.repo_path)
        ]

    def __iter__(self) -> Iterator[Reference]:
        tags = self.tags()
        branches = self.branches()
        logger.info(f"Found {len(tags)} tags and {len(branches)} remote branches")
        yield from tags
        yield from branches
