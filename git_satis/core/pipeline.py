"""
Build state tracking for git-satis.

Records the outcome of every reference processed in a run, with
serialization support so a run can be inspected afterwards.
"""

import logging
import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class RefStatus(Enum):
    """Status of a reference within a build."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RefResult:
    """Result of processing a single reference."""

    ref_name: str
    version: str
    commit_hash: str
    status: RefStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    packages: List[str] = field(default_factory=list)
    archives_created: int = 0
    archives_cached: int = 0
    manifests_skipped: int = 0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "ref_name": self.ref_name,
            "version": self.version,
            "commit_hash": self.commit_hash,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "packages": self.packages,
            "archives_created": self.archives_created,
            "archives_cached": self.archives_cached,
            "manifests_skipped": self.manifests_skipped,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RefResult":
        """Create from dictionary."""
        return cls(
            ref_name=data["ref_name"],
            version=data["version"],
            commit_hash=data["commit_hash"],
            status=RefStatus(data["status"]),
            started_at=datetime.fromisoformat(data["started_at"]),
            completed_at=(
                datetime.fromisoformat(data["completed_at"])
                if data.get("completed_at")
                else None
            ),
            packages=list(data.get("packages", [])),
            archives_created=data.get("archives_created", 0),
            archives_cached=data.get("archives_cached", 0),
            manifests_skipped=data.get("manifests_skipped", 0),
            error=data.get("error"),
        )


@dataclass
class BuildState:
    """
    Maintains the complete state of a build run.

    One RefResult per reference, keyed by reference name.
    """

    build_id: str
    repo_uri: str
    out_dir: str
    created_at: datetime = field(default_factory=datetime.now)
    ref_results: Dict[str, RefResult] = field(default_factory=dict)
    current_ref: Optional[str] = None

    def get_ref_status(self, ref_name: str) -> RefStatus:
        """Get the status of a specific reference."""
        if ref_name in self.ref_results:
            return self.ref_results[ref_name].status
        return RefStatus.PENDING

    def record_ref_start(self, ref_name: str, version: str, commit_hash: str) -> RefResult:
        """Record that processing of a reference has started."""
        self.current_ref = ref_name
        result = RefResult(
            ref_name=ref_name,
            version=version,
            commit_hash=commit_hash,
            status=RefStatus.RUNNING,
            started_at=datetime.now(),
        )
        self.ref_results[ref_name] = result
        return result

    def record_ref_completion(self, ref_name: str) -> None:
        """Record that a reference has been fully processed."""
        if ref_name in self.ref_results:
            result = self.ref_results[ref_name]
            result.status = RefStatus.COMPLETED
            result.completed_at = datetime.now()

    def record_ref_failure(self, ref_name: str, error: str) -> None:
        """Record that a reference has failed."""
        if ref_name in self.ref_results:
            result = self.ref_results[ref_name]
            result.status = RefStatus.FAILED
            result.completed_at = datetime.now()
            result.error = error

    @property
    def failed_refs(self) -> List[str]:
        return [
            name for name, result in self.ref_results.items()
            if result.status == RefStatus.FAILED
        ]

    def summary(self) -> Dict[str, int]:
        """Aggregate counters over all references."""
        results = self.ref_results.values()
        return {
            "refs_total": len(self.ref_results),
            "refs_completed": sum(1 for r in results if r.status == RefStatus.COMPLETED),
            "refs_failed": sum(1 for r in results if r.status == RefStatus.FAILED),
            "package_versions": sum(len(r.packages) for r in results),
            "archives_created": sum(r.archives_created for r in results),
            "archives_cached": sum(r.archives_cached for r in results),
            "manifests_skipped": sum(r.manifests_skipped for r in results),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to dictionary for serialization."""
        return {
            "build_id": self.build_id,
            "repo_uri": self.repo_uri,
            "out_dir": self.out_dir,
            "created_at": self.created_at.isoformat(),
            "current_ref": self.current_ref,
            "summary": self.summary(),
            "ref_results": {
                name: result.to_dict()
                for name, result in self.ref_results.items()
            },
        }

    def save(self, path: Path) -> None:
        """Save the build report to a file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug(f"Build report saved to {path}")

    @classmethod
    def load(cls, path: Path) -> "BuildState":
        """Load a build report from file."""
        with open(path, "r") as f:
            data = json.load(f)

        state = cls(
            build_id=data["build_id"],
            repo_uri=data["repo_uri"],
            out_dir=data["out_dir"],
            created_at=datetime.fromisoformat(data["created_at"]),
            current_ref=data.get("current_ref"),
        )

        for name, result_data in data.get("ref_results", {}).items():
            state.ref_results[name] = RefResult.from_dict(result_data)

        return state
