"""
Git operations handler.

Provides cloning, reference listing and checkout on top of the
git command-line client.
"""

import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple, Type
from urllib.parse import urlsplit, urlunsplit

from git_satis.core.config import GitConfig
from git_satis.core.exceptions import (
    CheckoutError,
    CloneError,
    ReferenceListError,
    RepositoryError,
)

logger = logging.getLogger(__name__)

TAGS_NAMESPACE = "refs/tags/"
REMOTES_NAMESPACE = "refs/remotes/"

# name, object, peeled object (annotated tags only), symref target
REF_FORMAT = "%(refname)%09%(objectname)%09%(*objectname)%09%(symref)"


def redact_credentials(value: str) -> str:
    """Mask the password of a URL with embedded credentials."""
    parts = urlsplit(value)
    if not parts.scheme or parts.password is None:
        return value
    netloc = f"{parts.username}:***@{parts.hostname}"
    if parts.port:
        netloc += f":{parts.port}"
    return urlunsplit(parts._replace(netloc=netloc))


class GitHandler:
    """
    Handles git operations against a single local clone.

    Every command runs with the configured timeout; a non-zero exit
    status is raised as a RepositoryError subclass.
    """

    def __init__(self, config: GitConfig = None):
        self.config = config or GitConfig()
        self._git_available = self._check_git_available()

    def _check_git_available(self) -> bool:
        """Check if git is available on the system."""
        try:
            result = subprocess.run(
                ["git", "--version"],
                capture_output=True,
                text=True,
                timeout=10,
            )
            return result.returncode == 0
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return False

    def _run(
        self,
        args: List[str],
        cwd: Optional[Path] = None,
        error_cls: Type[RepositoryError] = RepositoryError,
    ) -> str:
        """Run a git command and return its stdout."""
        cmd = ["git"] + args
        logger.debug(f"Running: {' '.join(redact_credentials(a) for a in cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=cwd,
                timeout=self.config.git_timeout,
            )
        except subprocess.TimeoutExpired:
            raise error_cls(
                f"git {args[0]} timed out after {self.config.git_timeout} seconds",
                details={"command": args},
            )
        except FileNotFoundError:
            raise error_cls("Git is not available on this system")

        if result.returncode != 0:
            raise error_cls(
                f"git {args[0]} failed: {result.stderr.strip()}",
                details={
                    "command": args,
                    "returncode": result.returncode,
                    "stderr": result.stderr,
                },
            )

        return result.stdout

    def create_clone_dir(self) -> Path:
        """Create an empty scratch directory for the clone."""
        return Path(tempfile.mkdtemp(prefix=self.config.clone_prefix))

    def clone_repository(self, url: str, target_dir: Optional[Path] = None) -> Path:
        """
        Clone a git repository with its full history.

        Args:
            url: Repository URI, including any credentials.
            target_dir: Empty directory to clone into. A temporary
                directory is created if not specified.

        Returns:
            Path to the working tree of the clone.

        Raises:
            CloneError: If cloning fails.
        """
        if not self._git_available:
            raise CloneError("Git is not available on this system")

        if target_dir is None:
            target_dir = self.create_clone_dir()

        logger.info("Cloning repository")
        self._run(["clone", "--quiet", url, str(target_dir)], error_cls=CloneError)
        logger.info(f"Repository cloned to: {target_dir}")
        return Path(target_dir)

    def _list_refs(self, repo_path: Path, namespace: str) -> List[Tuple[str, str]]:
        output = self._run(
            ["for-each-ref", f"--format={REF_FORMAT}", namespace.rstrip("/")],
            cwd=repo_path,
            error_cls=ReferenceListError,
        )

        refs = []
        for line in output.splitlines():
            if not line.strip():
                continue
            refname, objectname, peeled, symref = (line.split("\t") + ["", "", ""])[:4]
            if symref:
                # origin/HEAD and friends point at another ref
                continue
            refs.append((refname[len(namespace):], peeled or objectname))
        return refs

    def list_tags(self, repo_path: Path) -> List[Tuple[str, str]]:
        """
        List tags as (name, commit hash) pairs.

        Annotated tags are peeled to the commit they point at.
        """
        return self._list_refs(repo_path, TAGS_NAMESPACE)

    def list_remote_branches(self, repo_path: Path) -> List[Tuple[str, str]]:
        """List remote-tracking branches as (name, commit hash) pairs, e.g. 'origin/main'."""
        return self._list_refs(repo_path, REMOTES_NAMESPACE)

    def checkout(self, repo_path: Path, revision: str) -> None:
        """
        Switch the working tree to a revision, discarding local state.

        Raises:
            CheckoutError: If the revision cannot be checked out.
        """
        try:
            self._run(
                ["checkout", "--quiet", "--force", "--detach", revision],
                cwd=repo_path,
            )
            if self.config.clean_checkout:
                self._run(["clean", "--quiet", "-ffdx"], cwd=repo_path)
        except RepositoryError as e:
            raise CheckoutError(revision, e.details.get("stderr", str(e)).strip()) from e

    def resolve_commit(self, repo_path: Path, revision: str) -> str:
        """Resolve a revision to its commit hash."""
        output = self._run(
            ["rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}"],
            cwd=repo_path,
        )
        return output.strip()

    def cleanup_clone(self, clone_path: Path) -> None:
        """
        Remove a cloned repository.

        Args:
            clone_path: Path to the cloned repository.
        """
        if clone_path.exists():
            try:
                shutil.rmtree(clone_path)
                logger.debug(f"Cleaned up clone: {clone_path}")
            except OSError as e:
                logger.warning(f"Failed to cleanup clone {clone_path}: {e}")
