"""
Main builder for git-satis.

Wires the reference enumerator, snapshot materializer, manifest
locator, archiver and catalog into a single build run.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional

from git_satis.catalog.catalog import Catalog
from git_satis.core.config import BuildConfig, Config
from git_satis.core.exceptions import ArgumentValidationError, BuildError, CheckoutError
from git_satis.core.pipeline import BuildState, RefResult
from git_satis.packaging.archiver import PackageArchiver
from git_satis.packaging.manifest import ManifestLocator
from git_satis.repository.git_handler import GitHandler, redact_credentials
from git_satis.repository.references import ReferenceEnumerator
from git_satis.repository.snapshot import Snapshot, SnapshotMaterializer
from git_satis.utils.validation import validate_public_uri, validate_repo_uri

logger = logging.getLogger(__name__)


class SatisBuilder:
    """
    Builds a static Composer repository from a git remote.

    The catalog is loaded once before the references are processed and
    saved once after all of them succeeded. References are processed
    strictly one after another since they share one working tree.
    """

    def __init__(self, config: BuildConfig = None, git_handler: GitHandler = None):
        self.config = config or Config.get()
        self.git_handler = git_handler or GitHandler(self.config.git)

    def build(
        self,
        repo_uri: str,
        public_uri: str,
        out_dir: Optional[Path] = None,
    ) -> BuildState:
        """
        Clone a repository and build its archives and catalog.

        Args:
            repo_uri: Repository URI, including any credentials.
            public_uri: Base URL the output directory is served from.
            out_dir: Output directory; defaults to the configured one.

        Returns:
            Final build state.
        """
        for argument, validate, value in (
            ("repository URI", validate_repo_uri, repo_uri),
            ("public URI", validate_public_uri, public_uri),
        ):
            is_valid, error = validate(value)
            if not is_valid:
                raise ArgumentValidationError(argument, error)

        out_dir = Path(out_dir or self.config.out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)

        clone_dir = self.git_handler.create_clone_dir()
        try:
            repo_path = self.git_handler.clone_repository(repo_uri, clone_dir)
            return self.build_from_clone(repo_path, public_uri, out_dir, repo_uri=repo_uri)
        finally:
            self.git_handler.cleanup_clone(clone_dir)

    def build_from_clone(
        self,
        repo_path: Path,
        public_uri: str,
        out_dir: Path,
        repo_uri: str = "",
    ) -> BuildState:
        """
        Build archives and catalog from an existing clone.

        Raises:
            CheckoutError: If a reference cannot be checked out and
                fail_fast is set.
            BuildError: On any other infrastructure failure.
        """
        out_dir = Path(out_dir)
        state = BuildState(
            build_id=str(uuid.uuid4())[:8],
            repo_uri=redact_credentials(repo_uri),
            out_dir=str(out_dir),
        )
        logger.info(f"Starting build {state.build_id}")

        catalog_path = out_dir / self.config.catalog.filename
        catalog = Catalog.load(catalog_path)
        archiver = PackageArchiver(out_dir, public_uri, self.config.archive)
        enumerator = ReferenceEnumerator(self.git_handler, repo_path)
        materializer = SnapshotMaterializer(self.git_handler, repo_path)

        try:
            for reference in enumerator:
                result = state.record_ref_start(
                    reference.name, reference.version_label, reference.commit_hash
                )

                try:
                    snapshot = materializer.materialize(reference)
                except CheckoutError as e:
                    state.record_ref_failure(reference.name, str(e))
                    if self.config.fail_fast:
                        raise
                    logger.warning(f"Skipping {reference.name}: {e}")
                    continue

                try:
                    self.process_snapshot(snapshot, catalog, archiver, result)
                except BuildError as e:
                    state.record_ref_failure(reference.name, str(e))
                    raise

                state.record_ref_completion(reference.name)

            catalog.save(catalog_path, indent=self.config.catalog.indent)
        finally:
            if self.config.report_file:
                state.save(Path(self.config.report_file))

        logger.info(f"Build {state.build_id} finished: {state.summary()}")
        return state

    def process_snapshot(
        self,
        snapshot: Snapshot,
        catalog: Catalog,
        archiver: PackageArchiver,
        result: RefResult,
    ) -> None:
        """Archive every valid manifest of a snapshot and record it in the catalog."""
        locator = ManifestLocator(
            snapshot.root,
            filename=self.config.manifest.filename,
            follow_symlinks=self.config.manifest.follow_symlinks,
        )

        for path, loaded in locator.manifests():
            if not loaded.ok:
                result.manifests_skipped += 1
                logger.debug(f"Skipping manifest {path}: {loaded.reason}")
                continue

            manifest = loaded.value
            archive = archiver.ensure_archive(
                manifest.root_path, manifest.name, snapshot.commit_hash
            )
            if archive.created:
                result.archives_created += 1
            else:
                result.archives_cached += 1

            catalog.upsert(manifest, snapshot.version, archive.url)
            result.packages.append(manifest.name)
            logger.info(f"Added {manifest.name} {snapshot.version}")
