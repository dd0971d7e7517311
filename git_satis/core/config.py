"""
Configuration management for git-satis.

Provides centralized configuration for all build stages with
sensible defaults, JSON file persistence and environment overrides.
"""

import os
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "GIT_SATIS_"


@dataclass
class GitConfig:
    """Configuration for git operations."""

    # Timeout for a single git command (seconds)
    git_timeout: int = 600

    # Remove untracked files after every checkout
    clean_checkout: bool = True

    # Prefix for the scratch clone directory under the system temp dir
    clone_prefix: str = "git-satis"


@dataclass
class ManifestConfig:
    """Configuration for manifest discovery."""

    filename: str = "composer.json"

    # Descend into symlinked directories (each real directory visited once)
    follow_symlinks: bool = False


@dataclass
class ArchiveConfig:
    """Configuration for package archives."""

    # Directory under the output dir (and the public URI) holding archives
    dist_dir: str = "dist"

    # "deflated" or "stored"
    compression: str = "deflated"

    # fnmatch patterns of files left out of archives
    exclude_patterns: List[str] = field(default_factory=list)


@dataclass
class CatalogConfig:
    """Configuration for the packages.json catalog."""

    filename: str = "packages.json"
    indent: int = 4


@dataclass
class BuildConfig:
    """Master configuration combining all stage configurations."""

    git: GitConfig = field(default_factory=GitConfig)
    manifest: ManifestConfig = field(default_factory=ManifestConfig)
    archive: ArchiveConfig = field(default_factory=ArchiveConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)

    # Enable verbose logging
    verbose: bool = False

    # Abort the run on the first failed checkout
    fail_fast: bool = True

    # Default output directory
    out_dir: str = "out"

    # Optional path for the JSON build report
    report_file: Optional[str] = None


class Config:
    """
    Central configuration manager providing access to all settings.

    Supports loading from environment variables and configuration files.
    """

    _instance: Optional["Config"] = None
    _config: BuildConfig = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._config = BuildConfig()
        return cls._instance

    @classmethod
    def get(cls) -> BuildConfig:
        """Get the current build configuration."""
        if cls._instance is None:
            cls()
        return cls._instance._config

    @classmethod
    def reset(cls) -> BuildConfig:
        """Restore the default configuration."""
        instance = cls()
        instance._config = BuildConfig()
        return instance._config

    @classmethod
    def load_from_file(cls, config_path: str) -> BuildConfig:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file.

        Returns:
            Loaded BuildConfig instance.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r") as f:
            data = json.load(f)

        instance = cls()
        instance._config = cls._dict_to_config(data)
        return instance._config

    @classmethod
    def load_from_env(cls, dotenv_path: Optional[str] = None) -> BuildConfig:
        """
        Load configuration from environment variables.

        Variables are prefixed with GIT_SATIS_. A .env file (dotenv_path, or
        the first found from the working directory upward) is read first;
        variables already present in the environment take precedence.

        Returns:
            BuildConfig with environment overrides applied.
        """
        load_dotenv(dotenv_path or find_dotenv(usecwd=True))

        instance = cls()
        config = instance._config

        if os.getenv(f"{ENV_PREFIX}GIT_TIMEOUT"):
            config.git.git_timeout = int(os.getenv(f"{ENV_PREFIX}GIT_TIMEOUT"))

        if os.getenv(f"{ENV_PREFIX}MANIFEST_FILENAME"):
            config.manifest.filename = os.getenv(f"{ENV_PREFIX}MANIFEST_FILENAME")

        if os.getenv(f"{ENV_PREFIX}DIST_DIR"):
            config.archive.dist_dir = os.getenv(f"{ENV_PREFIX}DIST_DIR")

        if os.getenv(f"{ENV_PREFIX}OUT_DIR"):
            config.out_dir = os.getenv(f"{ENV_PREFIX}OUT_DIR")

        if os.getenv(f"{ENV_PREFIX}FAIL_FAST"):
            config.fail_fast = _is_truthy(os.getenv(f"{ENV_PREFIX}FAIL_FAST"))

        if os.getenv(f"{ENV_PREFIX}VERBOSE"):
            config.verbose = _is_truthy(os.getenv(f"{ENV_PREFIX}VERBOSE"))

        return config

    @staticmethod
    def _dict_to_config(data: dict) -> BuildConfig:
        """Convert a dictionary to BuildConfig."""
        config = BuildConfig()

        if "git" in data:
            config.git = GitConfig(**data["git"])

        if "manifest" in data:
            config.manifest = ManifestConfig(**data["manifest"])

        if "archive" in data:
            config.archive = ArchiveConfig(**data["archive"])

        if "catalog" in data:
            config.catalog = CatalogConfig(**data["catalog"])

        for key in ("verbose", "fail_fast", "out_dir", "report_file"):
            if key in data:
                setattr(config, key, data[key])

        return config

    @classmethod
    def save_to_file(cls, config_path: str) -> None:
        """
        Save current configuration to a JSON file.

        Args:
            config_path: Path to save the configuration file.
        """
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = cls._config_to_dict(cls.get())

        with open(config_path, "w") as f:
            json.dump(data, f, indent=2)

    @staticmethod
    def _config_to_dict(config: BuildConfig) -> dict:
        """Convert BuildConfig to a dictionary."""
        return {
            "git": {
                "git_timeout": config.git.git_timeout,
                "clean_checkout": config.git.clean_checkout,
                "clone_prefix": config.git.clone_prefix,
            },
            "manifest": {
                "filename": config.manifest.filename,
                "follow_symlinks": config.manifest.follow_symlinks,
            },
            "archive": {
                "dist_dir": config.archive.dist_dir,
                "compression": config.archive.compression,
                "exclude_patterns": list(config.archive.exclude_patterns),
            },
            "catalog": {
                "filename": config.catalog.filename,
                "indent": config.catalog.indent,
            },
            "verbose": config.verbose,
            "fail_fast": config.fail_fast,
            "out_dir": config.out_dir,
            "report_file": config.report_file,
        }


def _is_truthy(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")
