"""
Utility functions and helpers.

Provides common utilities used across the codebase.
"""

from git_satis.utils.logging_config import setup_logging
from git_satis.utils.validation import (
    validate_out_dir,
    validate_public_uri,
    validate_repo_uri,
)

__all__ = [
    "setup_logging",
    "validate_out_dir",
    "validate_public_uri",
    "validate_repo_uri",
]
