"""
Input validation utilities.

Validates the repository URI, public URI and output directory
given on the command line.
"""

import os
import re
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import urlparse

REPO_URL_SCHEMES = ("http", "https", "git", "ssh", "file")
PUBLIC_URL_SCHEMES = ("http", "https")

# user@host:path/to/repo.git
SCP_LIKE_PATTERN = re.compile(r"^[\w.-]+@[\w.-]+:.+$")


def validate_repo_uri(uri: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a repository URI.

    Args:
        uri: URL, scp-style address or local path of the repository.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not isinstance(uri, str) or not uri.strip():
        return False, "Repository URI must be a non-empty string"

    parsed = urlparse(uri)
    if parsed.scheme in REPO_URL_SCHEMES:
        if parsed.scheme == "file" or parsed.netloc:
            return True, None
        return False, f"Repository URI has no host: {uri}"

    if SCP_LIKE_PATTERN.match(uri):
        return True, None

    if Path(uri).is_dir():
        return True, None

    return False, f"Unsupported repository URI: {uri}"


def validate_public_uri(uri: str) -> Tuple[bool, Optional[str]]:
    """
    Validate the public base URI archives are served from.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not isinstance(uri, str) or not uri.strip():
        return False, "Public URI must be a non-empty string"

    parsed = urlparse(uri)
    if parsed.scheme not in PUBLIC_URL_SCHEMES or not parsed.netloc:
        return False, f"Public URI must be an http(s) URL: {uri}"

    return True, None


def validate_out_dir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Validate the output directory path.

    The directory may not exist yet; it must not be a regular file.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not isinstance(path, str) or not path.strip():
        return False, "Output directory path must be a non-empty string"

    if os.path.exists(path) and not os.path.isdir(path):
        return False, f"Output path is not a directory: {path}"

    return True, None
