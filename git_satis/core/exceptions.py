"""
Custom exceptions for git-satis.

Provides a hierarchy of exceptions for the different build stages,
enabling precise error handling and clear failure reporting.
"""


class BuildError(Exception):
    """Base exception for all build-related errors."""

    def __init__(self, message: str, stage: str = None, details: dict = None):
        super().__init__(message)
        self.stage = stage
        self.details = details or {}

    def __str__(self):
        base_msg = super().__str__()
        if self.stage:
            return f"[{self.stage}] {base_msg}"
        return base_msg


class ArgumentValidationError(BuildError):
    """Raised when command-line arguments are invalid."""

    def __init__(self, argument: str, reason: str):
        super().__init__(
            f"Invalid {argument}: {reason}",
            stage="Arguments",
            details={"argument": argument, "reason": reason},
        )


class RepositoryError(BuildError):
    """Raised when a git operation fails."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Repository", details=details)


class CloneError(RepositoryError):
    """Raised when the source repository cannot be cloned."""


class ReferenceListError(RepositoryError):
    """Raised when tags or remote branches cannot be listed."""


class CheckoutError(RepositoryError):
    """Raised when a reference cannot be checked out."""

    def __init__(self, revision: str, reason: str):
        super().__init__(
            f"Checkout of '{revision}' failed: {reason}",
            details={"revision": revision, "reason": reason},
        )
        self.revision = revision


class ArchiveError(BuildError):
    """Raised when a package archive cannot be written."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Archive", details=details)


class CatalogError(BuildError):
    """Raised when the catalog cannot be written."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Catalog", details=details)
