"""
Tagged load results.

Reading a manifest or an existing catalog never raises for bad input;
the caller gets a LoadResult and decides explicitly what a non-OK
status means.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class LoadStatus(Enum):
    """Outcome of reading a JSON document from disk."""
    OK = "ok"
    MISSING = "missing"
    UNREADABLE = "unreadable"
    MALFORMED = "malformed"
    INVALID = "invalid"


@dataclass
class LoadResult(Generic[T]):
    """Either a loaded value or the reason nothing was loaded."""

    status: LoadStatus
    value: Optional[T] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is LoadStatus.OK

    @classmethod
    def loaded(cls, value: T) -> "LoadResult[T]":
        return cls(status=LoadStatus.OK, value=value)

    @classmethod
    def failed(cls, status: LoadStatus, reason: str) -> "LoadResult[T]":
        return cls(status=status, reason=reason)
