"""
Walker error types and their classification.

A root that fails to open is either a leaf (report it as a single result),
missing (report, remember, carry on with the other roots) or broken in some
other way, which ends the whole run.
"""

import enum
from typing import Optional

from .models import Entry


class WalkerError(Exception):
    """Base class for errors reported by the walker for a root path."""

    def __init__(self, path: str, message: Optional[str] = None):
        super().__init__(message or path)
        self.path = path


class InvalidDirectoryError(WalkerError):
    """The path is a valid entry but cannot be listed as a directory."""

    def __init__(self, path: str, entry: Optional[Entry] = None):
        super().__init__(path, f"Not a directory: {path}")
        self.entry = entry


class NotFoundError(WalkerError):
    """The path does not exist."""

    def __init__(self, path: str):
        super().__init__(path, f"No such file or directory: {path}")


class ErrorClass(enum.Enum):
    LEAF_ROOT = "leaf-root"
    MISSING_ROOT = "missing-root"
    FATAL = "fatal"


def classify_error(error: BaseException) -> ErrorClass:
    """Decide how the orchestrator should react to a root's error."""
    if isinstance(error, InvalidDirectoryError):
        return ErrorClass.LEAF_ROOT
    if isinstance(error, NotFoundError):
        return ErrorClass.MISSING_ROOT
    return ErrorClass.FATAL
