"""Domain exceptions shared across envbaker."""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class CopyErrorKind(str, Enum):
    """Classification of a failed copy unit."""

    SOURCE_UNREADABLE = "source_unreadable"
    DESTINATION_WRITE_FAILED = "destination_write_failed"
    IO_FAILURE = "io_failure"


class CopyError(Exception):
    """Raised when a tree copy into a single destination fails.

    Attributes:
        kind: Failure classification
        path: The source or destination path that failed
        cause: Underlying exception, if any
    """

    def __init__(
        self, kind: CopyErrorKind, path: Path | str, cause: BaseException | None = None
    ) -> None:
        self.kind = kind
        self.path = Path(path)
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{kind.value} at {self.path}{detail}")


class WorkspaceError(Exception):
    """Raised when the solution workspace cannot be planned or created."""


class SettingsError(Exception):
    """Raised when configuration cannot be loaded."""
