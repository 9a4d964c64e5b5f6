"""Error taxonomy for reference tracking.

All errors are terminal for the reference being tracked: nothing is retried
inside the library. Batch callers catch TrackingError per reference and keep
going with the rest.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reftracker.domain.changes import FileChange


class TrackingError(Exception):
    """Base class for errors raised while tracking a reference."""

    pass


class ReferenceNeverExistedError(TrackingError):
    """Raised when the tracked path is found neither in history nor on disk."""

    def __init__(self, message: str = "Referenced file never existed in git history."):
        super().__init__(message)


class ReferencedPathNotFoundError(ReferenceNeverExistedError):
    """Raised when the file name existed in history but the full path never did."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File existed, but the path {path} to this file never existed in git history.")


class ContentUnavailableError(TrackingError):
    """Raised when the referenced line(s) cannot be read at the anchor revision."""

    pass


class TargetDeletedUpstreamError(TrackingError):
    """Raised when the file holding the referenced line(s) has been deleted.

    Line tracking is only attempted on a surviving file.
    """

    def __init__(self, file_change: FileChange):
        self.file_change = file_change
        super().__init__(f"File {file_change.after_path} has been deleted; its lines cannot be tracked.")


class MalformedHistoryRecordError(TrackingError):
    """Raised when a change-log line matches no known change letter."""

    def __init__(self, line: str):
        self.line = line
        super().__init__(f"Could not parse history record: {line!r}")
