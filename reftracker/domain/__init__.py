"""Domain models for reftracker."""

from reftracker.domain.changes import (
    FileChange,
    FileChangeType,
    LineChange,
    LineChangeType,
    LinesChange,
    LinesChangeType,
    change_label,
)
from reftracker.domain.diff import DiffHunk, Line
from reftracker.domain.errors import (
    ContentUnavailableError,
    MalformedHistoryRecordError,
    ReferencedPathNotFoundError,
    ReferenceNeverExistedError,
    TargetDeletedUpstreamError,
    TrackingError,
)
from reftracker.domain.history import (
    ChangeLetter,
    ChangeRecord,
    HistoryHop,
    HistoryLog,
    WorkingTreeChange,
)
from reftracker.domain.reference import ReferenceKind, TrackedReference
from reftracker.domain.settings import TrackerSettings

__all__ = [
    "ChangeLetter",
    "ChangeRecord",
    "ContentUnavailableError",
    "DiffHunk",
    "FileChange",
    "FileChangeType",
    "HistoryHop",
    "HistoryLog",
    "Line",
    "LineChange",
    "LineChangeType",
    "LinesChange",
    "LinesChangeType",
    "MalformedHistoryRecordError",
    "ReferenceKind",
    "ReferencedPathNotFoundError",
    "ReferenceNeverExistedError",
    "TargetDeletedUpstreamError",
    "TrackedReference",
    "TrackerSettings",
    "TrackingError",
    "WorkingTreeChange",
    "change_label",
]
