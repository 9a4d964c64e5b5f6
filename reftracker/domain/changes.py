"""Domain models for tracking results.

A FileChange describes what happened to a file or directory, a LineChange
what happened to one line of a file, and a LinesChange what happened to a
contiguous range of lines. Every result carries the FileChange it was
derived from and serializes with to_dict() for JSON output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from reftracker.domain.diff import Line
from reftracker.domain.history import HistoryHop


# ============================================================
# Change Types
# ============================================================


class FileChangeType(Enum):
    """Classification of a file or directory across history."""

    ADDED = "added"
    MOVED = "moved"
    MODIFIED = "modified"
    DELETED = "deleted"
    INVALID = "invalid"


class LineChangeType(Enum):
    """Classification of a single line across history."""

    UNCHANGED = "unchanged"
    MOVED = "moved"
    DELETED = "deleted"
    INVALID = "invalid"


class LinesChangeType(Enum):
    """Classification of a line range across history.

    MOVED is an alias of FULL: the whole range survives as one block.
    """

    UNCHANGED = "unchanged"
    FULL = "full"
    MOVED = "full"
    PARTIAL = "partial"
    DELETED = "deleted"
    INVALID = "invalid"


_CHANGE_LABELS: dict[Enum, str] = {
    FileChangeType.ADDED: "FILE ADDED",
    FileChangeType.MOVED: "FILE MOVED",
    FileChangeType.MODIFIED: "FILE MODIFIED",
    FileChangeType.DELETED: "FILE DELETED",
    FileChangeType.INVALID: "FILE INVALID",
    LineChangeType.UNCHANGED: "LINE UNCHANGED",
    LineChangeType.MOVED: "LINE MOVED",
    LineChangeType.DELETED: "LINE DELETED",
    LineChangeType.INVALID: "LINE INVALID",
    LinesChangeType.UNCHANGED: "LINES UNCHANGED",
    LinesChangeType.FULL: "LINES FULL",
    LinesChangeType.PARTIAL: "LINES PARTIAL",
    LinesChangeType.DELETED: "LINES DELETED",
    LinesChangeType.INVALID: "LINES INVALID",
}


def change_label(change_type: FileChangeType | LineChangeType | LinesChangeType) -> str:
    """Display string for a change type, e.g. "LINE MOVED"."""
    return _CHANGE_LABELS[change_type]


# ============================================================
# Domain Models
# ============================================================


@dataclass
class FileChange:
    """What happened to a file (or directory) since the anchor revision.

    Attributes:
        change_type: Classification of the change
        after_path: Where the file lives now (the last known path if deleted)
        history_hops: Chronological (revision, path) pairs from the anchor to
            the latest location
        deletions_and_additions: Number of deletions seen after the tracked
            path surfaced
        error_message: Reason for an INVALID result
    """

    change_type: FileChangeType
    after_path: str
    history_hops: list[HistoryHop] = field(default_factory=list)
    deletions_and_additions: int = 0
    error_message: str | None = None

    @classmethod
    def invalid(cls, path: str, message: str) -> FileChange:
        return cls(FileChangeType.INVALID, path, error_message=message)

    @property
    def requires_update(self) -> bool:
        """Check if a reference to the file must be rewritten."""
        return self.change_type in (FileChangeType.MOVED, FileChangeType.DELETED)

    def has_uncommitted_changes(self) -> bool:
        return bool(self.history_hops) and self.history_hops[-1].from_uncommitted_state

    def to_dict(self) -> dict:
        return {
            "change_type": self.change_type.value,
            "label": change_label(self.change_type),
            "after_path": self.after_path,
            "history_hops": [hop.to_dict() for hop in self.history_hops],
            "deletions_and_additions": self.deletions_and_additions,
            "requires_update": self.requires_update,
            "error_message": self.error_message,
        }

    def __str__(self) -> str:
        return f"{change_label(self.change_type)}: {self.after_path}"


@dataclass
class LineChange:
    """What happened to one line since the anchor revision.

    new_line is None when the line was deleted or the result is INVALID.
    """

    file_change: FileChange
    change_type: LineChangeType
    new_line: Line | None = None
    error_message: str | None = None

    @property
    def after_path(self) -> str:
        if self.new_line is None:
            return self.file_change.after_path
        return f"{self.file_change.after_path}#L{self.new_line.line_number}"

    @property
    def requires_update(self) -> bool:
        return self.change_type in (LineChangeType.MOVED, LineChangeType.DELETED) or (
            self.file_change.requires_update
        )

    def to_dict(self) -> dict:
        return {
            "change_type": self.change_type.value,
            "label": change_label(self.change_type),
            "after_path": self.after_path,
            "new_line": self.new_line.to_dict() if self.new_line else None,
            "file_change": self.file_change.to_dict(),
            "error_message": self.error_message,
        }

    def __str__(self) -> str:
        return f"{change_label(self.change_type)}: {self.after_path}"


@dataclass
class LinesChange:
    """What happened to a line range since the anchor revision.

    new_lines holds sorted, disjoint groups of consecutive line numbers.
    """

    file_change: FileChange
    change_type: LinesChangeType
    new_lines: list[list[Line]] = field(default_factory=list)
    error_message: str | None = None

    @property
    def after_paths(self) -> list[str]:
        paths = []
        for group in self.new_lines:
            if not group:
                continue
            first = group[0].line_number
            last = group[-1].line_number
            paths.append(f"{self.file_change.after_path}#L{first}-L{last}")
        return paths

    @property
    def requires_update(self) -> bool:
        return self.change_type != LinesChangeType.UNCHANGED or self.file_change.requires_update

    def to_dict(self) -> dict:
        return {
            "change_type": self.change_type.value,
            "label": change_label(self.change_type),
            "after_paths": self.after_paths,
            "new_lines": [[line.to_dict() for line in group] for group in self.new_lines],
            "file_change": self.file_change.to_dict(),
            "error_message": self.error_message,
        }

    def __str__(self) -> str:
        paths = ", ".join(self.after_paths) or self.file_change.after_path
        return f"{change_label(self.change_type)}: {paths}"
