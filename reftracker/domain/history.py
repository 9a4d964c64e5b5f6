"""Domain models for file history records.

Parse-once pattern: raw `git log --name-status` output and
`git status --porcelain=v1` output are parsed into typed records here.
History resolution then works over these records only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from reftracker.domain.errors import MalformedHistoryRecordError

COMMIT_MARKER_PREFIX = "Commit: "

# `git log --oneline` commit lines: abbreviated sha followed by the subject
_ONELINE_COMMIT_PATTERN = re.compile(r"^([0-9a-f]{6,40})(?:\s+.*)?$")
_RENAME_LETTER_PATTERN = re.compile(r"^R\d*$")


# ============================================================
# Domain Models
# ============================================================


class ChangeLetter(Enum):
    """Change letters emitted by `git log --name-status`."""

    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"

    @classmethod
    def from_status(cls, status: str) -> ChangeLetter | None:
        """Parse a status column such as "A", "M" or "R087"."""
        if _RENAME_LETTER_PATTERN.match(status):
            return cls.RENAMED
        for member in cls:
            if member.value == status:
                return member
        return None


@dataclass(frozen=True)
class HistoryHop:
    """A path associated with a revision in a file's history.

    A hop taken from the working tree has no revision and
    from_uncommitted_state set.
    """

    revision: str
    path: str
    from_uncommitted_state: bool = False

    def to_dict(self) -> dict:
        return {
            "revision": self.revision,
            "path": self.path,
            "from_uncommitted_state": self.from_uncommitted_state,
        }


@dataclass(frozen=True)
class ChangeRecord:
    """One change of one path in one revision.

    Attributes:
        letter: Kind of change
        path: The changed path (the old path for renames)
        new_path: The new path for renames, otherwise None
        revision: Revision the change belongs to
        raw: The original log line
    """

    letter: ChangeLetter
    path: str
    new_path: str | None = None
    revision: str = ""
    raw: str = ""

    # --------------------------------------------------------
    # Factory Methods
    # --------------------------------------------------------

    @classmethod
    def from_log_line(cls, line: str, revision: str = "") -> ChangeRecord:
        """Parse a `<letter>\\t<path>[\\t<new path>]` line.

        Raises:
            MalformedHistoryRecordError: If the letter is unknown or the
                number of paths does not fit the letter
        """
        parts = line.strip().split("\t")
        letter = ChangeLetter.from_status(parts[0])
        if letter is None:
            raise MalformedHistoryRecordError(line)

        if letter == ChangeLetter.RENAMED:
            if len(parts) != 3:
                raise MalformedHistoryRecordError(line)
            return cls(letter, parts[1], parts[2], revision, line)

        if len(parts) != 2:
            raise MalformedHistoryRecordError(line)
        return cls(letter, parts[1], None, revision, line)

    # --------------------------------------------------------
    # Public API
    # --------------------------------------------------------

    @property
    def target_path(self) -> str:
        """The path the file lives at after this change."""
        return self.new_path if self.new_path is not None else self.path

    @property
    def paths(self) -> tuple[str, ...]:
        if self.new_path is None:
            return (self.path,)
        return (self.path, self.new_path)

    def mentions(self, path: str) -> bool:
        """Check whether any path of this record contains path."""
        return any(path in candidate for candidate in self.paths)


@dataclass
class HistoryLog:
    """Chronologically ordered change records for a file name."""

    records: list[ChangeRecord] = field(default_factory=list)

    @classmethod
    def from_log_output(cls, output: str) -> HistoryLog:
        """Parse `git log --name-status --reverse` output.

        Commit lines are either "Commit: <sha>" markers or `--oneline`
        commit lines; every change line is attributed to the commit line
        above it. Blank lines are ignored.

        Raises:
            MalformedHistoryRecordError: For change lines with unknown letters
        """
        records: list[ChangeRecord] = []
        revision = ""

        for line in output.splitlines():
            stripped = line.strip()
            if not stripped:
                continue
            if stripped.startswith(COMMIT_MARKER_PREFIX):
                revision = stripped[len(COMMIT_MARKER_PREFIX):].strip()
                continue
            if "\t" not in stripped:
                match = _ONELINE_COMMIT_PATTERN.match(stripped)
                if match:
                    revision = match.group(1)
                    continue
            records.append(ChangeRecord.from_log_line(stripped, revision))

        return cls(records=records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    def additions(self) -> list[int]:
        """Indices of addition records, most recent first.

        A path added more than once (deleted and re-added) is represented by
        its latest addition only.
        """
        latest: dict[str, int] = {}
        for index, record in enumerate(self.records):
            if record.letter == ChangeLetter.ADDED:
                latest[record.path] = index
        return sorted(latest.values(), reverse=True)

    def next_mentioning(self, path: str, after_index: int) -> int | None:
        """Index of the first record after after_index that mentions path."""
        for index in range(after_index + 1, len(self.records)):
            if self.records[index].mentions(path):
                return index
        return None


@dataclass(frozen=True)
class WorkingTreeChange:
    """An uncommitted change of a path, from `git status --porcelain=v1`."""

    status: str
    path: str
    new_path: str | None = None

    @classmethod
    def from_porcelain(cls, output: str, path: str) -> WorkingTreeChange | None:
        """Find the status line naming path.

        Returns:
            The parsed change, or None when path has no uncommitted change
        """
        for raw in output.splitlines():
            line = raw.strip()
            if not line or path not in line.split(" "):
                continue
            status = line[0]
            if status == "R" and " -> " in line:
                old, new = line[2:].strip().split(" -> ", 1)
                return cls(status, old.strip(), new.strip())
            return cls(status, path)
        return None

    @property
    def target_path(self) -> str:
        return self.new_path if self.new_path is not None else self.path
