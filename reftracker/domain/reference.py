"""Domain model for a tracked reference.

A reference names a file, a directory, a line (path#L12) or a line range
(path#L12-L18), optionally pinned to the revision it was captured at.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

_LINES_SUFFIX_PATTERN = re.compile(r"#L(\d+)-L(\d+)$")
_LINE_SUFFIX_PATTERN = re.compile(r"#L(\d+)$")


class ReferenceKind(Enum):
    """What a reference points at."""

    FILE = "file"
    DIRECTORY = "directory"
    LINE = "line"
    LINES = "lines"

    @classmethod
    def from_string(cls, value: str) -> ReferenceKind:
        """Parse ReferenceKind from string value.

        Raises:
            ValueError: If value is not a valid ReferenceKind
        """
        value_lower = value.lower()
        for member in cls:
            if member.value == value_lower:
                return member
        valid_values = [m.value for m in cls]
        raise ValueError(
            f"Invalid reference kind: {value}. Must be one of: {', '.join(valid_values)}"
        )


@dataclass(frozen=True)
class TrackedReference:
    """A reference to a file, directory, line or line range."""

    path: str
    line: int | None = None
    start_line: int | None = None
    end_line: int | None = None
    anchor_revision: str | None = None
    is_directory: bool = False

    # --------------------------------------------------------
    # Factory Methods
    # --------------------------------------------------------

    @classmethod
    def from_string(
        cls,
        value: str,
        anchor_revision: str | None = None,
        is_directory: bool = False,
    ) -> TrackedReference:
        """Parse `path`, `path#L12`, `path#L12-L18` or `dir/`.

        Raises:
            ValueError: For an empty path or an inverted or non-positive range
        """
        text = value.strip()

        lines_match = _LINES_SUFFIX_PATTERN.search(text)
        if lines_match:
            path = text[: lines_match.start()]
            start, end = int(lines_match.group(1)), int(lines_match.group(2))
            if start < 1 or end < start:
                raise ValueError(f"Invalid line range in reference: {value}")
            cls._require_path(path, value)
            return cls(path, start_line=start, end_line=end, anchor_revision=anchor_revision)

        line_match = _LINE_SUFFIX_PATTERN.search(text)
        if line_match:
            path = text[: line_match.start()]
            line = int(line_match.group(1))
            if line < 1:
                raise ValueError(f"Invalid line in reference: {value}")
            cls._require_path(path, value)
            return cls(path, line=line, anchor_revision=anchor_revision)

        if text.endswith("/"):
            is_directory = True
            text = text.rstrip("/")
        cls._require_path(text, value)
        return cls(text, anchor_revision=anchor_revision, is_directory=is_directory)

    @staticmethod
    def _require_path(path: str, value: str) -> None:
        if not path:
            raise ValueError(f"Reference has no path: {value!r}")

    # --------------------------------------------------------
    # Public API
    # --------------------------------------------------------

    @property
    def kind(self) -> ReferenceKind:
        if self.start_line is not None and self.end_line is not None:
            return ReferenceKind.LINES
        if self.line is not None:
            return ReferenceKind.LINE
        if self.is_directory:
            return ReferenceKind.DIRECTORY
        return ReferenceKind.FILE

    def __str__(self) -> str:
        kind = self.kind
        if kind == ReferenceKind.LINES:
            return f"{self.path}#L{self.start_line}-L{self.end_line}"
        if kind == ReferenceKind.LINE:
            return f"{self.path}#L{self.line}"
        if kind == ReferenceKind.DIRECTORY:
            return f"{self.path}/"
        return self.path
