"""Domain models for diff hunk processing.

Parse-once pattern: Raw unified diff output for one before/after revision pair
is parsed into a DiffHunk of added and deleted lines at the boundary. Every
changed line is annotated with a bounded window of surrounding lines from its
own side of the diff.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

DEFAULT_CONTEXT_LINES = 3

_HUNK_HEADER_PATTERN = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_NO_NEWLINE_MARKER = "\\ No newline at end of file"


# ============================================================
# Domain Models
# ============================================================


@dataclass
class Line:
    """A single line of a file version.

    Attributes:
        line_number: 1-indexed position of the line in its file version
        content: The line content (without any diff marker)
        context_lines: Neighbouring lines from the same file version, or None
            when no context has been attached. Context lines never carry
            context of their own.
    """

    line_number: int
    content: str
    context_lines: list[Line] | None = None

    @property
    def joined_context(self) -> str:
        """Concatenate the stripped contents of the context lines."""
        if not self.context_lines:
            return ""
        return "".join(line.content.strip() for line in self.context_lines)

    def stripped(self) -> Line:
        """Return a copy with leading/trailing whitespace removed from the content."""
        return Line(self.line_number, self.content.strip(), self.context_lines)

    def to_dict(self, include_context: bool = False) -> dict:
        data: dict = {"line_number": self.line_number, "content": self.content}
        if include_context:
            data["context_lines"] = [
                {"line_number": c.line_number, "content": c.content}
                for c in self.context_lines or []
            ]
        return data

    def __str__(self) -> str:
        return f"({self.line_number}, {self.content})"


@dataclass
class DiffHunk:
    """Added and deleted lines between two revisions of one file.

    Use from_diff_output() to parse raw `git diff` output. Line numbers of
    deleted lines refer to the before revision, those of added lines to the
    after revision.
    """

    added_lines: list[Line] = field(default_factory=list)
    deleted_lines: list[Line] = field(default_factory=list)
    file_path: str = ""

    # --------------------------------------------------------
    # Factory Methods
    # --------------------------------------------------------

    @classmethod
    def from_diff_output(
        cls,
        diff_output: str,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        file_path: str = "",
    ) -> DiffHunk:
        """Parse unified diff output into added and deleted lines.

        Header lines before the first @@ marker are skipped, as are
        "No newline at end of file" markers. Each @@ header reseeds the
        before/after line counters.

        Args:
            diff_output: Raw output of a unified diff for one file pair
            context_lines: Number of lines to attach before and after each
                changed line
            file_path: Path of the file the diff belongs to

        Returns:
            DiffHunk with context attached to every added and deleted line

        Raises:
            ValueError: If context_lines is negative or an @@ line is not a
                valid hunk header
        """
        if context_lines < 0:
            raise ValueError(f"context_lines must not be negative: {context_lines}")

        added: list[Line] = []
        deleted: list[Line] = []
        added_pool: list[Line] = []
        deleted_pool: list[Line] = []

        current_added = 0
        current_deleted = 0
        in_hunk_body = False

        for raw in diff_output.splitlines():
            if raw == _NO_NEWLINE_MARKER:
                continue

            if raw.startswith("@@"):
                match = _HUNK_HEADER_PATTERN.match(raw)
                if match is None:
                    raise ValueError(f"Malformed hunk header: {raw!r}")
                current_deleted = int(match.group(1))
                current_added = int(match.group(3))
                in_hunk_body = True
                continue

            if not in_hunk_body:
                # diff --git, index, --- and +++ lines
                continue

            if raw.startswith("+"):
                line = Line(current_added, raw[1:])
                added.append(line)
                added_pool.append(line)
                current_added += 1
            elif raw.startswith("-"):
                line = Line(current_deleted, raw[1:])
                deleted.append(line)
                deleted_pool.append(line)
                current_deleted += 1
            else:
                content = raw[1:] if raw.startswith(" ") else raw
                deleted_pool.append(Line(current_deleted, content))
                added_pool.append(Line(current_added, content))
                current_added += 1
                current_deleted += 1

        populate_context_lines(added, added_pool, context_lines)
        populate_context_lines(deleted, deleted_pool, context_lines)
        return cls(added_lines=added, deleted_lines=deleted, file_path=file_path)

    def to_dict(self, include_context: bool = False) -> dict:
        return {
            "file_path": self.file_path,
            "added_lines": [line.to_dict(include_context) for line in self.added_lines],
            "deleted_lines": [line.to_dict(include_context) for line in self.deleted_lines],
        }

    # --------------------------------------------------------
    # Public API
    # --------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        """Check if the hunk has no changed lines."""
        return not self.added_lines and not self.deleted_lines

    def find_deleted_line(self, line_number: int) -> Line | None:
        """Return the deleted line at line_number, if any."""
        return next((line for line in self.deleted_lines if line.line_number == line_number), None)

    def find_added_line(self, line_number: int) -> Line | None:
        """Return the added line at line_number, if any."""
        return next((line for line in self.added_lines if line.line_number == line_number), None)


# ============================================================
# Context Windows
# ============================================================


def populate_context_lines(lines: list[Line], pool: list[Line], context_lines: int) -> None:
    """Attach up to context_lines neighbours before and after each line.

    Neighbours come from pool (every line known on that side of the diff).
    Windows are clipped at the pool's boundaries; a shortfall on one side is
    not made up from the other side.
    """
    if not pool:
        return

    max_line_number = max(line.line_number for line in pool)

    for target in lines:
        lower = max(0, target.line_number - context_lines)
        upper = min(target.line_number + context_lines, max_line_number)
        target.context_lines = [
            Line(line.line_number, line.content)
            for line in pool
            if lower <= line.line_number < target.line_number
            or target.line_number < line.line_number <= upper
        ]
