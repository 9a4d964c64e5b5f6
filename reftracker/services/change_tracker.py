"""Change tracker service.

Entry point for tracking references: resolves the file history, overlays
uncommitted working-tree state, diffs consecutive history hops and hands the
hunks to the line relocator.

Following Martin Fowler's Service Layer pattern with constructor-based
dependency injection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Union

from reftracker.domain.changes import (
    FileChange,
    FileChangeType,
    LineChange,
    LineChangeType,
    LinesChange,
    LinesChangeType,
)
from reftracker.domain.diff import DiffHunk
from reftracker.domain.errors import (
    ContentUnavailableError,
    TargetDeletedUpstreamError,
    TrackingError,
)
from reftracker.domain.history import HistoryHop, WorkingTreeChange
from reftracker.domain.reference import ReferenceKind, TrackedReference
from reftracker.domain.settings import TrackerSettings
from reftracker.infrastructure.line_relocation import track_line, track_lines
from reftracker.services.git_operations import (
    GitDiffError,
    GitFileNotFoundError,
    GitOperationError,
    GitOperationsService,
    GitRepositoryError,
)
from reftracker.services.history_resolver import HistoryResolver

logger = logging.getLogger(__name__)

Change = Union[FileChange, LineChange, LinesChange]

_ADDED_STATUSES = ("?", "!", "C", "A", "U")


def classify_working_tree_change(change: WorkingTreeChange | None, path: str) -> FileChange | None:
    """Turn an uncommitted change of path into a FileChange with one uncommitted hop."""
    if change is None:
        return None

    if change.status in _ADDED_STATUSES:
        change_type, after_path = FileChangeType.ADDED, path
    elif change.status == "R":
        after_path = change.target_path
        change_type = FileChangeType.ADDED if after_path == path else FileChangeType.MOVED
    elif change.status == "D":
        change_type, after_path = FileChangeType.DELETED, path
    elif change.status == "M":
        change_type, after_path = FileChangeType.MODIFIED, path
    else:
        return None

    return FileChange(
        change_type=change_type,
        after_path=after_path,
        history_hops=[HistoryHop("", after_path, from_uncommitted_state=True)],
    )


@dataclass
class TrackingResult:
    """Outcome of tracking one reference in a batch."""

    reference: TrackedReference
    change: Change
    warnings: list[str] = field(default_factory=list)

    @property
    def is_invalid(self) -> bool:
        return self.change.change_type.value == "invalid"

    @property
    def requires_update(self) -> bool:
        return self.change.requires_update

    def to_dict(self) -> dict:
        return {
            "reference": str(self.reference),
            "kind": self.reference.kind.value,
            "anchor_revision": self.reference.anchor_revision,
            "result": self.change.to_dict(),
        }


class ChangeTrackerService:
    """Tracks files, directories, lines and line ranges across history."""

    def __init__(
        self,
        git_service: GitOperationsService,
        settings: TrackerSettings | None = None,
        resolver: HistoryResolver | None = None,
    ):
        self.git_service = git_service
        self.settings = settings or TrackerSettings()
        self.resolver = resolver or HistoryResolver(git_service, self.settings)

    # ============================================================
    # Files and Directories
    # ============================================================

    def get_file_change(self, path: str, anchor_revision: str | None = None) -> FileChange:
        """Resolve a file's history, including uncommitted working-tree state.

        Raises:
            TrackingError: If the file cannot be resolved from history and
                has no uncommitted change either
        """
        status_output = self.git_service.get_working_tree_status()
        uncommitted = classify_working_tree_change(
            WorkingTreeChange.from_porcelain(status_output, path), path
        )

        if uncommitted is not None and uncommitted.change_type == FileChangeType.ADDED:
            return uncommitted

        try:
            change = self.resolver.resolve_file(path, anchor_revision)
        except TrackingError:
            if uncommitted is not None:
                logger.debug("History of %s unresolved, using uncommitted change", path)
                return uncommitted
            raise

        if uncommitted is None:
            if change.change_type != FileChangeType.DELETED and change.after_path != path:
                after_uncommitted = classify_working_tree_change(
                    WorkingTreeChange.from_porcelain(status_output, change.after_path),
                    change.after_path,
                )
                if after_uncommitted is not None:
                    self._apply_uncommitted(change, after_uncommitted)
            return change

        self._apply_uncommitted(change, uncommitted)
        return change

    def _apply_uncommitted(self, change: FileChange, uncommitted: FileChange) -> None:
        """Append the uncommitted hop; its change type wins unless a moved file was only edited."""
        if change.change_type == FileChangeType.DELETED:
            return
        change.history_hops.extend(uncommitted.history_hops)
        change.after_path = uncommitted.after_path
        keeps_move = (
            change.change_type == FileChangeType.MOVED
            and uncommitted.change_type == FileChangeType.MODIFIED
        )
        if not keeps_move:
            change.change_type = uncommitted.change_type

    def get_directory_change(self, path: str, anchor_revision: str | None) -> FileChange:
        """Resolve a directory's history from the files it held."""
        directory = path.rstrip("/")
        return self.resolver.resolve_directory(directory, anchor_revision)

    # ============================================================
    # Lines
    # ============================================================

    def collect_diff_hunks(self, file_change: FileChange) -> list[DiffHunk]:
        """Diff every consecutive pair of history hops, oldest first.

        Raises:
            GitDiffError: If a diff fails or cannot be parsed
        """
        hunks = []
        hops = file_change.history_hops
        for before, after in zip(hops, hops[1:]):
            if before.from_uncommitted_state:
                continue
            if after.from_uncommitted_state:
                diff_output = self.git_service.get_diff_against_working_tree(
                    before.revision, before.path, after.path, self.settings.context_lines
                )
            else:
                diff_output = self.git_service.get_diff_between_revisions(
                    before.revision, before.path, after.revision, after.path,
                    self.settings.context_lines,
                )
            try:
                hunks.append(
                    DiffHunk.from_diff_output(diff_output, self.settings.context_lines, after.path)
                )
            except ValueError as e:
                raise GitDiffError(f"Unreadable diff for {after.path}: {e}")
        return hunks

    def _read_anchor_lines(
        self,
        path: str,
        file_change: FileChange,
        anchor_revision: str | None,
    ) -> list[str]:
        if anchor_revision is None and file_change.history_hops:
            first_hop = file_change.history_hops[0]
            try:
                if first_hop.from_uncommitted_state:
                    content = self.git_service.get_working_tree_content(first_hop.path)
                else:
                    content = self.git_service.get_file_content(first_hop.path, first_hop.revision)
            except GitFileNotFoundError as e:
                raise ContentUnavailableError(str(e))
            return content.splitlines()

        revision = anchor_revision or "HEAD"
        try:
            content = self.git_service.get_file_content(path, revision)
        except GitFileNotFoundError as e:
            raise ContentUnavailableError(str(e))
        return content.splitlines()

    def _resolve_for_lines(self, path: str, anchor_revision: str | None) -> FileChange:
        file_change = self.get_file_change(path, anchor_revision)
        if file_change.change_type == FileChangeType.DELETED:
            raise TargetDeletedUpstreamError(file_change)
        return file_change

    def get_line_change(
        self, path: str, line: int, anchor_revision: str | None = None
    ) -> LineChange:
        """Track one line of path from the anchor revision to its latest location.

        Raises:
            TargetDeletedUpstreamError: If the file has been deleted
            ContentUnavailableError: If the line does not exist at the anchor
        """
        file_change = self._resolve_for_lines(path, anchor_revision)
        lines = self._read_anchor_lines(path, file_change, anchor_revision)
        if not 1 <= line <= len(lines):
            raise ContentUnavailableError(
                f"Line {line} is out of range for {path} ({len(lines)} lines)"
            )

        hunks = self.collect_diff_hunks(file_change)
        return track_line(file_change, line, lines[line - 1], hunks, self.settings)

    def get_lines_change(
        self,
        path: str,
        start_line: int,
        end_line: int,
        anchor_revision: str | None = None,
    ) -> LinesChange:
        """Track a line range of path from the anchor revision.

        Raises:
            TargetDeletedUpstreamError: If the file has been deleted
            ContentUnavailableError: If the range does not exist at the anchor
        """
        if end_line < start_line:
            raise ContentUnavailableError(f"Invalid line range L{start_line}-L{end_line}")

        file_change = self._resolve_for_lines(path, anchor_revision)
        lines = self._read_anchor_lines(path, file_change, anchor_revision)
        if start_line < 1 or end_line > len(lines):
            raise ContentUnavailableError(
                f"Lines {start_line}-{end_line} are out of range for {path} ({len(lines)} lines)"
            )

        hunks = self.collect_diff_hunks(file_change)
        return track_lines(
            file_change, start_line, lines[start_line - 1:end_line], hunks, self.settings
        )

    # ============================================================
    # References
    # ============================================================

    def track(self, reference: TrackedReference) -> Change:
        """Track a single reference, raising on failure."""
        kind = reference.kind
        if kind == ReferenceKind.LINES:
            return self.get_lines_change(
                reference.path, reference.start_line, reference.end_line,
                reference.anchor_revision,
            )
        if kind == ReferenceKind.LINE:
            return self.get_line_change(reference.path, reference.line, reference.anchor_revision)
        if kind == ReferenceKind.DIRECTORY:
            return self.get_directory_change(reference.path, reference.anchor_revision)
        return self.get_file_change(reference.path, reference.anchor_revision)

    def track_all(self, references: list[TrackedReference]) -> list[TrackingResult]:
        """Track every reference independently.

        Failures of one reference become an INVALID result for it and do not
        affect the others. A deleted file yields a DELETED line or lines change.

        Raises:
            GitRepositoryError: If the repository itself is unusable
        """
        results = []
        for reference in references:
            try:
                change = self.track(reference)
            except TargetDeletedUpstreamError as e:
                change = self._deleted_result(reference, e.file_change)
            except GitRepositoryError:
                raise
            except (TrackingError, GitOperationError) as e:
                logger.warning("Could not track %s: %s", reference, e)
                change = self._invalid_result(reference, str(e))
            results.append(TrackingResult(reference, change))
        return results

    @staticmethod
    def _deleted_result(reference: TrackedReference, file_change: FileChange) -> Change:
        if reference.kind == ReferenceKind.LINES:
            return LinesChange(file_change, LinesChangeType.DELETED)
        if reference.kind == ReferenceKind.LINE:
            return LineChange(file_change, LineChangeType.DELETED)
        return file_change

    @staticmethod
    def _invalid_result(reference: TrackedReference, message: str) -> Change:
        file_change = FileChange.invalid(reference.path, message)
        if reference.kind == ReferenceKind.LINES:
            return LinesChange(file_change, LinesChangeType.INVALID, error_message=message)
        if reference.kind == ReferenceKind.LINE:
            return LineChange(file_change, LineChangeType.INVALID, error_message=message)
        return file_change
