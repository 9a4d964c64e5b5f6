"""History resolver service.

Determines what happened to a file or directory across git history: whether
it was added, modified, moved or deleted, where it lives now, and the
chronological (revision, path) hops it went through.

Following Martin Fowler's Service Layer pattern with constructor-based
dependency injection: all git access goes through GitOperationsService.
"""

from __future__ import annotations

import logging
import posixpath
from collections import Counter

from reftracker.domain.changes import FileChange, FileChangeType
from reftracker.domain.errors import (
    ReferencedPathNotFoundError,
    ReferenceNeverExistedError,
)
from reftracker.domain.history import ChangeLetter, ChangeRecord, HistoryHop, HistoryLog
from reftracker.domain.settings import TrackerSettings
from reftracker.services.git_operations import GitOperationsService

logger = logging.getLogger(__name__)


def collapse_hops(hops: list[HistoryHop]) -> list[HistoryHop]:
    """Drop hops identical to the hop right before them."""
    collapsed: list[HistoryHop] = []
    for hop in hops:
        if not collapsed or collapsed[-1] != hop:
            collapsed.append(hop)
    return collapsed


def classify_record(record: ChangeRecord, path: str) -> tuple[FileChangeType, str]:
    """Classify the last record reached for path.

    Returns:
        (change type, after path)
    """
    if record.letter == ChangeLetter.ADDED:
        if record.path == path:
            return FileChangeType.ADDED, path
        return FileChangeType.MOVED, record.path
    if record.letter == ChangeLetter.MODIFIED:
        if record.path == path:
            return FileChangeType.MODIFIED, path
        return FileChangeType.MOVED, record.path
    if record.letter == ChangeLetter.DELETED:
        return FileChangeType.DELETED, path
    if record.target_path == path:
        return FileChangeType.MODIFIED, path
    return FileChangeType.MOVED, record.target_path


def calculate_directory_similarity(moved_paths: list[str], total: int) -> tuple[str, int]:
    """Find the most common parent directory prefix among moved file paths.

    Every ancestor directory of a moved path ("a/", "a/b/", ...) is counted
    once per path. Ties go to the longest prefix.

    Returns:
        (prefix without trailing slash, share of total as an integer percentage)
    """
    counts: Counter = Counter()
    for path in moved_paths:
        parts = path.split("/")[:-1]
        for depth in range(1, len(parts) + 1):
            counts["/".join(parts[:depth]) + "/"] += 1

    if not counts or total <= 0:
        return "", 0

    prefix, count = max(counts.items(), key=lambda item: (item[1], len(item[0])))
    return prefix.rstrip("/"), int(count / total * 100)


class HistoryResolver:
    """Resolves FileChanges for files and directories from git history."""

    def __init__(self, git_service: GitOperationsService, settings: TrackerSettings | None = None):
        self.git_service = git_service
        self.settings = settings or TrackerSettings()

    # ============================================================
    # Files
    # ============================================================

    def resolve_file(self, path: str, anchor_revision: str | None = None) -> FileChange:
        """Resolve the history of a file path.

        Args:
            path: Repository-relative path of the file as referenced
            anchor_revision: Revision the reference was captured at, or None
                to follow the file from its most recent addition

        Raises:
            ReferencedPathNotFoundError: If the file name has history but the
                path itself never surfaced
            ReferenceNeverExistedError: If the file name has no history and
                the path is not on disk
            MalformedHistoryRecordError: If the log output cannot be parsed
        """
        file_name = posixpath.basename(path)
        output = self.git_service.get_file_history_log(
            file_name,
            anchor_revision=anchor_revision,
            rename_similarity=self.settings.rename_similarity,
        )
        log = HistoryLog.from_log_output(output)

        if not log.is_empty:
            if anchor_revision:
                seed: list[HistoryHop] = []
                if self.git_service.file_exists_at_commit(path, anchor_revision):
                    seed.append(HistoryHop(anchor_revision, path))
                change = self._traverse(log, 0, path, seed)
                if change is not None:
                    return change
            else:
                for index in log.additions():
                    change = self._traverse(log, index, path, [])
                    if change is not None:
                        return change

        fallback = self._check_working_tree(path, anchor_revision)
        if fallback is not None:
            return fallback
        if not log.is_empty:
            raise ReferencedPathNotFoundError(path)
        raise ReferenceNeverExistedError()

    def _traverse(
        self,
        log: HistoryLog,
        start: int,
        path: str,
        hops: list[HistoryHop],
    ) -> FileChange | None:
        """Follow a file from the record at start to its last change.

        Returns:
            The classified FileChange, or None if path never surfaced
        """
        index = start
        record = log.records[index]
        if record.letter != ChangeLetter.DELETED:
            hops.append(HistoryHop(record.revision, record.target_path))

        path_found = False
        deletions = 0

        while True:
            if record.mentions(path):
                path_found = True
            if path_found and record.letter == ChangeLetter.DELETED:
                deletions += 1
                break

            next_index = log.next_mentioning(record.target_path, index)
            if next_index is None:
                break
            index = next_index
            record = log.records[index]
            if record.letter != ChangeLetter.DELETED:
                hops.append(HistoryHop(record.revision, record.target_path))

        if not path_found:
            logger.debug("Path %s not reached from record %d", path, start)
            return None

        change_type, after_path = classify_record(record, path)
        return FileChange(
            change_type=change_type,
            after_path=after_path,
            history_hops=collapse_hops(hops),
            deletions_and_additions=deletions,
        )

    def _check_working_tree(self, path: str, anchor_revision: str | None) -> FileChange | None:
        if not self.git_service.path_exists_in_working_tree(path):
            return None
        revision = anchor_revision or self.git_service.get_head_revision()
        return FileChange(
            change_type=FileChangeType.ADDED,
            after_path=path,
            history_hops=[HistoryHop(revision, path)],
        )

    # ============================================================
    # Directories
    # ============================================================

    def resolve_directory(self, path: str, anchor_revision: str | None) -> FileChange:
        """Resolve the history of a directory from the files it held.

        A directory that still has contents at HEAD is reported as ADDED
        (still present). Otherwise each file it held at the anchor revision
        is resolved; when every file was moved or deleted the directory is
        MOVED to the most common new parent, provided enough files went there.
        Without an anchor, the last revision that still held the directory
        is used.

        Raises:
            ReferenceNeverExistedError: If the directory was empty or absent
                at the anchor revision, or never appears in history
        """
        directory = path.rstrip("/")
        if self.git_service.list_directory_files(directory, "HEAD"):
            return FileChange(FileChangeType.ADDED, directory)

        if anchor_revision is None:
            anchor_revision = self.git_service.get_revision_before_last_change(directory + "/")
            if anchor_revision is None:
                raise ReferenceNeverExistedError(
                    f"Referenced directory {directory} never existed in git history."
                )
            logger.debug("Directory %s resolved from last holding revision %s", directory, anchor_revision)

        files = self.git_service.list_directory_files(directory, anchor_revision)
        if not files:
            raise ReferenceNeverExistedError(
                f"Referenced directory {directory} never existed at {anchor_revision}."
            )

        moved_paths: list[str] = []
        deleted = 0
        for file_path in files:
            change = self.resolve_file(file_path, anchor_revision)
            if change.change_type == FileChangeType.MOVED:
                moved_paths.append(change.after_path)
            elif change.change_type == FileChangeType.DELETED:
                deleted += 1

        if deleted + len(moved_paths) != len(files):
            return FileChange(FileChangeType.ADDED, directory)

        prefix, similarity = calculate_directory_similarity(moved_paths, len(files))
        logger.debug(
            "Directory %s: %d moved, %d deleted, %d%% under %r",
            directory, len(moved_paths), deleted, similarity, prefix,
        )
        if prefix and similarity >= self.settings.directory_similarity:
            return FileChange(FileChangeType.MOVED, prefix, deletions_and_additions=deleted)
        return FileChange(FileChangeType.DELETED, directory, deletions_and_additions=deleted)
