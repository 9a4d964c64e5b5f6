"""Tests for ChangeTrackerService.

Tests cover:
- Working-tree overlay on resolved file history
- Diff collection over history hops
- Line and line-range tracking through the git collaborator
- Batch tracking with per-reference failure isolation
"""

from __future__ import annotations

import unittest
from unittest.mock import MagicMock

from reftracker.domain.changes import (
    FileChange,
    FileChangeType,
    LineChangeType,
    LinesChangeType,
)
from reftracker.domain.errors import (
    ContentUnavailableError,
    ReferenceNeverExistedError,
    TargetDeletedUpstreamError,
)
from reftracker.domain.history import HistoryHop, WorkingTreeChange
from reftracker.domain.reference import TrackedReference
from reftracker.services.change_tracker import (
    ChangeTrackerService,
    classify_working_tree_change,
)
from reftracker.services.git_operations import (
    GitDiffError,
    GitFileNotFoundError,
    GitOperationsService,
    GitRepositoryError,
)
from reftracker.services.history_resolver import HistoryResolver

ANCHOR_CONTENT = "one\ntwo\nthree\n"

INSERT_AT_TOP_DIFF = """\
diff --git a/src/app.py b/src/app.py
--- a/src/app.py
+++ b/src/app.py
@@ -1,3 +1,4 @@
+zero
 one
 two
 three
"""


def _make_file_change(change_type: FileChangeType = FileChangeType.MODIFIED, path: str = "src/app.py") -> FileChange:
    return FileChange(
        change_type=change_type,
        after_path=path,
        history_hops=[HistoryHop("aaa111", "src/app.py"), HistoryHop("bbb222", path)],
    )


class ChangeTrackerTestCase(unittest.TestCase):

    def setUp(self):
        self.git = MagicMock(spec=GitOperationsService)
        self.git.get_working_tree_status.return_value = ""
        self.git.get_file_content.return_value = ANCHOR_CONTENT
        self.git.get_diff_between_revisions.return_value = INSERT_AT_TOP_DIFF
        self.resolver = MagicMock(spec=HistoryResolver)
        self.resolver.resolve_file.return_value = _make_file_change()
        self.service = ChangeTrackerService(self.git, resolver=self.resolver)


class TestClassifyWorkingTreeChange(unittest.TestCase):

    def test_statuses(self):
        cases = {
            "?": FileChangeType.ADDED,
            "A": FileChangeType.ADDED,
            "U": FileChangeType.ADDED,
            "D": FileChangeType.DELETED,
            "M": FileChangeType.MODIFIED,
        }
        for status, expected in cases.items():
            change = classify_working_tree_change(WorkingTreeChange(status, "a.py"), "a.py")
            self.assertEqual(change.change_type, expected, status)
            self.assertTrue(change.has_uncommitted_changes())

    def test_rename_away_is_moved(self):
        change = classify_working_tree_change(WorkingTreeChange("R", "a.py", "b.py"), "a.py")
        self.assertEqual(change.change_type, FileChangeType.MOVED)
        self.assertEqual(change.after_path, "b.py")

    def test_rename_onto_path_is_added(self):
        change = classify_working_tree_change(WorkingTreeChange("R", "a.py", "b.py"), "b.py")
        self.assertEqual(change.change_type, FileChangeType.ADDED)

    def test_no_change(self):
        self.assertIsNone(classify_working_tree_change(None, "a.py"))


class TestGetFileChange(ChangeTrackerTestCase):

    def test_clean_working_tree_returns_history(self):
        change = self.service.get_file_change("src/app.py", "aaa111")

        self.assertEqual(change.change_type, FileChangeType.MODIFIED)
        self.resolver.resolve_file.assert_called_once_with("src/app.py", "aaa111")

    def test_uncommitted_addition_short_circuits(self):
        self.git.get_working_tree_status.return_value = "?? src/app.py\n"

        change = self.service.get_file_change("src/app.py")

        self.assertEqual(change.change_type, FileChangeType.ADDED)
        self.assertEqual(change.history_hops, [HistoryHop("", "src/app.py", True)])
        self.resolver.resolve_file.assert_not_called()

    def test_history_failure_falls_back_to_uncommitted_rename(self):
        self.git.get_working_tree_status.return_value = "R  src/app.py -> lib/app.py\n"
        self.resolver.resolve_file.side_effect = ReferenceNeverExistedError()

        change = self.service.get_file_change("src/app.py")

        self.assertEqual(change.change_type, FileChangeType.MOVED)
        self.assertEqual(change.after_path, "lib/app.py")

    def test_history_failure_without_uncommitted_change_raises(self):
        self.resolver.resolve_file.side_effect = ReferenceNeverExistedError()

        with self.assertRaises(ReferenceNeverExistedError):
            self.service.get_file_change("src/app.py")

    def test_uncommitted_modification_appends_hop(self):
        self.git.get_working_tree_status.return_value = " M src/app.py\n"

        change = self.service.get_file_change("src/app.py")

        self.assertEqual(change.change_type, FileChangeType.MODIFIED)
        self.assertEqual(len(change.history_hops), 3)
        self.assertTrue(change.has_uncommitted_changes())

    def test_uncommitted_deletion_wins(self):
        self.git.get_working_tree_status.return_value = " D src/app.py\n"

        change = self.service.get_file_change("src/app.py")

        self.assertEqual(change.change_type, FileChangeType.DELETED)

    def test_uncommitted_change_at_moved_location(self):
        self.resolver.resolve_file.return_value = _make_file_change(FileChangeType.MOVED, "lib/app.py")
        self.git.get_working_tree_status.return_value = " D lib/app.py\n"

        change = self.service.get_file_change("src/app.py")

        self.assertEqual(change.change_type, FileChangeType.DELETED)
        self.assertEqual(change.after_path, "lib/app.py")

    def test_edit_of_moved_file_stays_moved(self):
        self.resolver.resolve_file.return_value = _make_file_change(FileChangeType.MOVED, "lib/app.py")
        self.git.get_working_tree_status.return_value = " M lib/app.py\n"

        change = self.service.get_file_change("src/app.py")

        self.assertEqual(change.change_type, FileChangeType.MOVED)
        self.assertTrue(change.has_uncommitted_changes())


class TestCollectDiffHunks(ChangeTrackerTestCase):

    def test_one_hunk_per_hop_pair(self):
        hunks = self.service.collect_diff_hunks(_make_file_change())

        self.assertEqual(len(hunks), 1)
        self.assertEqual([l.content for l in hunks[0].added_lines], ["zero"])
        self.git.get_diff_between_revisions.assert_called_once_with(
            "aaa111", "src/app.py", "bbb222", "src/app.py", 3
        )

    def test_uncommitted_hop_diffs_against_working_tree(self):
        file_change = _make_file_change()
        file_change.history_hops.append(HistoryHop("", "src/app.py", True))
        self.git.get_diff_against_working_tree.return_value = ""

        hunks = self.service.collect_diff_hunks(file_change)

        self.assertEqual(len(hunks), 2)
        self.git.get_diff_against_working_tree.assert_called_once_with(
            "bbb222", "src/app.py", "src/app.py", 3
        )

    def test_unparseable_diff_raises_git_diff_error(self):
        self.git.get_diff_between_revisions.return_value = "@@ garbage @@\n+x\n"

        with self.assertRaises(GitDiffError):
            self.service.collect_diff_hunks(_make_file_change())

    def test_single_hop_has_no_hunks(self):
        file_change = FileChange(FileChangeType.ADDED, "a.py", [HistoryHop("aaa111", "a.py")])
        self.assertEqual(self.service.collect_diff_hunks(file_change), [])


class TestGetLineChange(ChangeTrackerTestCase):

    def test_line_shifted_by_insertion(self):
        change = self.service.get_line_change("src/app.py", 2, "aaa111")

        self.assertEqual(change.change_type, LineChangeType.MOVED)
        self.assertEqual(change.new_line.line_number, 3)
        self.assertEqual(change.new_line.content, "two")
        self.git.get_file_content.assert_called_once_with("src/app.py", "aaa111")

    def test_anchor_defaults_to_first_hop(self):
        self.service.get_line_change("src/app.py", 1)

        self.git.get_file_content.assert_called_once_with("src/app.py", "aaa111")

    def test_out_of_range_line(self):
        with self.assertRaises(ContentUnavailableError):
            self.service.get_line_change("src/app.py", 9, "aaa111")

    def test_missing_anchor_file(self):
        self.git.get_file_content.side_effect = GitFileNotFoundError("not found")

        with self.assertRaises(ContentUnavailableError):
            self.service.get_line_change("src/app.py", 1, "aaa111")

    def test_deleted_file(self):
        self.resolver.resolve_file.return_value = _make_file_change(FileChangeType.DELETED)

        with self.assertRaises(TargetDeletedUpstreamError) as ctx:
            self.service.get_line_change("src/app.py", 1, "aaa111")

        self.assertEqual(ctx.exception.file_change.change_type, FileChangeType.DELETED)
        self.git.get_diff_between_revisions.assert_not_called()


class TestGetLinesChange(ChangeTrackerTestCase):

    def test_range_shifted_by_insertion(self):
        change = self.service.get_lines_change("src/app.py", 1, 3, "aaa111")

        self.assertEqual(change.change_type, LinesChangeType.FULL)
        self.assertEqual(change.after_paths, ["src/app.py#L2-L4"])
        self.assertEqual([l.content for l in change.new_lines[0]], ["one", "two", "three"])

    def test_range_past_end(self):
        with self.assertRaises(ContentUnavailableError):
            self.service.get_lines_change("src/app.py", 2, 5, "aaa111")

    def test_inverted_range(self):
        with self.assertRaises(ContentUnavailableError):
            self.service.get_lines_change("src/app.py", 3, 1, "aaa111")


class TestTrackAll(ChangeTrackerTestCase):

    def test_failures_are_isolated(self):
        def resolve(path, anchor):
            if path == "gone.py":
                return _make_file_change(FileChangeType.DELETED, "gone.py")
            if path == "missing.py":
                raise ReferenceNeverExistedError()
            return _make_file_change()

        self.resolver.resolve_file.side_effect = resolve
        references = [
            TrackedReference.from_string("src/app.py#L2", "aaa111"),
            TrackedReference.from_string("gone.py#L1", "aaa111"),
            TrackedReference.from_string("missing.py", "aaa111"),
        ]

        results = self.service.track_all(references)

        self.assertEqual(len(results), 3)
        self.assertEqual(results[0].change.change_type, LineChangeType.MOVED)
        self.assertEqual(results[1].change.change_type, LineChangeType.DELETED)
        self.assertTrue(results[2].is_invalid)
        self.assertIn("never existed", results[2].change.error_message)
        self.assertFalse(results[0].is_invalid)

    def test_replaced_bytes_are_tracked_alongside_other_references(self):
        def content(path, revision):
            if path == "bin.txt":
                return "ok\n\ufffd\ufffd bad\n"
            return ANCHOR_CONTENT

        self.git.get_file_content.side_effect = content
        self.git.get_diff_between_revisions.return_value = ""
        references = [
            TrackedReference.from_string("bin.txt#L2", "aaa111"),
            TrackedReference.from_string("src/app.py#L1", "aaa111"),
        ]

        results = self.service.track_all(references)

        self.assertEqual([result.is_invalid for result in results], [False, False])
        self.assertEqual(results[0].change.new_line.content, "\ufffd\ufffd bad")

    def test_invalid_line_reference(self):
        references = [TrackedReference.from_string("src/app.py#L40-L42", "aaa111")]

        results = self.service.track_all(references)

        self.assertTrue(results[0].is_invalid)
        self.assertEqual(results[0].change.change_type, LinesChangeType.INVALID)

    def test_repository_errors_propagate(self):
        self.git.get_working_tree_status.side_effect = GitRepositoryError("not a repo")

        with self.assertRaises(GitRepositoryError):
            self.service.track_all([TrackedReference.from_string("a.py")])

    def test_directory_reference(self):
        self.resolver.resolve_directory.return_value = FileChange(FileChangeType.MOVED, "new/dir")

        results = self.service.track_all([TrackedReference.from_string("old/dir/", "aaa111")])

        self.resolver.resolve_directory.assert_called_once_with("old/dir", "aaa111")
        self.assertEqual(results[0].change.after_path, "new/dir")
        self.assertEqual(results[0].to_dict()["kind"], "directory")


if __name__ == "__main__":
    unittest.main()
