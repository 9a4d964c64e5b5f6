"""Tests for TrackedReference parsing."""

from __future__ import annotations

import unittest

from reftracker.domain.reference import ReferenceKind, TrackedReference


class TestTrackedReferenceFromString(unittest.TestCase):

    def test_file(self):
        ref = TrackedReference.from_string("docs/guide.md")
        self.assertEqual(ref.kind, ReferenceKind.FILE)
        self.assertEqual(ref.path, "docs/guide.md")

    def test_line(self):
        ref = TrackedReference.from_string("src/app.py#L12", anchor_revision="abc123")
        self.assertEqual(ref.kind, ReferenceKind.LINE)
        self.assertEqual(ref.line, 12)
        self.assertEqual(ref.path, "src/app.py")
        self.assertEqual(ref.anchor_revision, "abc123")

    def test_line_range(self):
        ref = TrackedReference.from_string("src/app.py#L12-L18")
        self.assertEqual(ref.kind, ReferenceKind.LINES)
        self.assertEqual((ref.start_line, ref.end_line), (12, 18))

    def test_trailing_slash_is_directory(self):
        ref = TrackedReference.from_string("src/old/")
        self.assertEqual(ref.kind, ReferenceKind.DIRECTORY)
        self.assertEqual(ref.path, "src/old")

    def test_directory_flag(self):
        ref = TrackedReference.from_string("src/old", is_directory=True)
        self.assertEqual(ref.kind, ReferenceKind.DIRECTORY)

    def test_inverted_range_raises(self):
        with self.assertRaises(ValueError):
            TrackedReference.from_string("a.py#L9-L3")

    def test_zero_line_raises(self):
        with self.assertRaises(ValueError):
            TrackedReference.from_string("a.py#L0")

    def test_missing_path_raises(self):
        with self.assertRaises(ValueError):
            TrackedReference.from_string("#L4")

    def test_str_round_trips_display(self):
        for value in ("a.py", "a.py#L3", "a.py#L3-L5", "dir/"):
            self.assertEqual(str(TrackedReference.from_string(value)), value)


class TestReferenceKind(unittest.TestCase):

    def test_from_string(self):
        self.assertEqual(ReferenceKind.from_string("LINES"), ReferenceKind.LINES)

    def test_invalid(self):
        with self.assertRaises(ValueError):
            ReferenceKind.from_string("symbol")


if __name__ == "__main__":
    unittest.main()
