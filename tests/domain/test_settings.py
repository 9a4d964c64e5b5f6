"""Tests for TrackerSettings loading and validation."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from reftracker.domain.settings import TrackerSettings


class TestTrackerSettingsDefaults(unittest.TestCase):

    def test_defaults(self):
        settings = TrackerSettings()
        self.assertEqual(settings.shingle_size, 2)
        self.assertEqual(settings.context_lines, 3)
        self.assertEqual(settings.acceptance_threshold, 0.65)
        self.assertEqual(settings.mapping_floor, 0.45)
        self.assertEqual(settings.split_threshold, 0.85)
        self.assertTrue(settings.round_scores)
        self.assertEqual(settings.directory_similarity, 60)


class TestTrackerSettingsFromDict(unittest.TestCase):

    def test_none_gives_defaults(self):
        self.assertEqual(TrackerSettings.from_dict(None), TrackerSettings())

    def test_overrides(self):
        settings = TrackerSettings.from_dict({"acceptance_threshold": 0.7, "round_scores": False})
        self.assertEqual(settings.acceptance_threshold, 0.7)
        self.assertFalse(settings.round_scores)

    def test_int_accepted_for_float(self):
        settings = TrackerSettings.from_dict({"mapping_floor": 0})
        self.assertEqual(settings.mapping_floor, 0)

    def test_unknown_key_raises(self):
        with self.assertRaises(ValueError) as ctx:
            TrackerSettings.from_dict({"threshold": 0.5})
        self.assertIn("threshold", str(ctx.exception))

    def test_out_of_range_raises(self):
        with self.assertRaises(ValueError):
            TrackerSettings.from_dict({"acceptance_threshold": 1.5})
        with self.assertRaises(ValueError):
            TrackerSettings.from_dict({"directory_similarity": 150})
        with self.assertRaises(ValueError):
            TrackerSettings.from_dict({"context_lines": -1})

    def test_wrong_type_raises(self):
        with self.assertRaises(ValueError):
            TrackerSettings.from_dict({"context_lines": "3"})
        with self.assertRaises(ValueError):
            TrackerSettings.from_dict({"round_scores": 1})

    def test_non_mapping_raises(self):
        with self.assertRaises(ValueError):
            TrackerSettings.from_dict(["acceptance_threshold"])


class TestTrackerSettingsFromFile(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def _write(self, text: str) -> Path:
        path = Path(self.tmpdir.name) / "settings.yaml"
        path.write_text(text)
        return path

    def test_loads_yaml(self):
        path = self._write("split_threshold: 0.9\ndirectory_similarity: 75\n")
        settings = TrackerSettings.from_file(path)
        self.assertEqual(settings.split_threshold, 0.9)
        self.assertEqual(settings.directory_similarity, 75)

    def test_empty_file_gives_defaults(self):
        self.assertEqual(TrackerSettings.from_file(self._write("")), TrackerSettings())

    def test_invalid_yaml_raises(self):
        path = self._write("split_threshold: [0.9\n")
        with self.assertRaises(ValueError):
            TrackerSettings.from_file(path)

    def test_missing_file_raises(self):
        with self.assertRaises(ValueError):
            TrackerSettings.from_file(Path(self.tmpdir.name) / "missing.yaml")


if __name__ == "__main__":
    unittest.main()
