"""Tests for hash and fingerprint primitives.

Tests cover:
- Jenkins hash known values, range, determinism and seed sensitivity
- Shingle extraction
- SimHash whitespace insensitivity and single-shingle identity
- Hamming distance properties
"""

from __future__ import annotations

import unittest

from reftracker.infrastructure.hashing import (
    MASK_32,
    create_shingles,
    hamming,
    jenkins_hash,
    sim_hash,
)


class TestJenkinsHash(unittest.TestCase):

    def test_result_fits_in_32_bits(self):
        for data in (b"", b"a", b"hello world", b"x" * 12, b"y" * 25, "ünïcode".encode("utf-8")):
            value = jenkins_hash(data)
            self.assertGreaterEqual(value, 0)
            self.assertLessEqual(value, MASK_32)

    def test_known_values(self):
        """Values match the C lookup2 reference implementation."""
        self.assertEqual(jenkins_hash(b""), 3175731469)
        self.assertEqual(jenkins_hash(b"a"), 703514648)
        self.assertEqual(jenkins_hash(b"ab"), 2558110785)
        self.assertEqual(jenkins_hash(b"hello world", seed=7), 875649941)
        self.assertEqual(jenkins_hash(b"0123456789abcdefghijklmnopq"), 1742943708)

    def test_deterministic(self):
        self.assertEqual(jenkins_hash(b"reference"), jenkins_hash(b"reference"))

    def test_different_inputs_differ(self):
        self.assertNotEqual(jenkins_hash(b"ab"), jenkins_hash(b"ba"))
        self.assertNotEqual(jenkins_hash(b"a" * 11), jenkins_hash(b"a" * 12))

    def test_seed_changes_result(self):
        self.assertNotEqual(jenkins_hash(b"seeded", seed=0), jenkins_hash(b"seeded", seed=1))

    def test_tail_lengths_all_hash(self):
        """Every tail length from 0 to 11 bytes after a full block is handled."""
        values = {jenkins_hash(b"0123456789ab" + b"z" * n) for n in range(12)}
        self.assertEqual(len(values), 12)


class TestCreateShingles(unittest.TestCase):

    def test_overlapping_pairs(self):
        self.assertEqual(create_shingles("abcd"), ["ab", "bc", "cd"])

    def test_includes_final_shingle(self):
        self.assertEqual(create_shingles("abc", 3), ["abc"])

    def test_short_text_has_no_shingles(self):
        self.assertEqual(create_shingles("a"), [])
        self.assertEqual(create_shingles(""), [])

    def test_invalid_size_raises(self):
        with self.assertRaises(ValueError):
            create_shingles("abc", 0)


class TestSimHash(unittest.TestCase):

    def test_whitespace_is_ignored(self):
        self.assertEqual(sim_hash("total = a + b"), sim_hash("total=a+b"))
        self.assertEqual(sim_hash("  x\ty\n"), sim_hash("xy"))

    def test_text_without_shingles_hashes_to_zero(self):
        self.assertEqual(sim_hash(""), 0)
        self.assertEqual(sim_hash("a"), 0)

    def test_single_shingle_equals_its_jenkins_hash(self):
        """With one shingle every bit votes exactly once."""
        self.assertEqual(sim_hash("ab"), jenkins_hash(b"ab"))

    def test_fits_in_hash_size(self):
        self.assertLess(sim_hash("def compute(items):", hash_size=16), 1 << 16)

    def test_identical_text_same_fingerprint(self):
        text = "return sum(item.price for item in items)"
        self.assertEqual(sim_hash(text), sim_hash(text))

    def test_invalid_hash_size_raises(self):
        with self.assertRaises(ValueError):
            sim_hash("abc", hash_size=64)


class TestHamming(unittest.TestCase):

    def test_counts_differing_bits(self):
        self.assertEqual(hamming(0b0101, 0b0011), 2)
        self.assertEqual(hamming(0, MASK_32), 32)

    def test_identity_is_zero(self):
        value = sim_hash("for item in items:")
        self.assertEqual(hamming(value, value), 0)

    def test_symmetric(self):
        a = sim_hash("first line of code")
        b = sim_hash("second line of code")
        self.assertEqual(hamming(a, b), hamming(b, a))


if __name__ == "__main__":
    unittest.main()
