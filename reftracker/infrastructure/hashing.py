"""Hash and fingerprint primitives.

jenkins_hash is Bob Jenkins' 1996 32-bit hash ("lookup2"). sim_hash builds a
locality-sensitive fingerprint of a string from the Jenkins hashes of its
overlapping shingles: similar strings get fingerprints with a small Hamming
distance. All hash state is local to each call.
"""

from __future__ import annotations

import re

MASK_32 = 0xFFFFFFFF
GOLDEN_RATIO = 0x9E3779B9

DEFAULT_SHINGLE_SIZE = 2
DEFAULT_HASH_SIZE = 32

_WHITESPACE_PATTERN = re.compile(r"\s+")


# ============================================================
# Jenkins Hash
# ============================================================


def _mix(a: int, b: int, c: int) -> tuple[int, int, int]:
    """Reversibly mix three 32-bit values."""
    a = (a - b - c) & MASK_32
    a ^= c >> 13
    b = (b - c - a) & MASK_32
    b ^= (a << 8) & MASK_32
    c = (c - a - b) & MASK_32
    c ^= b >> 13
    a = (a - b - c) & MASK_32
    a ^= c >> 12
    b = (b - c - a) & MASK_32
    b ^= (a << 16) & MASK_32
    c = (c - a - b) & MASK_32
    c ^= b >> 5
    a = (a - b - c) & MASK_32
    a ^= c >> 3
    b = (b - c - a) & MASK_32
    b ^= (a << 10) & MASK_32
    c = (c - a - b) & MASK_32
    c ^= b >> 15
    return a, b, c


def _word(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset:offset + 4], "little")


def jenkins_hash(data: bytes, seed: int = 0) -> int:
    """Hash a byte buffer to an unsigned 32-bit value.

    The buffer is consumed in 12-byte blocks of three little-endian words;
    the 0-11 trailing bytes are folded in before the final mix, with the
    buffer length added to the third word.
    """
    a = b = GOLDEN_RATIO
    c = seed & MASK_32
    length = len(data)
    offset = 0

    while length - offset >= 12:
        a = (a + _word(data, offset)) & MASK_32
        b = (b + _word(data, offset + 4)) & MASK_32
        c = (c + _word(data, offset + 8)) & MASK_32
        a, b, c = _mix(a, b, c)
        offset += 12

    c = (c + length) & MASK_32

    # Tail: c's low byte is reserved for the length
    tail = data[offset:]
    for index, byte in enumerate(tail):
        if index < 4:
            a = (a + (byte << (8 * index))) & MASK_32
        elif index < 8:
            b = (b + (byte << (8 * (index - 4)))) & MASK_32
        else:
            c = (c + (byte << (8 * (index - 7)))) & MASK_32

    _, _, c = _mix(a, b, c)
    return c


# ============================================================
# SimHash
# ============================================================


def create_shingles(text: str, shingle_size: int = DEFAULT_SHINGLE_SIZE) -> list[str]:
    """Split text into overlapping substrings of shingle_size characters.

    Text shorter than shingle_size yields no shingles.
    """
    if shingle_size < 1:
        raise ValueError(f"shingle_size must be at least 1: {shingle_size}")
    return [text[i:i + shingle_size] for i in range(len(text) - shingle_size + 1)]


def sim_hash(
    text: str,
    hash_size: int = DEFAULT_HASH_SIZE,
    shingle_size: int = DEFAULT_SHINGLE_SIZE,
) -> int:
    """Compute the SimHash fingerprint of text with whitespace removed.

    Each shingle's Jenkins hash votes +1 on every bit it has set and -1 on
    every bit it has clear; bit i of the fingerprint is set when its vote
    total is positive. Text without shingles hashes to 0.
    """
    if not 1 <= hash_size <= 32:
        raise ValueError(f"hash_size must be between 1 and 32: {hash_size}")

    compact = _WHITESPACE_PATTERN.sub("", text)
    votes = [0] * hash_size

    for shingle in create_shingles(compact, shingle_size):
        value = jenkins_hash(shingle.encode("utf-8"))
        for bit in range(hash_size):
            if (value >> bit) & 1:
                votes[bit] += 1
            else:
                votes[bit] -= 1

    fingerprint = 0
    for bit, total in enumerate(votes):
        if total > 0:
            fingerprint |= 1 << bit
    return fingerprint


def hamming(a: int, b: int) -> int:
    """Number of differing bits between two fingerprints."""
    return bin(a ^ b).count("1")
