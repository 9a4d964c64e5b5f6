"""String similarity primitives used to score line candidates.

Both measures return a float in [0.0, 1.0] where 1.0 means identical.
"""

from __future__ import annotations

import math
import re
from collections import Counter

from rapidfuzz.distance import Levenshtein

from reftracker.domain.diff import Line

DEFAULT_COSINE_SHINGLE_SIZE = 3

_WHITESPACE_PATTERN = re.compile(r"\s+")


def levenshtein_similarity(first: str, second: str) -> float:
    """Edit distance normalized by the longer string's length, inverted.

    Two empty strings are identical and score 1.0.
    """
    return Levenshtein.normalized_similarity(first, second)


def _profile(text: str, k: int) -> Counter:
    compact = _WHITESPACE_PATTERN.sub(" ", text)
    return Counter(compact[i:i + k] for i in range(len(compact) - k + 1))


def cosine_similarity(first: str, second: str, k: int = DEFAULT_COSINE_SHINGLE_SIZE) -> float:
    """Cosine of the angle between the k-gram count profiles of two strings.

    Runs of whitespace count as a single space. An empty side, or a string
    too short to hold a single k-gram, scores 0.0.
    """
    if k < 1:
        raise ValueError(f"k must be at least 1: {k}")
    if not first or not second:
        return 0.0
    if first == second:
        return 1.0 if len(first) >= k else 0.0

    left = _profile(first, k)
    right = _profile(second, k)
    if not left or not right:
        return 0.0

    dot = sum(count * right[shingle] for shingle, count in left.items() if shingle in right)
    norm = math.sqrt(sum(c * c for c in left.values())) * math.sqrt(sum(c * c for c in right.values()))
    return min(1.0, dot / norm)


def context_similarity(first: Line, second: Line, k: int = DEFAULT_COSINE_SHINGLE_SIZE) -> float:
    """Cosine similarity of the joined contexts of two lines."""
    return cosine_similarity(first.joined_context, second.joined_context, k)
