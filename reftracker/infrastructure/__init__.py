"""Pure algorithms for reftracker.

This layer holds no I/O:
- hashing - Jenkins hash, SimHash fingerprints, Hamming distance
- similarity - Levenshtein and cosine string similarity
- line_relocation - follows lines through a chain of diff hunks
"""

from .hashing import create_shingles, hamming, jenkins_hash, sim_hash
from .line_relocation import group_consecutive_numbers, track_line, track_lines
from .similarity import context_similarity, cosine_similarity, levenshtein_similarity

__all__ = [
    "context_similarity",
    "cosine_similarity",
    "create_shingles",
    "group_consecutive_numbers",
    "hamming",
    "jenkins_hash",
    "levenshtein_similarity",
    "sim_hash",
    "track_line",
    "track_lines",
]
