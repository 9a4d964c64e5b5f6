"""Line relocation across a chain of diff hunks.

Follows a line from the anchor revision through every consecutive revision
pair of a file's history and reports where it ended up.

Phase 1: Candidate ranking. A deleted line is compared with every added line
of the same hunk using SimHash fingerprints of the line contents and of their
context windows; candidates are ordered by weighted Hamming distance.

Phase 2: Mapping. Candidates are scored by a weighted blend of Levenshtein
similarity of the contents and cosine similarity of the contexts. The best
candidate is accepted above the acceptance threshold.

Phase 3: Split detection. When no single added line matches, the deleted line
may have been split over several consecutive added lines.

Phase 4: Shifting. A line that was not deleted moves by the number of lines
added and deleted at or before it.

Range tracking runs the single-line algorithm for every line of the range and
groups the surviving positions into runs of consecutive line numbers.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from reftracker.domain.changes import (
    FileChange,
    LineChange,
    LineChangeType,
    LinesChange,
    LinesChangeType,
)
from reftracker.domain.diff import DiffHunk, Line
from reftracker.domain.settings import TrackerSettings
from reftracker.infrastructure.hashing import hamming, sim_hash
from reftracker.infrastructure.similarity import context_similarity, levenshtein_similarity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoredCandidate:
    """An added line ranked against a deleted line by weighted Hamming distance."""

    line: Line
    distance: float


@dataclass
class LineTrace:
    """Where a line ended up after walking the hunks.

    Attributes:
        line_number: Final line number (the last known number if deleted)
        modifications: Number of hunks that changed the line's position
        deleted: Whether the line was deleted without a match
        final_hunk: Last hunk processed, stripped
    """

    line_number: int
    modifications: int = 0
    deleted: bool = False
    final_hunk: DiffHunk | None = None


def _strip_lines(lines: list[Line]) -> list[Line]:
    return [line.stripped() for line in lines]


def round_score(score: float, step: float) -> float:
    """Round half-up to the nearest multiple of step."""
    steps_per_unit = 1.0 / step
    return round(math.floor(score * steps_per_unit + 0.5) / steps_per_unit, 10)


# ============================================================
# Phase 1: Candidate Ranking
# ============================================================


def build_candidate_list(
    deleted_line: Line,
    added_lines: list[Line],
    settings: TrackerSettings,
) -> list[ScoredCandidate]:
    """Rank added lines by fingerprint distance to deleted_line.

    The sort is stable, so candidates at equal distance keep their order
    from the diff.
    """

    def fingerprint(text: str) -> int:
        return sim_hash(text, settings.sim_hash_bits, settings.shingle_size)

    deleted_context = fingerprint(deleted_line.joined_context)
    deleted_content = fingerprint(deleted_line.content)

    candidates = []
    for line in added_lines:
        context_distance = hamming(deleted_context, fingerprint(line.joined_context))
        content_distance = hamming(deleted_content, fingerprint(line.content))
        distance = (
            settings.hamming_context_weight * context_distance
            + settings.hamming_content_weight * content_distance
        )
        candidates.append(ScoredCandidate(line, distance))

    return sorted(candidates, key=lambda c: c.distance)


# ============================================================
# Phase 2: Mapping
# ============================================================


def score_candidate(deleted_line: Line, candidate: Line, settings: TrackerSettings) -> float:
    """Blend content and context similarity into a single score."""
    content_score = levenshtein_similarity(deleted_line.content, candidate.content)
    context_score = context_similarity(deleted_line, candidate, settings.cosine_shingle_size)
    score = (
        settings.score_content_weight * content_score
        + settings.score_context_weight * context_score
    )
    if settings.round_scores:
        score = round_score(score, settings.score_rounding_step)
    return score


def map_deleted_line(
    deleted_line: Line,
    candidates: list[ScoredCandidate],
    settings: TrackerSettings,
) -> Line | None:
    """Pick the best scoring candidate, if it clears the acceptance threshold.

    Only a strictly better score replaces the current best, so the earliest
    candidate wins ties.
    """
    best_score = settings.mapping_floor
    best_line: Line | None = None

    for candidate in candidates:
        score = score_candidate(deleted_line, candidate.line, settings)
        if score > best_score:
            best_score = score
            best_line = candidate.line

    if best_line is not None and best_score >= settings.acceptance_threshold:
        logger.debug("Mapped %s to %s (score %.2f)", deleted_line, best_line, best_score)
        return best_line
    return None


# ============================================================
# Phase 3: Split Detection
# ============================================================


def detect_line_split(
    deleted_content: str,
    added_lines: list[Line],
    settings: TrackerSettings,
) -> tuple[Line | None, int]:
    """Find consecutive added lines whose concatenation rebuilds deleted_content.

    Returns:
        (first line of the split, number of lines it spans), or (None, 0)
        when no split reaches the split threshold over more than one line
    """
    best_score = -1.0
    best_line: Line | None = None
    best_count = 0

    for i in range(len(added_lines) - 1):
        count = 1
        previous_score = levenshtein_similarity(deleted_content, added_lines[i].content)
        concatenated = added_lines[i].content

        for j in range(i + 1, len(added_lines)):
            if not added_lines[j].content.strip():
                break
            concatenated += added_lines[j].content
            count += 1

            score = levenshtein_similarity(deleted_content, concatenated)
            if score >= best_score:
                best_score = score
                best_line = added_lines[i]
                best_count = count

            if score <= previous_score:
                break
            previous_score = score

    if best_score >= settings.split_threshold and best_count > 1:
        logger.debug("Line %r split over %d lines from %s", deleted_content, best_count, best_line)
        return best_line, best_count
    return None, 0


# ============================================================
# Phase 4: Shifting
# ============================================================


def shift_unchanged_line(line_number: int, hunk: DiffHunk) -> int:
    """Move a surviving line by the lines added and deleted at or before it.

    Added and deleted lines are merged in line-number order and walked in
    pairs; an added line directly followed by a deleted line at the same
    number is a replacement and does not shift anything.
    """
    merged = [("a", line) for line in hunk.added_lines] + [("d", line) for line in hunk.deleted_lines]
    merged.sort(key=lambda entry: entry[1].line_number)

    effective = []
    for i in range(0, len(merged) - 1, 2):
        (first_kind, first), (second_kind, second) = merged[i], merged[i + 1]
        if first_kind == "a" and second_kind == "d" and first.line_number == second.line_number:
            continue
        effective.append(merged[i])
        effective.append(merged[i + 1])
    if len(merged) % 2:
        effective.append(merged[-1])

    original = line_number
    for kind, line in effective:
        if kind == "a" and line.line_number <= line_number:
            line_number += 1
        elif kind == "d" and line.line_number <= original:
            line_number -= 1
    return line_number


# ============================================================
# Pipeline
# ============================================================


def relocate_line(line_number: int, hunks: list[DiffHunk], settings: TrackerSettings) -> LineTrace:
    """Follow one line through hunks, oldest first.

    Processing stops at the first hunk that deletes the line without a
    matching added line or split.
    """
    trace = LineTrace(line_number)

    for hunk in hunks:
        deleted_lines = _strip_lines(hunk.deleted_lines)
        added_lines = _strip_lines(hunk.added_lines)
        stripped = DiffHunk(added_lines, deleted_lines, hunk.file_path)
        trace.final_hunk = stripped

        deleted_line = stripped.find_deleted_line(trace.line_number)
        if deleted_line is None:
            shifted = shift_unchanged_line(trace.line_number, stripped)
            if shifted != trace.line_number:
                trace.modifications += 1
                trace.line_number = shifted
            continue

        match: Line | None = None
        if added_lines:
            candidates = build_candidate_list(deleted_line, added_lines, settings)
            match = map_deleted_line(deleted_line, candidates, settings)
        if match is None:
            match, _ = detect_line_split(deleted_line.content, added_lines, settings)

        if match is None:
            logger.debug("Line %d deleted in %s", trace.line_number, hunk.file_path or "hunk")
            trace.deleted = True
            break

        trace.modifications += 1
        trace.line_number = match.line_number

    return trace


def track_line(
    file_change: FileChange,
    line_number: int,
    original_content: str,
    hunks: list[DiffHunk],
    settings: TrackerSettings | None = None,
) -> LineChange:
    """Track a single line of the anchor revision to its latest location.

    Args:
        file_change: Resolved history of the file holding the line
        line_number: 1-indexed line number at the anchor revision
        original_content: Content of the line at the anchor revision
        hunks: One DiffHunk per consecutive revision pair, oldest first
        settings: Weights and thresholds; defaults when omitted

    Returns:
        LineChange with the relocated line, or no line if it was deleted
    """
    settings = settings or TrackerSettings()
    trace = relocate_line(line_number, hunks, settings)

    if trace.deleted:
        return LineChange(file_change, LineChangeType.DELETED)

    if trace.modifications == 0 or trace.line_number == line_number:
        change_type = LineChangeType.UNCHANGED
    else:
        change_type = LineChangeType.MOVED

    new_line = None
    if trace.final_hunk is not None:
        new_line = trace.final_hunk.find_added_line(trace.line_number)
    if new_line is None:
        new_line = Line(trace.line_number, original_content.strip())
    else:
        new_line = Line(new_line.line_number, new_line.content)

    return LineChange(file_change, change_type, new_line=new_line)


def group_consecutive_numbers(numbers: list[int]) -> list[list[int]]:
    """Split sorted numbers into runs of consecutive values."""
    groups: list[list[int]] = []
    for number in numbers:
        if groups and groups[-1][-1] + 1 == number:
            groups[-1].append(number)
        else:
            groups.append([number])
    return groups


def track_lines(
    file_change: FileChange,
    start_line: int,
    original_contents: list[str],
    hunks: list[DiffHunk],
    settings: TrackerSettings | None = None,
) -> LinesChange:
    """Track a contiguous range of anchor lines starting at start_line.

    Each line is tracked on its own. Surviving positions are deduplicated,
    sorted and grouped into runs; each relocated line carries the content
    of the original line that landed there.
    """
    settings = settings or TrackerSettings()

    # new line number -> original line number; later lines win collisions
    change_map: dict[int, int] = {}
    contents: dict[int, str] = {}
    any_moved = False

    for offset, content in enumerate(original_contents):
        original = start_line + offset
        contents[original] = content
        result = track_line(file_change, original, content, hunks, settings)
        if result.change_type == LineChangeType.DELETED or result.new_line is None:
            continue
        change_map[result.new_line.line_number] = original
        if result.new_line.line_number != original:
            any_moved = True

    if not change_map:
        return LinesChange(file_change, LinesChangeType.DELETED)

    groups = group_consecutive_numbers(sorted(change_map))
    new_lines = [
        [Line(number, contents[change_map[number]]) for number in group]
        for group in groups
    ]

    if len(groups) > 1:
        change_type = LinesChangeType.PARTIAL
    elif any_moved:
        change_type = LinesChangeType.FULL
    else:
        change_type = LinesChangeType.UNCHANGED

    return LinesChange(file_change, change_type, new_lines=new_lines)
