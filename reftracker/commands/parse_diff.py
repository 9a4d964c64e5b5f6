"""Parse diff command.

Thin command that orchestrates diff hunk parsing.
Reads a raw unified diff from stdin or file and outputs the added and deleted
lines with their context windows.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

from reftracker.domain.diff import DEFAULT_CONTEXT_LINES, DiffHunk


# ============================================================
# Input Functions
# ============================================================


def read_diff(input_file: str | Path | None = None) -> str:
    """Read diff content from stdin or a file.

    Raises:
        FileNotFoundError: If input_file doesn't exist
    """
    if input_file is None:
        return sys.stdin.read()
    with open(input_file) as f:
        return f.read()


# ============================================================
# Output Functions
# ============================================================


def format_hunk_as_json(hunk: DiffHunk) -> str:
    return json.dumps(hunk.to_dict(include_context=True), indent=2)


def format_hunk_as_text(hunk: DiffHunk) -> str:
    """Format a DiffHunk as human-readable text for debugging."""
    if hunk.is_empty:
        return "Empty diff (no changed lines found)"

    lines = [
        f"Deleted lines: {len(hunk.deleted_lines)}",
        f"Added lines: {len(hunk.added_lines)}",
        "",
    ]
    for marker, changed in (("-", hunk.deleted_lines), ("+", hunk.added_lines)):
        for line in changed:
            lines.append(f"{marker}{line.line_number:>5}: {line.content}")
            for context in line.context_lines or []:
                lines.append(f"  {context.line_number:>5}| {context.content}")
    return "\n".join(lines)


def cmd_parse_diff(
    input_file: str | None = None,
    context_lines: int = DEFAULT_CONTEXT_LINES,
    output_format: str = "json",
) -> int:
    """Parse a unified diff into added and deleted lines.

    Args:
        input_file: Optional path to read diff from. If None, reads from stdin.
        context_lines: Context window size around each changed line
        output_format: Output format - 'json' (default) or 'text' for debugging

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    # --------------------------------------------------------
    # 1. Read diff input
    # --------------------------------------------------------
    try:
        diff_content = read_diff(input_file)
    except FileNotFoundError:
        print(f"Input file not found: {input_file}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Failed to read diff: {e}", file=sys.stderr)
        return 1

    # --------------------------------------------------------
    # 2. Parse into domain model
    # --------------------------------------------------------
    try:
        hunk = DiffHunk.from_diff_output(diff_content, context_lines=context_lines)
    except ValueError as e:
        print(f"Failed to parse diff: {e}", file=sys.stderr)
        return 1

    # --------------------------------------------------------
    # 3. Output in requested format
    # --------------------------------------------------------
    if output_format == "text":
        print(format_hunk_as_text(hunk))
    else:
        print(format_hunk_as_json(hunk))

    return 0
