"""Track command - report what happened to references since their anchor.

Thin command that builds the tracking service for a repository, tracks
every reference independently and prints one result per reference.
"""

from __future__ import annotations

import json
import sys

from reftracker.domain.changes import change_label
from reftracker.domain.reference import TrackedReference
from reftracker.domain.settings import TrackerSettings
from reftracker.services.change_tracker import ChangeTrackerService, TrackingResult
from reftracker.services.git_operations import GitOperationsService, GitRepositoryError


def format_result_as_text(result: TrackingResult) -> str:
    change = result.change
    lines = [f"{result.reference}: {change_label(change.change_type)}"]
    if result.is_invalid:
        lines.append(f"  Error: {change.error_message}")
        return "\n".join(lines)

    if hasattr(change, "after_paths"):
        for path in change.after_paths:
            lines.append(f"  -> {path}")
    else:
        lines.append(f"  -> {change.after_path}")
    if result.requires_update:
        lines.append("  Reference needs updating")
    return "\n".join(lines)


def cmd_track(
    references: list[str],
    anchor_revision: str | None = None,
    is_directory: bool = False,
    repo_path: str = ".",
    config_file: str | None = None,
    output_format: str = "text",
) -> int:
    """Execute the track command.

    Args:
        references: References as `path`, `path#L12`, `path#L12-L18` or `dir/`
        anchor_revision: Revision the references were captured at
        is_directory: Treat plain paths as directories
        repo_path: Path to the git repository
        config_file: Optional YAML settings file
        output_format: 'text' (default) or 'json'

    Returns:
        Exit code (0 if every reference was tracked, 1 otherwise)
    """
    try:
        settings = TrackerSettings.from_file(config_file) if config_file else TrackerSettings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        parsed = [
            TrackedReference.from_string(value, anchor_revision, is_directory)
            for value in references
        ]
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    git_service = GitOperationsService(repo_path)
    if not git_service.is_git_repository():
        print(f"Error: Not a git repository: {repo_path}", file=sys.stderr)
        return 1

    service = ChangeTrackerService(git_service, settings)
    try:
        results = service.track_all(parsed)
    except GitRepositoryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if output_format == "json":
        print(json.dumps([result.to_dict() for result in results], indent=2))
    else:
        for result in results:
            print(format_result_as_text(result))

    return 1 if any(result.is_invalid for result in results) else 0
