"""Services for reftracker.

Services orchestrate git access and the pure algorithms:
- GitOperationsService - every git subprocess call
- HistoryResolver - file and directory history from change logs
- ChangeTrackerService - tracking entry point for all reference kinds
"""

from reftracker.services.change_tracker import ChangeTrackerService, TrackingResult
from reftracker.services.git_operations import (
    GitDiffError,
    GitFileNotFoundError,
    GitLogError,
    GitOperationError,
    GitOperationsService,
    GitRepositoryError,
)
from reftracker.services.history_resolver import HistoryResolver

__all__ = [
    "ChangeTrackerService",
    "GitDiffError",
    "GitFileNotFoundError",
    "GitLogError",
    "GitOperationError",
    "GitOperationsService",
    "GitRepositoryError",
    "HistoryResolver",
    "TrackingResult",
]
