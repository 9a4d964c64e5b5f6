"""reftracker - keep references to code valid across git history.

Resolves what happened to a referenced file, directory, line or line range
since the revision the reference was captured at.

Usage:
    python -m reftracker <command> [options]
    reftracker <command> [options]

Structure:
    reftracker/
    ├── __main__.py              # Entry point dispatcher
    ├── domain/                  # Domain models (parse-once pattern)
    │   ├── diff.py              # Line, DiffHunk (diff hunk processor)
    │   ├── history.py           # HistoryHop, ChangeRecord, HistoryLog
    │   ├── changes.py           # FileChange, LineChange, LinesChange
    │   ├── reference.py         # TrackedReference
    │   ├── settings.py          # TrackerSettings
    │   └── errors.py            # TrackingError taxonomy
    ├── infrastructure/          # Pure algorithms
    │   ├── hashing.py           # Jenkins hash, SimHash, Hamming
    │   ├── similarity.py        # Levenshtein, cosine
    │   └── line_relocation.py   # Line relocator
    ├── services/                # Orchestration and git access
    │   ├── git_operations.py
    │   ├── history_resolver.py
    │   └── change_tracker.py
    └── commands/                # Thin command orchestrators
        ├── track.py
        └── parse_diff.py
"""
