"""Command implementations for the reftracker CLI."""
