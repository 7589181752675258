"""Execution helpers for workflow nodes."""

from .progress_reporter import (
    MCPProgressReporter,
    NoOpProgressReporter,
    ProgressReporter,
    create_progress_reporter,
)

__all__ = [
    "ProgressReporter",
    "NoOpProgressReporter",
    "MCPProgressReporter",
    "create_progress_reporter",
]
