"""Filesystem access and well-known directory layout."""

from .file_system import FileSystemOperations, LocalFileSystemOperations
from .well_known_directory import (
    WELL_KNOWN_DIR_NAME,
    WORKFLOW_LOG_FILE,
    WORKFLOW_STATE_DB,
    WORKFLOW_STATE_FILE,
    WellKnownDirectoryManager,
)

__all__ = [
    "FileSystemOperations",
    "LocalFileSystemOperations",
    "WellKnownDirectoryManager",
    "WELL_KNOWN_DIR_NAME",
    "WORKFLOW_STATE_FILE",
    "WORKFLOW_STATE_DB",
    "WORKFLOW_LOG_FILE",
]
