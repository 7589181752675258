"""Location of the per-project ``.magen`` directory holding workflow artifacts."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .file_system import FileSystemOperations, LocalFileSystemOperations

logger = logging.getLogger(__name__)

WELL_KNOWN_DIR_NAME = ".magen"

WORKFLOW_STATE_FILE = "workflow-state.json"
WORKFLOW_STATE_DB = "workflow-state.db"
WORKFLOW_LOG_FILE = "workflow.log"

WELL_KNOWN_FILES = (WORKFLOW_STATE_FILE, WORKFLOW_STATE_DB, WORKFLOW_LOG_FILE)


class WellKnownDirectoryManager:
    """
    Resolves and creates the well-known directory.

    The base directory is the explicit ``project_path``, else ``$PROJECT_PATH``,
    else the user's home directory.
    """

    def __init__(
        self,
        project_path: Optional[str] = None,
        file_system: Optional[FileSystemOperations] = None,
    ):
        self.file_system = file_system or LocalFileSystemOperations()

        base = project_path or os.getenv("PROJECT_PATH")
        base_dir = Path(base).resolve() if base else Path.home()
        self.directory = base_dir / WELL_KNOWN_DIR_NAME

    def ensure_well_known_directory(self) -> Path:
        """Create the directory if needed and return its path."""
        if not self.file_system.exists(self.directory):
            logger.debug(f"Creating well-known directory: {self.directory}")
            self.file_system.mkdir(self.directory)
        return self.directory

    def get_well_known_file_path(self, file_name: str) -> Path:
        """Path of a file inside the directory (the directory is created first)."""
        return self.ensure_well_known_directory() / file_name

    def well_known_directory_exists(self) -> bool:
        return self.file_system.exists(self.directory)

    def get_well_known_directory_info(self) -> Dict[str, Any]:
        """Directory status and the presence of each well-known file, for diagnostics."""
        exists = self.well_known_directory_exists()
        files = []
        for name in WELL_KNOWN_FILES:
            path = self.directory / name
            files.append(
                {
                    "name": name,
                    "path": str(path),
                    "exists": exists and self.file_system.exists(path),
                }
            )
        return {"exists": exists, "path": str(self.directory), "files": files}
