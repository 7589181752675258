"""Shared fixtures for the workflow engine test suite."""

import sys
from pathlib import Path
from typing import Dict, List, Tuple

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from mcp_workflow.config.workflow_config import WorkflowConfig
from mcp_workflow.storage.file_system import FileSystemOperations


class MockFileSystem(FileSystemOperations):
    """
    In-memory filesystem recording every call.

    ``fail_on`` maps an operation name to an exception raised the next time that
    operation runs, which lets tests simulate a crash between the temp file
    write and the rename.
    """

    def __init__(self):
        self.files: Dict[str, str] = {}
        self.directories = set()
        self.calls: List[Tuple[str, str]] = []
        self.fail_on: Dict[str, Exception] = {}

    def _record(self, operation: str, path) -> None:
        self.calls.append((operation, str(path)))
        if operation in self.fail_on:
            raise self.fail_on.pop(operation)

    def exists(self, path) -> bool:
        self._record("exists", path)
        return str(path) in self.files or str(path) in self.directories

    def is_file(self, path) -> bool:
        self._record("is_file", path)
        return str(path) in self.files

    def read_text(self, path) -> str:
        self._record("read_text", path)
        if str(path) not in self.files:
            raise FileNotFoundError(str(path))
        return self.files[str(path)]

    def write_text(self, path, content: str) -> None:
        self._record("write_text", path)
        self.files[str(path)] = content

    def mkdir(self, path) -> None:
        self._record("mkdir", path)
        self.directories.add(str(path))

    def replace(self, source, target) -> None:
        self._record("replace", source)
        self.files[str(target)] = self.files.pop(str(source))

    def unlink(self, path) -> None:
        self._record("unlink", path)
        if str(path) not in self.files:
            raise FileNotFoundError(str(path))
        del self.files[str(path)]


@pytest.fixture
def mock_fs():
    """Recording in-memory filesystem."""
    return MockFileSystem()


@pytest.fixture
def test_config(tmp_path):
    """Configuration for the in-memory test environment."""
    return WorkflowConfig(environment="test", project_path=str(tmp_path))


@pytest.fixture
def production_config(tmp_path):
    """Configuration persisting state under a temporary project directory."""
    return WorkflowConfig(environment="production", project_path=str(tmp_path))
