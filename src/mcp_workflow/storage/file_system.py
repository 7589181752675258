"""Filesystem operations used by the well-known directory and state persistence."""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


class FileSystemOperations(ABC):
    """
    Minimal filesystem interface.

    Injected into the persistence layer so tests can record calls or simulate
    failures without touching the disk.
    """

    @abstractmethod
    def exists(self, path: PathLike) -> bool:
        pass

    @abstractmethod
    def is_file(self, path: PathLike) -> bool:
        pass

    @abstractmethod
    def read_text(self, path: PathLike) -> str:
        """Read a UTF-8 file. Raises FileNotFoundError if it does not exist."""
        pass

    @abstractmethod
    def write_text(self, path: PathLike, content: str) -> None:
        pass

    @abstractmethod
    def mkdir(self, path: PathLike) -> None:
        """Create a directory and its parents; existing directories are fine."""
        pass

    @abstractmethod
    def replace(self, source: PathLike, target: PathLike) -> None:
        """Atomically move ``source`` over ``target`` (same filesystem)."""
        pass

    @abstractmethod
    def unlink(self, path: PathLike) -> None:
        """Delete a file. Raises FileNotFoundError if it does not exist."""
        pass


class LocalFileSystemOperations(FileSystemOperations):
    """FileSystemOperations backed by the local disk."""

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def is_file(self, path: PathLike) -> bool:
        return Path(path).is_file()

    def read_text(self, path: PathLike) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_text(self, path: PathLike, content: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

    def mkdir(self, path: PathLike) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def replace(self, source: PathLike, target: PathLike) -> None:
        os.replace(source, target)

    def unlink(self, path: PathLike) -> None:
        Path(path).unlink()
