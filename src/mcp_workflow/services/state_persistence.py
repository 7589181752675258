"""Durable storage for the serialized checkpoint store."""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiosqlite

from ..exceptions import InvalidSerializedStateError
from ..storage.file_system import FileSystemOperations, LocalFileSystemOperations

logger = logging.getLogger(__name__)


def validate_serialized_state(serialized: str) -> None:
    """
    Ensure the state about to be persisted is JSON.

    Raises:
        InvalidSerializedStateError: If ``serialized`` does not parse
    """
    try:
        json.loads(serialized)
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid JSON state provided for persistence, state not saved: {e}")
        raise InvalidSerializedStateError(f"Invalid serialized state: {e}") from e


class StatePersistence(ABC):
    """Stores one serialized state blob and hands it back on the next start."""

    @abstractmethod
    async def write_state(self, serialized: str) -> None:
        pass

    @abstractmethod
    async def read_state(self) -> Optional[str]:
        """Return the stored blob, or None when absent or unreadable as JSON."""
        pass

    @abstractmethod
    async def state_exists(self) -> bool:
        pass

    @abstractmethod
    async def clear_state(self) -> None:
        pass


class JsonFileStatePersistence(StatePersistence):
    """
    State persisted as a single JSON file.

    Writes go to ``<path>.tmp`` in the same directory and are then renamed over
    the canonical path, so a crash mid-write never leaves a partial file behind.
    Only one writer process is supported at a time.
    """

    def __init__(self, path: Path, file_system: Optional[FileSystemOperations] = None):
        """
        Initialize file persistence.

        Args:
            path: Canonical state file path
            file_system: Filesystem operations (local disk by default)
        """
        self.path = Path(path)
        self.file_system = file_system or LocalFileSystemOperations()

    @property
    def temp_path(self) -> Path:
        return self.path.with_name(self.path.name + ".tmp")

    async def write_state(self, serialized: str) -> None:
        """
        Atomically replace the stored state.

        Args:
            serialized: JSON document to store

        Raises:
            InvalidSerializedStateError: If the text is not JSON (nothing is written)
            OSError: If the filesystem operation fails
        """
        validate_serialized_state(serialized)

        try:
            self.file_system.mkdir(self.path.parent)
            logger.info(f"Saving checkpointer state to: {self.path}")
            self.file_system.write_text(self.temp_path, serialized)
            self.file_system.replace(self.temp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to save checkpointer state to {self.path}: {e}")
            raise

        logger.debug(f"Saved checkpointer state ({len(serialized)} chars) to {self.path}")

    async def read_state(self) -> Optional[str]:
        """
        Read the stored state.

        Returns:
            The stored JSON text, or None if the file is missing or corrupt

        Raises:
            OSError: For failures other than a missing file
        """
        try:
            content = self.file_system.read_text(self.path)
        except FileNotFoundError:
            logger.info(f"Checkpointer state file not found: {self.path}. Starting fresh.")
            return None
        except UnicodeDecodeError as e:
            logger.warning(f"State file {self.path} is not valid UTF-8, starting fresh: {e}")
            return None
        except OSError as e:
            logger.error(f"Failed to read checkpointer state from {self.path}: {e}")
            raise

        try:
            json.loads(content)
        except ValueError as e:
            logger.warning(f"Invalid JSON in state file {self.path}, starting fresh: {e}")
            return None

        logger.info(f"Read checkpointer state from: {self.path}")
        return content

    async def state_exists(self) -> bool:
        return self.file_system.is_file(self.path)

    async def clear_state(self) -> None:
        """Delete the state file; a missing file counts as cleared."""
        try:
            self.file_system.unlink(self.path)
            logger.info(f"Cleared checkpointer state file: {self.path}")
        except FileNotFoundError:
            logger.debug(f"State file already absent: {self.path}")
        except OSError as e:
            logger.error(f"Failed to clear state file {self.path}: {e}")
            raise


SCHEMA = """
CREATE TABLE IF NOT EXISTS workflow_state (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    state TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


class SqliteStatePersistence(StatePersistence):
    """State persisted as the single row of a SQLite table."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    async def _connect(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path)
        try:
            await conn.executescript(SCHEMA)
        except aiosqlite.Error:
            await conn.close()
            raise
        return conn

    async def write_state(self, serialized: str) -> None:
        validate_serialized_state(serialized)

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = await self._connect()
        try:
            await conn.execute(
                """
                INSERT INTO workflow_state (id, state, updated_at) VALUES (1, ?, ?)
                ON CONFLICT(id) DO UPDATE SET state = excluded.state,
                                              updated_at = excluded.updated_at
                """,
                (serialized, datetime.now(timezone.utc).isoformat()),
            )
            await conn.commit()
            logger.info(f"Saved checkpointer state to: {self.db_path}")
        except Exception as e:
            await conn.rollback()
            logger.error(f"Failed to save checkpointer state to {self.db_path}: {e}")
            raise
        finally:
            await conn.close()

    async def read_state(self) -> Optional[str]:
        if not self.db_path.is_file():
            logger.info(f"Checkpointer state database not found: {self.db_path}. Starting fresh.")
            return None

        try:
            conn = await self._connect()
            try:
                async with conn.execute("SELECT state FROM workflow_state WHERE id = 1") as cursor:
                    row = await cursor.fetchone()
            finally:
                await conn.close()
        except aiosqlite.DatabaseError as e:
            logger.warning(f"Unreadable state database {self.db_path}, starting fresh: {e}")
            return None

        if row is None:
            return None

        content = row[0]
        try:
            json.loads(content)
        except ValueError as e:
            logger.warning(f"Invalid JSON in state database {self.db_path}, starting fresh: {e}")
            return None
        return content

    async def state_exists(self) -> bool:
        if not self.db_path.is_file():
            return False
        conn = await self._connect()
        try:
            async with conn.execute("SELECT 1 FROM workflow_state WHERE id = 1") as cursor:
                return await cursor.fetchone() is not None
        finally:
            await conn.close()

    async def clear_state(self) -> None:
        if not self.db_path.is_file():
            return
        conn = await self._connect()
        try:
            await conn.execute("DELETE FROM workflow_state WHERE id = 1")
            await conn.commit()
            logger.info(f"Cleared checkpointer state in: {self.db_path}")
        finally:
            await conn.close()
