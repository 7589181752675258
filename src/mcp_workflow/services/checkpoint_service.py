"""Checkpointer lifecycle and workflow state persistence."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.checkpoint.memory import MemorySaver

from ..config.workflow_config import WorkflowConfig, WorkflowEnvironment
from ..core.checkpoints import JsonCheckpointSaver
from ..exceptions import CheckpointerConfigurationError
from ..storage.file_system import FileSystemOperations
from ..storage.well_known_directory import (
    WORKFLOW_STATE_DB,
    WORKFLOW_STATE_FILE,
    WellKnownDirectoryManager,
)
from .state_persistence import (
    JsonFileStatePersistence,
    SqliteStatePersistence,
    StatePersistence,
)

logger = logging.getLogger(__name__)


class CheckpointingStrategy(ABC):
    """How checkpointers are created and saved for one environment."""

    @abstractmethod
    async def create_checkpointer(self) -> BaseCheckpointSaver:
        pass

    @abstractmethod
    async def save_checkpointer_state(self, checkpointer: BaseCheckpointSaver) -> None:
        pass

    @abstractmethod
    async def clear_state(self) -> None:
        pass

    @abstractmethod
    async def state_exists(self) -> bool:
        pass


class EphemeralCheckpointing(CheckpointingStrategy):
    """In-memory checkpointing. Never touches the filesystem."""

    async def create_checkpointer(self) -> BaseCheckpointSaver:
        logger.debug("Creating MemorySaver for test environment")
        return MemorySaver()

    async def save_checkpointer_state(self, checkpointer: BaseCheckpointSaver) -> None:
        if isinstance(checkpointer, JsonCheckpointSaver):
            raise CheckpointerConfigurationError(
                "Invalid state: test environment should use MemorySaver, not JsonCheckpointSaver"
            )
        logger.debug("Skipping state persistence in test environment")

    async def clear_state(self) -> None:
        return None

    async def state_exists(self) -> bool:
        return False


class DurableCheckpointing(CheckpointingStrategy):
    """JsonCheckpointSaver whose exported state goes through a StatePersistence."""

    def __init__(self, persistence: StatePersistence):
        self.persistence = persistence

    async def create_checkpointer(self) -> BaseCheckpointSaver:
        """
        Create a JsonCheckpointSaver, restoring any persisted state.

        Returns:
            Checkpointer holding the previously saved threads, or an empty one
        """
        checkpointer = JsonCheckpointSaver()

        serialized = await self.persistence.read_state()
        if serialized:
            logger.info("Importing existing checkpointer state")
            checkpointer.import_state(serialized)
        else:
            logger.info("No existing state found, starting with fresh checkpointer")

        return checkpointer

    async def save_checkpointer_state(self, checkpointer: BaseCheckpointSaver) -> None:
        if not isinstance(checkpointer, JsonCheckpointSaver):
            logger.warning(
                "Checkpointer is not a JsonCheckpointSaver in production environment, "
                "skipping persistence"
            )
            return

        await self.persistence.write_state(checkpointer.export_state())
        logger.info("Checkpointer state successfully persisted")

    async def clear_state(self) -> None:
        await self.persistence.clear_state()

    async def state_exists(self) -> bool:
        return await self.persistence.state_exists()


class WorkflowStateManager:
    """
    Creates checkpointers and persists their state between tool calls.

    The environment is resolved once, at construction, into a checkpointing
    strategy:

    - ``test``: EphemeralCheckpointing (MemorySaver, no filesystem access at all)
    - ``production``: DurableCheckpointing (JsonCheckpointSaver backed by a JSON
      file or SQLite database in the well-known directory)
    """

    def __init__(
        self,
        config: Optional[WorkflowConfig] = None,
        environment: Optional[WorkflowEnvironment] = None,
        project_path: Optional[str] = None,
        persistence: Optional[StatePersistence] = None,
        file_system: Optional[FileSystemOperations] = None,
    ):
        """
        Initialize the state manager.

        Args:
            config: Workflow configuration (read from the environment if omitted)
            environment: Overrides ``config.environment``
            project_path: Overrides ``config.project_path``
            persistence: Explicit state persistence for the production environment
            file_system: Filesystem operations for the default JSON file persistence
        """
        self.config = config or WorkflowConfig()
        self.environment: WorkflowEnvironment = environment or self.config.environment

        if self.environment == "test":
            self.strategy: CheckpointingStrategy = EphemeralCheckpointing()
        else:
            self.strategy = DurableCheckpointing(
                persistence
                or self._create_persistence(project_path or self.config.project_path, file_system)
            )

        logger.debug(
            f"WorkflowStateManager using {type(self.strategy).__name__} "
            f"for environment '{self.environment}'"
        )

    def _create_persistence(
        self,
        project_path: Optional[str],
        file_system: Optional[FileSystemOperations],
    ) -> StatePersistence:
        directory = WellKnownDirectoryManager(project_path=project_path, file_system=file_system)
        if self.config.state_backend == "sqlite":
            return SqliteStatePersistence(directory.get_well_known_file_path(WORKFLOW_STATE_DB))
        return JsonFileStatePersistence(
            directory.get_well_known_file_path(WORKFLOW_STATE_FILE),
            file_system=directory.file_system,
        )

    async def create_checkpointer(self) -> BaseCheckpointSaver:
        """Create a checkpointer for the configured environment."""
        return await self.strategy.create_checkpointer()

    async def save_checkpointer_state(self, checkpointer: BaseCheckpointSaver) -> None:
        """
        Persist the checkpointer's state (production only).

        Raises:
            CheckpointerConfigurationError: If the test environment was handed a
                JsonCheckpointSaver
        """
        await self.strategy.save_checkpointer_state(checkpointer)

    async def clear_state(self) -> None:
        await self.strategy.clear_state()

    async def state_exists(self) -> bool:
        return await self.strategy.state_exists()
