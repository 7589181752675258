"""Configuration for the workflow engine."""

from .workflow_config import WorkflowConfig, WorkflowEnvironment, StateBackend

__all__ = ["WorkflowConfig", "WorkflowEnvironment", "StateBackend"]
