"""Workflow graph definitions."""

from .project_input_graph import (
    PROJECT_PROPERTIES,
    ProjectInputState,
    create_project_input_workflow,
)

__all__ = ["PROJECT_PROPERTIES", "ProjectInputState", "create_project_input_workflow"]
