"""Checkpointing and routing building blocks.

Graph nodes live in ``mcp_workflow.core.nodes``; they depend on the services
package and are not re-exported here.
"""

from .checkpoints import JsonCheckpointSaver
from .edges import CheckPropertiesFulfilledRouter

__all__ = ["JsonCheckpointSaver", "CheckPropertiesFulfilledRouter"]
