"""Conditional edge logic for workflow routing.

Routers return the next node's name as a string.
"""

import logging
from typing import Any, Dict

from ..models.workflow_models import PropertyMetadataCollection

logger = logging.getLogger(__name__)


class CheckPropertiesFulfilledRouter:
    """
    Routes on whether every required property is present in the state.

    A property counts as present when its state value is truthy.
    """

    def __init__(
        self,
        properties_fulfilled_node: str,
        properties_unfulfilled_node: str,
        required_properties: PropertyMetadataCollection,
    ):
        """
        Initialize router.

        Args:
            properties_fulfilled_node: Next node when all properties are present
            properties_unfulfilled_node: Next node when any property is missing
            required_properties: Properties to check
        """
        self.properties_fulfilled_node = properties_fulfilled_node
        self.properties_unfulfilled_node = properties_unfulfilled_node
        self.required_properties = required_properties

    def __call__(self, state: Dict[str, Any]) -> str:
        return self.execute(state)

    def execute(self, state: Dict[str, Any]) -> str:
        unfulfilled = [name for name in self.required_properties if not state.get(name)]

        if unfulfilled:
            logger.debug(
                f"Properties not fulfilled {unfulfilled}, "
                f"routing to {self.properties_unfulfilled_node}"
            )
            return self.properties_unfulfilled_node

        logger.debug(
            f"All {len(self.required_properties)} properties fulfilled, "
            f"routing to {self.properties_fulfilled_node}"
        )
        return self.properties_fulfilled_node
