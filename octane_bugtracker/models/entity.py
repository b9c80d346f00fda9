"""Octane entity catalog.

Lists the Octane entities used by this integration (not every existing
Octane entity) and builds the reference objects used to link entities.
"""

from enum import Enum
from typing import Dict


class EntityKind(Enum):
    """Octane entity kinds with their REST naming."""

    WORK_ITEM_ROOT = "work_item_root"
    EPIC = "epic"
    FEATURE = "feature"
    DEFECT = "defect"
    PHASE = "phase"
    WORK_ITEM = "work_item"
    COMMENT = "comment"

    @property
    def singular(self) -> str:
        """Entity type name as used in the 'type' property of references."""
        return self.name.lower()

    @property
    def plural(self) -> str:
        """Collection name as used in REST URL paths."""
        return self.singular + "s"

    def reference_for(self, entity_id: str) -> Dict[str, str]:
        """Build a reference object pointing to the entity with the given id.

        Args:
            entity_id: Octane entity id

        Returns:
            Dictionary of the form {"type": singular, "id": entity_id}
        """
        return {"type": self.singular, "id": entity_id}
