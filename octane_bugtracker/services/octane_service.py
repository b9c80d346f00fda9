"""Octane API service for defects, comments and phases."""

import logging
from typing import Dict, Any

from ..config.auth import OctaneTransport
from ..exceptions import ResponseError
from ..models.entity import EntityKind
from .query_service import OctaneQueryService

logger = logging.getLogger(__name__)


def wrap_as_data_array(entity: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap a single entity as the only entry in a 'data' array, as Octane requires."""
    return {"data": [entity]}


class OctaneService:
    """Service for Octane defect operations on top of a single transport."""

    def __init__(self, transport: OctaneTransport):
        """Initialize Octane service.

        Args:
            transport: Transport for the current operation
        """
        self.transport = transport
        self.query = OctaneQueryService(transport)

    def validate_connection(self) -> None:
        """Perform a lightweight request to validate URL, workspace and credentials."""
        self.transport.request(
            'GET', EntityKind.WORK_ITEM_ROOT.plural, params={'fields': 'id', 'limit': 1}
        )

    def file_bug(self, bug_contents: Dict[str, Any]) -> str:
        """Submit a defect to Octane.

        Args:
            bug_contents: Fields of a single defect (parent, phase, name, description)

        Returns:
            Id of the created defect
        """
        payload = wrap_as_data_array(bug_contents)
        logger.info("fileBug: %s", payload)
        result = self.transport.request('POST', EntityKind.DEFECT.plural, body=payload)
        try:
            return str(result['data'][0]['id'])
        except (KeyError, IndexError, TypeError) as e:
            raise ResponseError("Octane did not return the id of the created defect") from e

    def add_comment(self, defect_id: str, comment: str) -> None:
        """Add the given comment to a defect."""
        payload = wrap_as_data_array({
            "owner_work_item": EntityKind.DEFECT.reference_for(defect_id),
            "text": comment,
        })
        self.transport.request('POST', EntityKind.COMMENT.plural, body=payload)

    def transition_to_phase(self, defect_id: str, phase_id: str) -> None:
        """Move a defect to the given phase."""
        payload = {"phase": EntityKind.PHASE.reference_for(phase_id)}
        self.transport.request('PUT', f"{EntityKind.DEFECT.plural}/{defect_id}", body=payload)

    def _get_phase_for_defect(self, defect_id: str) -> Dict[str, Any]:
        result = self.transport.request(
            'GET', f"{EntityKind.DEFECT.plural}/{defect_id}", params={'fields': 'phase'}
        )
        phase = result.get('phase')
        if not isinstance(phase, dict):
            raise ResponseError(f"Defect {defect_id} response does not contain a phase")
        return phase

    def get_phase_id_for_defect(self, defect_id: str) -> str:
        """Get the current phase id of a defect."""
        phase = self._get_phase_for_defect(defect_id)
        if 'id' not in phase:
            raise ResponseError(f"Phase of defect {defect_id} has no id")
        return str(phase['id'])

    def get_phase_name_for_defect(self, defect_id: str) -> str:
        """Get the current phase name of a defect, if Octane returned one."""
        phase = self._get_phase_for_defect(defect_id)
        return str(phase.get('name') or phase.get('id', ''))
