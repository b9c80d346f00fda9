"""Octane defect phase classification and reopen transition."""

import logging
from typing import Optional

from ..exceptions import PreconditionError
from ..models.bug import Bug, PhaseClassification, PhaseStatus
from .octane_service import OctaneService

logger = logging.getLogger(__name__)

PHASE_ID_PREFIX = "phase.defect."

# Defect phase ids in a default Octane installation, as returned by
# phases?fields=id&query="entity EQ 'defect'"
OPEN_PHASE_IDS = frozenset({
    "phase.defect.new",
    "phase.defect.opened",
    "phase.defect.deferred",
})

CLOSED_PHASE_IDS = frozenset({
    "phase.defect.rejected",
    "phase.defect.fixed",
    "phase.defect.proposeclose",
    "phase.defect.closed",
})

TRANSITIONS_TO_OPEN = {
    "phase.defect.fixed": "phase.defect.opened",
}


def normalize_phase_id(phase_id: Optional[str]) -> Optional[str]:
    """Expand a bare phase name like 'fixed' to its Octane id 'phase.defect.fixed'."""
    if phase_id is None:
        return None
    phase_id = phase_id.strip()
    if phase_id and '.' not in phase_id:
        return PHASE_ID_PREFIX + phase_id.lower()
    return phase_id


class OctaneBugStateService:
    """Maps Octane defect phases to open/closed/reopenable bug states."""

    def classify(self, phase_id: Optional[str]) -> PhaseClassification:
        """Classify a defect phase.

        Args:
            phase_id: Octane phase id, or bare phase name

        Returns:
            PhaseClassification with status, reopen flag and reopen target
        """
        normalized = normalize_phase_id(phase_id) or ''
        if normalized in OPEN_PHASE_IDS:
            return PhaseClassification(phase_id=normalized, status=PhaseStatus.OPEN)
        if normalized in CLOSED_PHASE_IDS:
            target = TRANSITIONS_TO_OPEN.get(normalized)
            return PhaseClassification(
                phase_id=normalized,
                status=PhaseStatus.CLOSED,
                can_reopen=target is not None,
                reopen_target=target,
            )
        return PhaseClassification(phase_id=normalized, status=PhaseStatus.UNCLASSIFIED)

    def is_bug_open(self, bug: Bug) -> bool:
        return self.classify(bug.bug_status).status == PhaseStatus.OPEN

    def is_bug_closed(self, bug: Bug) -> bool:
        return self.classify(bug.bug_status).status == PhaseStatus.CLOSED

    def is_bug_closed_and_can_reopen(self, bug: Bug) -> bool:
        return self.classify(bug.bug_status).can_reopen

    def get_bug_status(self, service: OctaneService, defect_id: str) -> str:
        """Get the current phase id of a defect."""
        return service.get_phase_id_for_defect(defect_id)

    def get_bug(self, service: OctaneService, defect_id: str) -> Bug:
        return Bug(bug_id=defect_id, bug_status=self.get_bug_status(service, defect_id))

    def reopen_bug(self, service: OctaneService, defect_id: str, phase_id: str, comment: str) -> None:
        """Reopen a closed defect and explain why in a comment.

        The phase transition and the comment are two separate requests. If
        the comment fails, the defect stays reopened without the comment.

        Raises:
            PreconditionError: If the phase has no reopen transition; no
            request is sent in that case
        """
        classification = self.classify(phase_id)
        if not classification.can_reopen:
            raise PreconditionError(
                f"Defect {defect_id} in phase {classification.phase_id or phase_id} cannot be reopened"
            )
        logger.info("Reopening defect %s: %s -> %s",
                    defect_id, classification.phase_id, classification.reopen_target)
        service.transition_to_phase(defect_id, classification.reopen_target)
        service.add_comment(defect_id, comment)
