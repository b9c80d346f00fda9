"""Octane bug tracker engine as seen by a bug tracker host.

Every operation authenticates with the credentials passed in, opens its own
transport and closes it again before returning, on success and failure
alike. Transports are never shared between operations.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Union

from ..config.auth import OctaneTransport
from ..config.connection import (
    ConnectionConfig,
    Credentials,
    ProxyConfig,
    create_connection_config,
    create_proxy_config,
)
from ..models.bug import Bug, PhaseClassification
from ..models.bug_param import BugParams
from ..utils.formatters import format_deep_link
from .bug_param_service import OctaneBugParamService
from .bug_state_service import OctaneBugStateService
from .octane_service import OctaneService

logger = logging.getLogger(__name__)

TransportFactory = Callable[[ConnectionConfig, Credentials, Optional[ProxyConfig]], OctaneTransport]


class OctaneBugTracker:
    """Files, inspects and reopens Octane defects for a bug tracker host."""

    def __init__(
        self,
        config: Mapping[str, str],
        transport_factory: TransportFactory = OctaneTransport,
        bug_param_service: Optional[OctaneBugParamService] = None,
        bug_state_service: Optional[OctaneBugStateService] = None,
    ):
        """Initialize the bug tracker from a host configuration map.

        Args:
            config: Host configuration (URL, SHARED_SPACE_ID, WORKSPACE_ID, proxy settings)
            transport_factory: Creates the transport for each operation

        Raises:
            ConfigurationError: If the configuration is incomplete or invalid
        """
        self.connection_config = create_connection_config(config)
        self.proxy_config = create_proxy_config(config, self.connection_config.base_url)
        self.transport_factory = transport_factory
        self.bug_params = bug_param_service or OctaneBugParamService()
        self.bug_state = bug_state_service or OctaneBugStateService()

    @contextmanager
    def open_service(self, credentials: Credentials) -> Iterator[OctaneService]:
        """Open a transport for one operation and close it when the block exits."""
        transport = self.transport_factory(self.connection_config, credentials, self.proxy_config)
        try:
            yield OctaneService(transport)
        finally:
            transport.close()

    def validate_connection(self, credentials: Credentials) -> None:
        with self.open_service(credentials) as service:
            service.validate_connection()

    def get_parameters(self, credentials: Credentials) -> BugParams:
        with self.open_service(credentials) as service:
            return self.bug_params.get_bug_parameters(service.query)

    def on_parameter_change(self, credentials: Credentials, changed_param_identifier: str,
                            current_values: BugParams) -> BugParams:
        with self.open_service(credentials) as service:
            return self.bug_params.on_parameter_change(service.query, changed_param_identifier, current_values)

    def build_submission(self, credentials: Credentials,
                         values: Union[BugParams, Mapping[str, Optional[str]]]) -> Dict[str, Any]:
        with self.open_service(credentials) as service:
            return self.bug_params.build_submission(service.query, values)

    def file_bug(self, credentials: Credentials, bug_contents: Dict[str, Any]) -> str:
        """Submit prepared defect contents and return the new defect id."""
        with self.open_service(credentials) as service:
            return service.file_bug(bug_contents)

    def submit_bug(self, credentials: Credentials,
                   values: Union[BugParams, Mapping[str, Optional[str]]]) -> Bug:
        """Build the defect contents from parameter values and file the defect."""
        with self.open_service(credentials) as service:
            bug_contents = self.bug_params.build_submission(service.query, values)
            defect_id = service.file_bug(bug_contents)
        logger.info("Filed Octane defect %s", defect_id)
        return Bug(bug_id=defect_id, bug_status=bug_contents["phase"]["id"])

    def fetch_status(self, credentials: Credentials, defect_id: str) -> str:
        with self.open_service(credentials) as service:
            return self.bug_state.get_bug_status(service, defect_id)

    def fetch_bug(self, credentials: Credentials, defect_id: str) -> Bug:
        with self.open_service(credentials) as service:
            return self.bug_state.get_bug(service, defect_id)

    def fetch_phase_name(self, credentials: Credentials, defect_id: str) -> str:
        """Get the display name of the current defect phase."""
        with self.open_service(credentials) as service:
            return service.get_phase_name_for_defect(defect_id)

    def classify(self, phase_id: str) -> PhaseClassification:
        return self.bug_state.classify(phase_id)

    def is_bug_open(self, bug: Bug) -> bool:
        return self.bug_state.is_bug_open(bug)

    def is_bug_closed(self, bug: Bug) -> bool:
        return self.bug_state.is_bug_closed(bug)

    def is_bug_closed_and_can_reopen(self, bug: Bug) -> bool:
        return self.bug_state.is_bug_closed_and_can_reopen(bug)

    def reopen(self, credentials: Credentials, defect_id: str, comment: str,
               phase_id: Optional[str] = None) -> None:
        """Reopen a defect, fetching its current phase first unless given."""
        with self.open_service(credentials) as service:
            if phase_id is None:
                phase_id = self.bug_state.get_bug_status(service, defect_id)
            self.bug_state.reopen_bug(service, defect_id, phase_id, comment)

    def add_comment(self, credentials: Credentials, defect_id: str, comment: str) -> None:
        with self.open_service(credentials) as service:
            service.add_comment(defect_id, comment)

    def deep_link(self, defect_id: str) -> str:
        config = self.connection_config
        return format_deep_link(config.base_url, config.shared_space_id, config.workspace_id, defect_id)
