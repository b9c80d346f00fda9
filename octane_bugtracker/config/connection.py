"""Octane connection, proxy and credential configuration."""

import logging
from typing import Optional, Mapping, List
from urllib.parse import quote, urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..exceptions import ConfigurationError
from ..utils.formatters import normalize_value
from ..utils.validators import validate_port, validate_url

logger = logging.getLogger(__name__)

# Configuration field identifiers as used in the host configuration map
URL = "URL"
SHARED_SPACE_ID = "SHARED_SPACE_ID"
WORKSPACE_ID = "WORKSPACE_ID"
HTTP_PROXY_HOST = "httpProxyHost"
HTTP_PROXY_PORT = "httpProxyPort"
HTTP_PROXY_USERNAME = "httpProxyUsername"
HTTP_PROXY_PASSWORD = "httpProxyPassword"
HTTPS_PROXY_HOST = "httpsProxyHost"
HTTPS_PROXY_PORT = "httpsProxyPort"
HTTPS_PROXY_USERNAME = "httpsProxyUsername"
HTTPS_PROXY_PASSWORD = "httpsProxyPassword"


class ConfigField(BaseModel):
    """Declaration of a single host configuration field."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    display_label: str
    description: str = ""
    required: bool = False


CONFIG_FIELDS: List[ConfigField] = [
    ConfigField(identifier=URL, display_label="ALM Octane URL", required=True,
                description="Server at which ALM Octane REST API is accessible. Example: http://octane.example.com:8080"),
    ConfigField(identifier=SHARED_SPACE_ID, display_label="Shared Space ID", required=True,
                description="ID of shared space. Either numeric or a UUID."),
    ConfigField(identifier=WORKSPACE_ID, display_label="Workspace ID", required=True,
                description="ID of workspace. Numeric."),
    ConfigField(identifier=HTTP_PROXY_HOST, display_label="HTTP Proxy Host"),
    ConfigField(identifier=HTTP_PROXY_PORT, display_label="HTTP Proxy Port"),
    ConfigField(identifier=HTTP_PROXY_USERNAME, display_label="HTTP Proxy Username"),
    ConfigField(identifier=HTTP_PROXY_PASSWORD, display_label="HTTP Proxy Password"),
    ConfigField(identifier=HTTPS_PROXY_HOST, display_label="HTTPS Proxy Host"),
    ConfigField(identifier=HTTPS_PROXY_PORT, display_label="HTTPS Proxy Port"),
    ConfigField(identifier=HTTPS_PROXY_USERNAME, display_label="HTTPS Proxy Username"),
    ConfigField(identifier=HTTPS_PROXY_PASSWORD, display_label="HTTPS Proxy Password"),
]


class ConnectionConfig(BaseModel):
    """Octane server location: base URL, shared space and workspace."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(..., description="Octane base URL without trailing slash")
    shared_space_id: str = Field(..., description="Shared space id (numeric or UUID)")
    workspace_id: str = Field(..., description="Workspace id")

    @field_validator('base_url', mode='before')
    @classmethod
    def validate_base_url(cls, v) -> str:
        v = normalize_value(v)
        if v is None:
            raise ValueError("Octane base URL must be specified")
        v = v.rstrip('/')
        if not validate_url(v):
            raise ValueError(f"Error parsing URL {v}")
        return v

    @field_validator('shared_space_id', 'workspace_id', mode='before')
    @classmethod
    def validate_not_blank(cls, v, info) -> str:
        v = normalize_value(v)
        if v is None:
            label = info.field_name.replace('_', ' ')
            raise ValueError(f"Octane {label} must be specified")
        return v

    @property
    def scheme(self) -> str:
        return urlparse(self.base_url).scheme

    @property
    def workspace_url(self) -> str:
        """REST API root for the configured shared space and workspace."""
        return f"{self.base_url}/api/shared_spaces/{self.shared_space_id}/workspaces/{self.workspace_id}"


class ProxyConfig(BaseModel):
    """Optional forward proxy with its own Basic credentials."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(..., gt=0, lt=65536)
    username: Optional[str] = None
    password: Optional[str] = None

    @field_validator('host', mode='before')
    @classmethod
    def validate_host(cls, v) -> str:
        v = normalize_value(v)
        if v is None:
            raise ValueError("Proxy host must be specified")
        return v

    @property
    def proxy_url(self) -> str:
        """Proxy URL in the form understood by requests, credentials included."""
        credentials = ""
        if self.username:
            credentials = quote(self.username, safe='')
            if self.password:
                credentials += ":" + quote(self.password, safe='')
            credentials += "@"
        return f"http://{credentials}{self.host}:{self.port}"


class Credentials(BaseModel):
    """Octane username/password for a single operation."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = ""


def _first_error(error: ValidationError) -> str:
    messages = [e['msg'].replace('Value error, ', '') for e in error.errors()]
    return '; '.join(messages)


def create_connection_config(config: Mapping[str, str]) -> ConnectionConfig:
    """Create a ConnectionConfig from a host configuration map.

    Args:
        config: Mapping with URL, SHARED_SPACE_ID and WORKSPACE_ID entries

    Returns:
        Validated ConnectionConfig

    Raises:
        ConfigurationError: If a value is missing, blank or malformed
    """
    try:
        return ConnectionConfig(
            base_url=config.get(URL),
            shared_space_id=config.get(SHARED_SPACE_ID),
            workspace_id=config.get(WORKSPACE_ID),
        )
    except ValidationError as e:
        raise ConfigurationError(_first_error(e)) from e


def create_proxy_config(config: Mapping[str, str], base_url: str) -> Optional[ProxyConfig]:
    """Create the ProxyConfig matching the protocol of the Octane base URL.

    Returns None unless both a host and a valid port (1-65535) are configured for
    that protocol.

    Raises:
        ConfigurationError: For unsupported protocols
    """
    scheme = urlparse(base_url).scheme
    if scheme == 'http':
        keys = (HTTP_PROXY_HOST, HTTP_PROXY_PORT, HTTP_PROXY_USERNAME, HTTP_PROXY_PASSWORD)
    elif scheme == 'https':
        keys = (HTTPS_PROXY_HOST, HTTPS_PROXY_PORT, HTTPS_PROXY_USERNAME, HTTPS_PROXY_PASSWORD)
    else:
        raise ConfigurationError(f"Unsupported protocol {scheme}")

    host_key, port_key, username_key, password_key = keys
    host = normalize_value(config.get(host_key))
    port = normalize_value(config.get(port_key))
    if host is None or port is None:
        return None
    if not validate_port(port):
        logger.warning("Ignoring proxy configuration: %s is not a valid port (%s)", port_key, port)
        return None

    try:
        return ProxyConfig(
            host=host,
            port=int(port),
            username=normalize_value(config.get(username_key)),
            password=config.get(password_key) or None,
        )
    except ValidationError as e:
        raise ConfigurationError(_first_error(e)) from e
