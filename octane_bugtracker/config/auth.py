"""Octane HTTP transport using Basic Authentication with requests library.

Only Basic Authentication is supported, sent preemptively with every request
so no session cookie needs to be requested upon every bug tracker
interaction. Basic Authentication must be explicitly enabled in ALM Octane,
and Octane only accepts it together with the ALM_OCTANE_TECH_PREVIEW header.
"""

import logging
from typing import Optional, Dict, Any

import requests
from requests.adapters import HTTPAdapter
from requests.auth import HTTPBasicAuth

from ..exceptions import (
    AuthenticationError,
    PreconditionError,
    ProxyAuthenticationError,
    RequestError,
    ResponseError,
    TransportError,
)
from .connection import ConnectionConfig, Credentials, ProxyConfig

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ('GET', 'POST', 'PUT')

# One pool per transport; a single bug tracker operation issues its requests
# sequentially, so a handful of connections is plenty.
POOL_MAX_TOTAL = 5
POOL_MAX_PER_ROUTE = 5

CONNECT_TIMEOUT = 5.0
READ_TIMEOUT = 10.0


class OctaneTransport:
    """Authenticated HTTP access to one Octane shared space and workspace.

    Each instance owns a requests.Session and its connection pool. Create
    one per operation and close it when the operation completes, preferably
    by using the instance as a context manager.
    """

    def __init__(
        self,
        connection_config: ConnectionConfig,
        credentials: Credentials,
        proxy_config: Optional[ProxyConfig] = None,
    ):
        """Initialize the transport.

        Args:
            connection_config: Octane URL, shared space and workspace
            credentials: Octane username and password
            proxy_config: Optional forward proxy
        """
        if connection_config is None:
            raise PreconditionError("Octane configuration must be specified")
        if credentials is None:
            raise PreconditionError("Octane credentials must be specified")
        self.connection_config = connection_config
        self.credentials = credentials
        self.proxy_config = proxy_config
        self._session: Optional[requests.Session] = None

    def __enter__(self) -> "OctaneTransport":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @property
    def session(self) -> requests.Session:
        """Get or create requests session with authentication.

        Returns:
            requests.Session with Octane authentication, headers, pool and
            proxy configured
        """
        if self._session is None:
            session = requests.Session()
            session.auth = HTTPBasicAuth(self.credentials.username, self.credentials.password)

            adapter = HTTPAdapter(
                pool_connections=POOL_MAX_TOTAL,
                pool_maxsize=POOL_MAX_PER_ROUTE,
                max_retries=0,
            )
            session.mount('http://', adapter)
            session.mount('https://', adapter)

            session.headers.update({
                'Content-Type': 'application/json',
                'Accept': 'application/json',
                'ALM_OCTANE_TECH_PREVIEW': 'true'
            })

            if self.proxy_config is not None:
                proxy_url = self.proxy_config.proxy_url
                session.proxies.update({'http': proxy_url, 'https': proxy_url})
                # Do not let environment proxy settings override the configured proxy
                session.trust_env = False

            self._session = session

        return self._session

    @property
    def base_url(self) -> str:
        return self.connection_config.base_url

    @property
    def workspace_url(self) -> str:
        """Get base Octane REST API URL for the configured workspace."""
        return self.connection_config.workspace_url

    def url_for(self, path: str) -> str:
        path = (path or '').lstrip('/')
        return f"{self.workspace_url}/{path}" if path else self.workspace_url

    def _make_request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """Make HTTP request to the Octane workspace API.

        Args:
            method: HTTP method (GET, POST, PUT)
            path: Path relative to the workspace API root (e.g. 'defects/1001')
            params: Optional query parameters
            body: Optional JSON body

        Returns:
            requests.Response object with a 2xx status

        Raises:
            AuthenticationError: On HTTP 401
            ProxyAuthenticationError: On HTTP 407
            RequestError: On any other non-2xx status
            TransportError: On network-level failures and timeouts
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise PreconditionError(f"Unsupported HTTP method {method}")

        url = self.url_for(path)
        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=body,
                timeout=(CONNECT_TIMEOUT, READ_TIMEOUT),
            )
        except requests.exceptions.ProxyError as e:
            if '407' in str(e):
                raise ProxyAuthenticationError(
                    f"Http(s) proxy authentication credentials are invalid: {e}", status=407
                ) from e
            raise TransportError(f"Proxy failure when requesting Octane: {e}") from e
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Octane {method} {path} timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Unexpected error when requesting Octane: {e}") from e

        status = response.status_code
        if status == 401:
            raise AuthenticationError(
                "Octane authentication credentials are invalid",
                status=status, body=response.text
            )
        if status == 407:
            raise ProxyAuthenticationError(
                "Http(s) proxy authentication credentials are invalid",
                status=status, body=response.text
            )
        if not 200 <= status < 300:
            raise RequestError(
                f"Unsuccessful response {status} returned from Octane (2xx is expected) "
                f"for {method} {path}",
                status=status, body=response.text
            )
        return response

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Make HTTP request and return the decoded JSON response.

        An empty response body is returned as an empty dictionary.

        Raises:
            ResponseError: If the response body is not a JSON object
            (and everything _make_request raises)
        """
        response = self._make_request(method, path, params=params, body=body)
        if not response.content or not response.content.strip():
            return {}
        try:
            result = response.json()
        except ValueError as e:
            raise ResponseError(
                "Failure while processing response received from Octane",
                status=response.status_code, body=response.text
            ) from e
        if not isinstance(result, dict):
            raise ResponseError(
                "Unexpected response received from Octane (JSON object is expected)",
                status=response.status_code, body=response.text
            )
        return result

    def close(self):
        """Close Octane session and its connection pool."""
        if self._session:
            self._session.close()
            self._session = None
