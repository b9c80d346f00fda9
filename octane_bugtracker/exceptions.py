"""Error taxonomy for the Octane integration."""

import json
from enum import Enum
from typing import Optional, Dict, Any


class ErrorKind(str, Enum):
    """Closed set of failure kinds surfaced to callers."""

    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    PROXY_AUTHENTICATION = "proxy_authentication"
    REQUEST = "request"
    RESPONSE = "response"
    TRANSPORT = "transport"
    PRECONDITION = "precondition"


class OctaneError(RuntimeError):
    """Base Octane integration error.

    Carries the error kind plus, for HTTP failures, the status code and raw
    response body so callers can render diagnostics without re-reading the
    response.
    """

    kind: ErrorKind = ErrorKind.REQUEST

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'message': self.message,
            'status': self.status,
            'body': self.body,
        }


class ConfigurationError(OctaneError):
    """Missing, blank or malformed configuration."""

    kind = ErrorKind.CONFIGURATION


class AuthenticationError(OctaneError):
    """Octane rejected the credentials (HTTP 401)."""

    kind = ErrorKind.AUTHENTICATION


class ProxyAuthenticationError(OctaneError):
    """The forward proxy rejected its credentials (HTTP 407)."""

    kind = ErrorKind.PROXY_AUTHENTICATION


class RequestError(OctaneError):
    """Any other non-2xx response."""

    kind = ErrorKind.REQUEST


class ResponseError(OctaneError):
    """A 2xx response whose body could not be interpreted."""

    kind = ErrorKind.RESPONSE


class TransportError(OctaneError):
    """Network-level failure: DNS, connect, timeout, reset."""

    kind = ErrorKind.TRANSPORT


class PreconditionError(OctaneError):
    """Caller-level misuse, e.g. no parent selected or no reopen path."""

    kind = ErrorKind.PRECONDITION


def extract_octane_error_payload(body: Optional[str]) -> Dict[str, Any]:
    """Extract error details from an Octane REST API error body.

    Octane returns errors in the following format:
    {
        "error_code": "platform.unauthorized",
        "description": "...",
        "description_translated": "...",
        "correlation_id": "..."
    }

    Args:
        body: Raw response body

    Returns:
        Dictionary with error information:
        - raw: Parsed JSON payload (or {'text': body})
        - error_code: Octane error code if present
        - formatted: Formatted string representation
        - json_pretty: Pretty-printed JSON string
    """
    result = {
        'raw': None,
        'error_code': None,
        'formatted': '',
        'json_pretty': ''
    }
    if not body:
        result['formatted'] = "No error details available"
        return result

    try:
        error_data = json.loads(body)
    except ValueError:
        result['raw'] = {'text': body}
        result['formatted'] = f"Raw response: {body[:500]}"
        result['json_pretty'] = body[:500]
        return result

    result['raw'] = error_data
    result['json_pretty'] = json.dumps(error_data, indent=2)
    if isinstance(error_data, dict):
        result['error_code'] = error_data.get('error_code')
        description = error_data.get('description_translated') or error_data.get('description')
        parts = []
        if result['error_code']:
            parts.append(f"Error Code: {result['error_code']}")
        if description:
            parts.append(f"Description: {description}")
        result['formatted'] = '\n'.join(parts) if parts else "No error details available"
    else:
        result['formatted'] = "No error details available"
    return result


def describe_error(error: OctaneError) -> str:
    """Render an error and its payload as multi-line text for console output."""
    lines = [f"{error.message}"]
    if error.status is not None:
        lines.append(f"HTTP status: {error.status}")
    if error.body:
        payload = extract_octane_error_payload(error.body)
        lines.append("")
        lines.append(payload['formatted'])
    return '\n'.join(lines)
