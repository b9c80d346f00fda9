"""Input validation utilities."""

from typing import Optional
from urllib.parse import urlparse


def is_blank(value: Optional[str]) -> bool:
    """Check whether a value is None, empty or whitespace only."""
    return value is None or not str(value).strip()


def is_not_blank(value: Optional[str]) -> bool:
    return not is_blank(value)


def validate_url(url: str) -> bool:
    """Validate an absolute http(s) URL.

    Args:
        url: URL to validate

    Returns:
        True if valid, False otherwise
    """
    if is_blank(url):
        return False
    parsed = urlparse(url.strip())
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def validate_port(port: Optional[str]) -> bool:
    """Validate a TCP port number given as string."""
    try:
        return 0 < int(str(port).strip()) < 65536
    except (ValueError, TypeError):
        return False
