"""HTTP client utilities with consistent user agent."""

from typing import Optional

import requests

from certin_mapper import __version__

USER_AGENT = f"certin-mapper/{__version__}"


def get_default_headers(token: Optional[str] = None, content_type: Optional[str] = None) -> dict:
    """
    Get default HTTP headers with user agent.

    Args:
        token: Optional authentication token to include
        content_type: Optional Content-Type header value (e.g., "application/json")

    Returns:
        Dictionary of HTTP headers
    """
    headers = {"User-Agent": USER_AGENT}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    if content_type:
        headers["Content-Type"] = content_type
    return headers


def create_session() -> requests.Session:
    """Create a requests session carrying the default headers."""
    session = requests.Session()
    session.headers.update(get_default_headers())
    return session
