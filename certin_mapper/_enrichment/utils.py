"""Shared utilities for enrichment sources."""

import asyncio
from typing import Any, Optional, Tuple

import requests
import semantic_version


async def http_get(session: requests.Session, url: str, timeout: float, **kwargs: Any) -> requests.Response:
    """
    Perform a GET request without blocking the event loop.

    The blocking ``requests`` call runs in a worker thread, so the calling
    coroutine only suspends for the duration of the network I/O.
    """
    return await asyncio.to_thread(session.get, url, timeout=timeout, **kwargs)


async def http_post(session: requests.Session, url: str, timeout: float, **kwargs: Any) -> requests.Response:
    """POST counterpart of :func:`http_get`."""
    return await asyncio.to_thread(session.post, url, timeout=timeout, **kwargs)


def coerce_version(value: Optional[str]) -> Optional[semantic_version.Version]:
    """
    Leniently parse a version string.

    Handles the usual registry shapes ("4.17.21", "3.12", "2.0.0-M1", "1.0.0.Final").
    Returns None when the string has no usable numeric part.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        return semantic_version.Version.coerce(value.strip().lstrip("vV"))
    except ValueError:
        return None


def is_newer_version(candidate: Optional[str], installed: Optional[str]) -> bool:
    """True only if both versions parse and ``candidate`` is strictly greater."""
    candidate_version = coerce_version(candidate)
    installed_version = coerce_version(installed)
    if candidate_version is None or installed_version is None:
        return False
    return candidate_version > installed_version


def parse_author_string(author_str: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Parse an author string which may be in format "Name <email>".

    This is the format used by npm ``author`` strings and PyPI
    ``author_email`` fields.

    Args:
        author_str: Author string like "John Doe <john@example.com>" or just "John Doe"

    Returns:
        Tuple of (name, email) where either may be None
    """
    if not author_str:
        return None, None

    author_str = author_str.strip()

    if "<" in author_str and ">" in author_str:
        lt_idx = author_str.index("<")
        gt_idx = author_str.index(">")
        if lt_idx < gt_idx:
            name_part = author_str[:lt_idx].strip()
            email_part = author_str[lt_idx + 1 : gt_idx].strip()
            return name_part or None, email_part or None

    return author_str, None
