"""PyPI data source for Python package metadata."""

from typing import Any, Dict, List, Optional

import requests

from certin_mapper.logging_config import logger

from ..cache import ProviderCache
from ..dates import format_date
from ..identifiers import ResolvedIdentifier
from ..results import LookupResult, ProviderResult
from ..utils import http_get, parse_author_string

PYPI_API_BASE = "https://pypi.org/pypi"
DEFAULT_TIMEOUT = 10  # seconds - PyPI is fast


class PyPISource:
    """
    Data source for PyPI (Python Package Index) packages.

    Uses the JSON API for the project, which describes the latest release.
    The release date is the upload time of that release's files.
    """

    name = "pypi.org"
    ecosystem = "pypi"

    def __init__(self, cache: ProviderCache, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._cache = cache
        self._timeout = timeout

    @staticmethod
    def cache_key(identifier: ResolvedIdentifier) -> str:
        return f"pypi:{identifier.name}"

    async def fetch(self, identifier: ResolvedIdentifier, session: requests.Session) -> LookupResult[ProviderResult]:
        """
        Fetch metadata from PyPI JSON API.

        Args:
            identifier: Resolved PyPI identifier
            session: requests.Session with configured headers

        Returns:
            LookupResult holding a ProviderResult, or "no data" on any failure
        """
        key = self.cache_key(identifier)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit (PyPI): {identifier.name}")
            return LookupResult.hit(cached)

        url = f"{PYPI_API_BASE}/{identifier.name}/json"
        try:
            logger.debug(f"Fetching PyPI metadata for: {identifier.name}")
            response = await http_get(session, url, self._timeout)
            if response.status_code == 404:
                logger.debug(f"Package not found on PyPI: {identifier.name}")
                return LookupResult.no_data("not found")
            if response.status_code != 200:
                logger.warning(f"Failed to fetch PyPI metadata for {identifier.name}: HTTP {response.status_code}")
                return LookupResult.no_data(f"HTTP {response.status_code}")
            data = response.json()
        except requests.exceptions.Timeout:
            logger.warning(f"Timeout fetching PyPI metadata for {identifier.name}")
            return LookupResult.no_data("timeout")
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error fetching PyPI metadata for {identifier.name}: {e}")
            return LookupResult.no_data("request error")
        except ValueError as e:
            logger.warning(f"JSON decode error for PyPI {identifier.name}: {e}")
            return LookupResult.no_data("malformed response")

        if not isinstance(data, dict) or not isinstance(data.get("info"), dict):
            return LookupResult.no_data("malformed response")

        return self._cache.remember(key, LookupResult.hit(self._normalize_response(data)))

    def _normalize_response(self, data: Dict[str, Any]) -> ProviderResult:
        """
        Normalize PyPI API response to a ProviderResult.

        Args:
            data: Raw PyPI JSON API response

        Returns:
            ProviderResult with extracted fields
        """
        info = data["info"]

        # Priority: author field > maintainer field > parsed from email fields
        author = info.get("author") or info.get("maintainer") or None
        if not author:
            email_field = info.get("author_email") or info.get("maintainer_email")
            if email_field:
                author, _ = parse_author_string(email_field)

        project_urls = info.get("project_urls") or {}
        repository_url = None
        homepage = info.get("home_page") or None
        for key, url_value in project_urls.items():
            key_lower = key.lower()
            if repository_url is None and ("source" in key_lower or "repository" in key_lower or "github" in key_lower):
                repository_url = url_value
            elif "homepage" in key_lower and not homepage:
                homepage = url_value

        return ProviderResult(
            source=self.name,
            release_date=_upload_date(data.get("urls")),
            latest_version=info.get("version") or None,
            description=info.get("summary") or None,
            homepage=homepage,
            repository_url=repository_url,
            license=_license(info),
            author=author,
        )


def _upload_date(files: Any) -> Optional[str]:
    if not isinstance(files, list):
        return None
    for file_info in files:
        if isinstance(file_info, dict):
            date = format_date(file_info.get("upload_time_iso_8601") or file_info.get("upload_time"))
            if date:
                return date
    return None


def _license(info: Dict[str, Any]) -> Optional[str]:
    # Newer metadata carries an SPDX expression; older releases only have classifiers
    for key in ("license_expression", "license"):
        value = info.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()

    classifiers: List[str] = info.get("classifiers") or []
    for classifier in classifiers:
        if classifier.startswith("License ::"):
            return classifier.split("::")[-1].strip()
    return None
