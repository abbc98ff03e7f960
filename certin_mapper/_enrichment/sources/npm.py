"""npm registry data source for JavaScript package metadata."""

from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from certin_mapper.logging_config import logger

from ..cache import ProviderCache
from ..dates import format_date
from ..identifiers import ResolvedIdentifier
from ..results import LookupResult, ProviderResult
from ..utils import http_get, parse_author_string

NPM_REGISTRY_BASE = "https://registry.npmjs.org"
DEFAULT_TIMEOUT = 10  # seconds


class NpmSource:
    """
    Data source for the public npm registry.

    Reads the package document (all versions) and reports the package
    creation date, the ``latest`` dist-tag, license, description and author.
    """

    name = "registry.npmjs.org"
    ecosystem = "npm"

    def __init__(self, cache: ProviderCache, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._cache = cache
        self._timeout = timeout

    @staticmethod
    def cache_key(identifier: ResolvedIdentifier) -> str:
        return f"npm:{identifier.name}"

    async def fetch(self, identifier: ResolvedIdentifier, session: requests.Session) -> LookupResult[ProviderResult]:
        """
        Fetch package metadata from the npm registry.

        Args:
            identifier: Resolved npm identifier (scoped names like ``@types/node`` allowed)
            session: requests.Session with configured headers

        Returns:
            LookupResult holding a ProviderResult, or "no data" on any failure
        """
        key = self.cache_key(identifier)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit (npm): {identifier.name}")
            return LookupResult.hit(cached)

        url = f"{NPM_REGISTRY_BASE}/{quote(identifier.name, safe='@')}"
        try:
            logger.debug(f"Fetching npm metadata for: {identifier.name}")
            response = await http_get(session, url, self._timeout)
            if response.status_code == 404:
                logger.debug(f"Package not found on npm: {identifier.name}")
                return LookupResult.no_data("not found")
            if response.status_code != 200:
                logger.warning(f"Failed to fetch npm metadata for {identifier.name}: HTTP {response.status_code}")
                return LookupResult.no_data(f"HTTP {response.status_code}")
            data = response.json()
        except requests.exceptions.Timeout:
            logger.warning(f"Timeout fetching npm metadata for {identifier.name}")
            return LookupResult.no_data("timeout")
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error fetching npm metadata for {identifier.name}: {e}")
            return LookupResult.no_data("request error")
        except ValueError as e:
            logger.warning(f"JSON decode error for npm {identifier.name}: {e}")
            return LookupResult.no_data("malformed response")

        if not isinstance(data, dict):
            return LookupResult.no_data("malformed response")

        return self._cache.remember(key, LookupResult.hit(self._normalize_response(data)))

    def _normalize_response(self, data: Dict[str, Any]) -> ProviderResult:
        time_info = data.get("time") or {}
        dist_tags = data.get("dist-tags") or {}

        return ProviderResult(
            source=self.name,
            release_date=format_date(time_info.get("created")) if isinstance(time_info, dict) else None,
            latest_version=dist_tags.get("latest") if isinstance(dist_tags, dict) else None,
            description=data.get("description") or None,
            homepage=data.get("homepage") or None,
            repository_url=_repository_url(data.get("repository")),
            license=_license_name(data.get("license")),
            author=_author_name(data.get("author")),
        )


def _repository_url(repository: Any) -> Optional[str]:
    if isinstance(repository, dict):
        return repository.get("url") or None
    if isinstance(repository, str):
        return repository or None
    return None


def _license_name(license_value: Any) -> Optional[str]:
    # Old packages publish {"type": "MIT", "url": ...} instead of an SPDX string
    if isinstance(license_value, str):
        return license_value or None
    if isinstance(license_value, dict):
        return license_value.get("type") or None
    return None


def _author_name(author: Any) -> Optional[str]:
    if isinstance(author, dict):
        return author.get("name") or None
    if isinstance(author, str):
        name, _ = parse_author_string(author)
        return name
    return None
