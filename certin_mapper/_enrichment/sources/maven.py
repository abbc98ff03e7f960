"""Maven Central data source for Java artifact metadata."""

from typing import Any, Dict

import requests

from certin_mapper.logging_config import logger

from ..cache import ProviderCache
from ..dates import format_epoch_millis
from ..identifiers import ResolvedIdentifier
from ..results import LookupResult, ProviderResult
from ..utils import http_get

MAVEN_SEARCH_URL = "https://search.maven.org/solrsearch/select"
DEFAULT_TIMEOUT = 10  # seconds


class MavenCentralSource:
    """
    Data source for Maven Central artifacts.

    Uses the relevance-ranked search API and takes the first document only;
    there is no further disambiguation between results. The search index
    carries no license or description, only the artifact timestamp and the
    latest version.
    """

    name = "search.maven.org"
    ecosystem = "maven"

    def __init__(self, cache: ProviderCache, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._cache = cache
        self._timeout = timeout

    @staticmethod
    def cache_key(identifier: ResolvedIdentifier) -> str:
        return f"maven:{identifier.group}:{identifier.name}"

    async def fetch(self, identifier: ResolvedIdentifier, session: requests.Session) -> LookupResult[ProviderResult]:
        if not identifier.group:
            return LookupResult.no_data("maven lookup needs a group")

        key = self.cache_key(identifier)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit (Maven): {identifier.qualified_name}")
            return LookupResult.hit(cached)

        params = {
            "q": f'g:"{identifier.group}" AND a:"{identifier.name}"',
            "rows": 1,
            "wt": "json",
        }
        try:
            logger.debug(f"Fetching Maven Central metadata for: {identifier.qualified_name}")
            response = await http_get(session, MAVEN_SEARCH_URL, self._timeout, params=params)
            if response.status_code != 200:
                logger.warning(
                    f"Failed to fetch Maven metadata for {identifier.qualified_name}: HTTP {response.status_code}"
                )
                return LookupResult.no_data(f"HTTP {response.status_code}")
            data = response.json()
        except requests.exceptions.Timeout:
            logger.warning(f"Timeout fetching Maven metadata for {identifier.qualified_name}")
            return LookupResult.no_data("timeout")
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error fetching Maven metadata for {identifier.qualified_name}: {e}")
            return LookupResult.no_data("request error")
        except ValueError as e:
            logger.warning(f"JSON decode error for Maven {identifier.qualified_name}: {e}")
            return LookupResult.no_data("malformed response")

        search_response = data.get("response") if isinstance(data, dict) else None
        docs = search_response.get("docs") if isinstance(search_response, dict) else None
        if not isinstance(docs, list) or not docs or not isinstance(docs[0], dict):
            logger.debug(f"Artifact not found on Maven Central: {identifier.qualified_name}")
            return LookupResult.no_data("not found")

        return self._cache.remember(key, LookupResult.hit(self._normalize_doc(docs[0])))

    def _normalize_doc(self, doc: Dict[str, Any]) -> ProviderResult:
        return ProviderResult(
            source=self.name,
            release_date=format_epoch_millis(doc.get("timestamp")),
            latest_version=doc.get("latestVersion") or None,
        )
