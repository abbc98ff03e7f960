"""Lifecycle data source for end-of-life dates.

Resolution happens in two ordered steps and the first result wins:

1. **Override table** - an optional JSON mapping supplied by the operator,
   consulted for Maven artifacts only, where public end-of-life data is rarely
   available. Shape::

       {"maven": {"org.springframework:spring-core": "31-12-2025"}}

   Keys are ``group:artifact`` and compared lowercased. The table is loaded
   once per source instance; a missing or unreadable table is an empty table.

2. **endoflife.date heuristic** - candidate product slugs are derived from the
   component's display name and tried in order. For each product, release
   cycles are scanned in registry order and the first cycle equal to the
   component version (or a dotted prefix of it) is taken. This is a
   best-first heuristic, not a guaranteed match: the first slug with any
   matching cycle wins even when a later slug might fit better.
"""

import asyncio
import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import requests

from certin_mapper.logging_config import logger

from ..cache import ProviderCache
from ..dates import format_date
from ..identifiers import ResolvedIdentifier
from ..results import LookupResult
from ..utils import http_get

ENDOFLIFE_API_BASE = "https://endoflife.date/api"
DEFAULT_TIMEOUT = 10  # seconds

# Words that never identify a product on their own
SLUG_STOPWORDS = frozenset({"linux", "framework", "library", "lib", "the", "project"})

# Display-name slugs whose registry product uses a different slug
SLUG_ALIASES: Dict[str, str] = {
    "node": "nodejs",
    "node-js": "nodejs",
}


def candidate_slugs(display_name: Optional[str]) -> List[str]:
    """
    Derive endoflife.date product slugs from a component's display name.

    Order: the whole name (lowercased, punctuation runs collapsed to ``-``),
    then each significant word, then the stopword-filtered join.

    Example:
        >>> candidate_slugs("Apache Log4j")
        ['apache-log4j', 'apache', 'log4j']
    """
    words = [word for word in re.split(r"[^a-z0-9]+", (display_name or "").lower()) if word]
    if not words:
        return []

    significant = [word for word in words if word not in SLUG_STOPWORDS and not word.isdigit()]

    candidates = ["-".join(words), *significant]
    if len(significant) > 1:
        candidates.append("-".join(significant))

    slugs: List[str] = []
    for candidate in candidates:
        slug = SLUG_ALIASES.get(candidate, candidate)
        if slug not in slugs:
            slugs.append(slug)
    return slugs


def find_matching_cycle(cycles: Sequence[Any], version: str) -> Optional[Dict[str, Any]]:
    """Return the first cycle equal to ``version`` or a dotted prefix of it."""
    for row in cycles:
        if not isinstance(row, dict) or row.get("cycle") is None:
            continue
        cycle = str(row["cycle"])
        if version == cycle or version.startswith(f"{cycle}."):
            return row
    return None


class LifecycleSource:
    """Resolves end-of-life dates from the override table and endoflife.date."""

    name = "endoflife.date"

    def __init__(
        self,
        cache: ProviderCache,
        overrides_source: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._cache = cache
        self._overrides_source = overrides_source
        self._timeout = timeout
        self._overrides: Optional[Dict[str, Dict[str, str]]] = None
        self._overrides_lock = asyncio.Lock()

    async def fetch(
        self,
        identifier: ResolvedIdentifier,
        session: requests.Session,
        display_name: Optional[str] = None,
    ) -> LookupResult[str]:
        """
        Resolve the end-of-life date for a component.

        Args:
            identifier: Resolved identifier of the component
            session: requests.Session with configured headers
            display_name: Component name used for slug candidates (defaults to identifier name)

        Returns:
            LookupResult holding a ``DD-MM-YYYY`` date, or "no data"
        """
        override = await self._lookup_override(identifier, session)
        if override.found:
            return override

        try:
            return await self._lookup_endoflife(identifier, session, display_name or identifier.name)
        except Exception as e:
            logger.warning(f"End-of-life lookup failed for {identifier.name}: {e}")
            return LookupResult.no_data("lookup error")

    async def _lookup_override(self, identifier: ResolvedIdentifier, session: requests.Session) -> LookupResult[str]:
        if identifier.ecosystem != "maven" or not identifier.group or not identifier.name:
            return LookupResult.no_data("overrides only cover maven artifacts")

        overrides = await self.load_overrides(session)
        key = f"{identifier.group}:{identifier.name}".lower()
        date = overrides.get("maven", {}).get(key)
        if date:
            logger.debug(f"End-of-life override for {key}: {date}")
            return LookupResult.hit(date)
        return LookupResult.no_data("no override")

    async def load_overrides(self, session: requests.Session) -> Dict[str, Dict[str, str]]:
        """Load the override table once; later calls reuse the first outcome."""
        async with self._overrides_lock:
            if self._overrides is None:
                self._overrides = await self._read_overrides(session)
        return self._overrides

    async def _read_overrides(self, session: requests.Session) -> Dict[str, Dict[str, str]]:
        source = self._overrides_source
        if not source:
            return {}

        try:
            if source.startswith(("http://", "https://")):
                response = await http_get(session, source, self._timeout)
                if response.status_code != 200:
                    logger.warning(f"Could not load end-of-life overrides from {source}: HTTP {response.status_code}")
                    return {}
                raw = response.json()
            else:
                text = await asyncio.to_thread(Path(source).read_text, encoding="utf-8")
                raw = json.loads(text)
        except (OSError, ValueError, requests.exceptions.RequestException) as e:
            logger.warning(f"Could not load end-of-life overrides from {source}: {e}")
            return {}

        if not isinstance(raw, dict):
            logger.warning(f"Ignoring end-of-life overrides from {source}: expected a JSON object")
            return {}

        overrides: Dict[str, Dict[str, str]] = {}
        for namespace, entries in raw.items():
            if not isinstance(entries, dict):
                continue
            overrides[str(namespace).lower()] = {
                str(key).lower(): value for key, value in entries.items() if isinstance(value, str) and value
            }
        logger.info(f"Loaded {sum(len(v) for v in overrides.values())} end-of-life override(s) from {source}")
        return overrides

    async def _lookup_endoflife(
        self, identifier: ResolvedIdentifier, session: requests.Session, display_name: str
    ) -> LookupResult[str]:
        version = identifier.version
        if not version:
            return LookupResult.no_data("no version to match against release cycles")

        for slug in candidate_slugs(display_name):
            product = await self._fetch_product(slug, session)
            if not product.found:
                continue

            row = find_matching_cycle(product.value, version)
            if row is None:
                continue

            # First matching product wins, even when it reports no date
            eol = row.get("eol")
            date = format_date(eol) if isinstance(eol, str) else None
            if date:
                logger.debug(f"End-of-life for {display_name} {version}: {date} ({slug} {row.get('cycle')})")
                return LookupResult.hit(date)
            return LookupResult.no_data(f"{slug} cycle {row.get('cycle')} has no end-of-life date")

        return LookupResult.no_data("no matching product cycle")

    async def _fetch_product(self, slug: str, session: requests.Session) -> LookupResult[tuple]:
        key = f"endoflife:{slug}"
        cached = self._cache.get(key)
        if cached is not None:
            return LookupResult.hit(cached)

        url = f"{ENDOFLIFE_API_BASE}/{slug}.json"
        try:
            response = await http_get(session, url, self._timeout)
            if response.status_code != 200:
                logger.debug(f"No endoflife.date product '{slug}': HTTP {response.status_code}")
                return LookupResult.no_data(f"HTTP {response.status_code}")
            rows = response.json()
        except requests.exceptions.RequestException as e:
            logger.debug(f"Error fetching endoflife.date product '{slug}': {e}")
            return LookupResult.no_data("request error")
        except ValueError:
            return LookupResult.no_data("malformed response")

        if not isinstance(rows, list):
            return LookupResult.no_data("malformed response")

        return self._cache.remember(key, LookupResult.hit(tuple(rows)))
