"""GitHub data source for repository popularity and license metadata.

The source is keyed off a repository URL found on the component. It only
runs with a configured token: unauthenticated calls are rate limited to the
point of being useless for a whole SBOM, so without a token the source
returns "no data" immediately.
"""

import asyncio
import re
from typing import Any, Dict, Optional, Tuple

import requests

from certin_mapper.http_client import get_default_headers
from certin_mapper.logging_config import logger

from ..cache import ProviderCache
from ..dates import format_date
from ..results import LookupResult, ProviderResult
from ..utils import http_get

GITHUB_API_BASE = "https://api.github.com"
DEFAULT_TIMEOUT = 10  # seconds
DEFAULT_RETRY_DELAY = 1.2  # seconds
RATE_LIMIT_STATUSES = (403, 429)

# Matches https://github.com/o/r, git://github.com/o/r.git, git@github.com:o/r.git,
# scm:git:git://github.com/o/r.git, git+https://github.com/o/r.git#tag, .../o/r/tree/main
_GITHUB_REPO_PATTERN = re.compile(
    r"github\.com[/:](?:#!/)?(?P<owner>[^/\s:]+)/(?P<repo>[^/#?\s]+?)(?:\.git)?(?:[/#?].*)?$",
    re.IGNORECASE,
)


def normalize_repo_url(repo_url: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Extract ``(owner, repo)`` from a GitHub repository URL.

    Args:
        repo_url: Repository URL in any of the common historical shapes

    Returns:
        Tuple of (owner, repo), or None if the URL does not point at a GitHub repository
    """
    if not repo_url or not isinstance(repo_url, str):
        return None
    match = _GITHUB_REPO_PATTERN.search(repo_url.strip())
    if not match:
        return None
    return match.group("owner"), match.group("repo")


class GitHubSource:
    """
    Data source for the GitHub REST API.

    A 403 or 429 response is retried exactly once after a fixed delay;
    every other failure gives up immediately.
    """

    name = "github.com"

    def __init__(
        self,
        cache: ProviderCache,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ) -> None:
        self._cache = cache
        self._token = token
        self._timeout = timeout
        self._retry_delay = retry_delay

    async def fetch(self, repo_url: Optional[str], session: requests.Session) -> LookupResult[ProviderResult]:
        """
        Fetch repository metadata for a repository URL.

        Args:
            repo_url: Repository URL taken from the component's external references
            session: requests.Session with configured headers

        Returns:
            LookupResult holding a ProviderResult, or "no data"
        """
        if not repo_url:
            return LookupResult.no_data("no repository URL")

        normalized = normalize_repo_url(repo_url)
        if not normalized:
            logger.debug(f"Not a GitHub repository URL: {repo_url}")
            return LookupResult.no_data("unrecognized repository URL")

        if not self._token:
            return LookupResult.no_data("no GitHub token configured")

        owner, repo = normalized
        key = f"github:{owner.lower()}/{repo.lower()}"
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit (GitHub): {owner}/{repo}")
            return LookupResult.hit(cached)

        url = f"{GITHUB_API_BASE}/repos/{owner}/{repo}"
        headers = get_default_headers(token=self._token)
        headers["Accept"] = "application/vnd.github+json"

        try:
            response = await http_get(session, url, self._timeout, headers=headers)
            if response.status_code in RATE_LIMIT_STATUSES:
                logger.warning(
                    f"GitHub rate limit for {owner}/{repo} (HTTP {response.status_code}), "
                    f"retrying once in {self._retry_delay}s"
                )
                await asyncio.sleep(self._retry_delay)
                response = await http_get(session, url, self._timeout, headers=headers)

            if response.status_code != 200:
                logger.warning(f"Failed to fetch GitHub metadata for {owner}/{repo}: HTTP {response.status_code}")
                return LookupResult.no_data(f"HTTP {response.status_code}")
            data = response.json()
        except requests.exceptions.Timeout:
            logger.warning(f"Timeout fetching GitHub metadata for {owner}/{repo}")
            return LookupResult.no_data("timeout")
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error fetching GitHub metadata for {owner}/{repo}: {e}")
            return LookupResult.no_data("request error")
        except ValueError as e:
            logger.warning(f"JSON decode error for GitHub {owner}/{repo}: {e}")
            return LookupResult.no_data("malformed response")

        if not isinstance(data, dict):
            return LookupResult.no_data("malformed response")

        return self._cache.remember(key, LookupResult.hit(self._normalize_response(data)))

    def _normalize_response(self, data: Dict[str, Any]) -> ProviderResult:
        license_info = data.get("license")
        return ProviderResult(
            source=self.name,
            release_date=format_date(data.get("created_at")),
            last_updated=format_date(data.get("updated_at")),
            stars=_as_count(data.get("stargazers_count")),
            forks=_as_count(data.get("forks_count")),
            license=license_info.get("name") if isinstance(license_info, dict) else None,
            description=data.get("description") or None,
            homepage=data.get("homepage") or None,
        )


def _as_count(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0
