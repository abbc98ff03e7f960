"""RegistrySource protocol for package registry lookups."""

from typing import Protocol

import requests

from .identifiers import ResolvedIdentifier
from .results import LookupResult, ProviderResult


class RegistrySource(Protocol):
    """
    Protocol defining the interface for package registry sources.

    Each registry source serves exactly one ecosystem and is registered with
    the :class:`~certin_mapper._enrichment.registry.RegistryGateway` under
    that ecosystem tag.

    Example:
        class NpmSource:
            name = "registry.npmjs.org"
            ecosystem = "npm"

            async def fetch(self, identifier, session) -> LookupResult[ProviderResult]:
                # Query the registry and return a normalized result
                ...
    """

    @property
    def name(self) -> str:
        """
        Human-readable name of this source.

        Used for logging and recorded in ``ProviderResult.source``.
        Examples: "registry.npmjs.org", "pypi.org", "search.maven.org"
        """
        ...

    @property
    def ecosystem(self) -> str:
        """Ecosystem tag this source serves (``npm``, ``pypi``, ``maven``)."""
        ...

    async def fetch(self, identifier: ResolvedIdentifier, session: requests.Session) -> LookupResult[ProviderResult]:
        """
        Fetch and normalize registry metadata for a package.

        Implementations should:
        1. Return a cached result when one exists
        2. Make exactly one API call otherwise
        3. Return "no data" on any failure instead of raising
        4. Cache successful results only

        Args:
            identifier: Resolved package identifier
            session: requests.Session with configured headers (User-Agent, etc.)

        Returns:
            LookupResult holding a ProviderResult, or "no data"
        """
        ...
