"""Registry gateway dispatching package lookups by ecosystem."""

from typing import Dict, List, Optional

import requests

from certin_mapper.logging_config import logger

from .cache import ProviderCache
from .identifiers import ResolvedIdentifier
from .protocol import RegistrySource
from .results import LookupResult, ProviderResult
from .sources import MavenCentralSource, NpmSource, PyPISource


class RegistryGateway:
    """
    Routes a resolved identifier to the registry source for its ecosystem.

    One source serves one ecosystem. Identifiers of ecosystem ``unknown`` or
    of an ecosystem with no registered source produce "no data" without any
    network request.

    Example:
        gateway = RegistryGateway()
        gateway.register(NpmSource(cache))
        gateway.register(PyPISource(cache))

        result = await gateway.fetch(identifier, session)
    """

    def __init__(self) -> None:
        self._sources: Dict[str, RegistrySource] = {}

    def register(self, source: RegistrySource) -> None:
        """Register a source, replacing any earlier source for the same ecosystem."""
        self._sources[source.ecosystem] = source
        logger.debug(f"Registered registry source: {source.name} ({source.ecosystem})")

    def get_source_for(self, ecosystem: str) -> Optional[RegistrySource]:
        return self._sources.get(ecosystem)

    def supported_ecosystems(self) -> List[str]:
        return sorted(self._sources)

    async def fetch(self, identifier: ResolvedIdentifier, session: requests.Session) -> LookupResult[ProviderResult]:
        """
        Fetch registry metadata for an identifier.

        Args:
            identifier: Resolved package identifier
            session: requests.Session with configured headers

        Returns:
            LookupResult from the ecosystem's source, or "no data"
        """
        source = self.get_source_for(identifier.ecosystem)
        if source is None:
            logger.debug(f"No registry source for ecosystem: {identifier.ecosystem}")
            return LookupResult.no_data(f"unsupported ecosystem: {identifier.ecosystem}")

        if not identifier.name:
            return LookupResult.no_data("no package name")

        try:
            return await source.fetch(identifier, session)
        except Exception as e:
            logger.warning(f"Error fetching from {source.name} for {identifier.qualified_name}: {e}")
            return LookupResult.no_data("source error")


def create_default_gateway(cache: ProviderCache, timeout: float) -> RegistryGateway:
    """
    Create a gateway with the npm, PyPI and Maven Central sources registered.

    Args:
        cache: Cache shared with every source
        timeout: Per-request timeout in seconds

    Returns:
        Configured RegistryGateway
    """
    gateway = RegistryGateway()
    gateway.register(NpmSource(cache, timeout=timeout))
    gateway.register(PyPISource(cache, timeout=timeout))
    gateway.register(MavenCentralSource(cache, timeout=timeout))
    return gateway
