"""Property reconciler: the per-component enrichment pipeline.

For each component the reconciler moves through four states, logged at debug
level:

- **Idle**: nothing started yet
- **Resolving**: identifier resolved, the four lookups run concurrently
- **Merging**: lookups settled, properties derived and merged
- **Done**: the component carries all twelve properties

A lookup that raises or finds nothing only blanks out the fields that depend
on it; it never stops the pass for the component or for other components.
"""

import asyncio
from typing import Any, Iterable, List, Optional, Sequence

import requests
from cyclonedx.model.component import Component
from cyclonedx.model.vulnerability import Vulnerability

from certin_mapper.config import Config
from certin_mapper.http_client import create_session
from certin_mapper.logging_config import logger

from .cache import ProviderCache
from .criticality import resolve_criticality
from .identifiers import ResolvedIdentifier, resolve_identifier
from .properties import PropertySet, derive_properties, merge_properties, read_properties
from .registry import RegistryGateway, create_default_gateway
from .results import LookupResult
from .sources import GitHubSource, LifecycleSource, OSVSource

# External reference types that point at a source repository
REPOSITORY_REFERENCE_TYPES = ("vcs", "repository")


def get_repository_url(component: Component) -> Optional[str]:
    """URL of the component's first repository-type external reference."""
    for reference in component.external_references:
        if reference.type.value in REPOSITORY_REFERENCE_TYPES and reference.url:
            return str(reference.url)
    return None


def _settle(name: str, component: Component, outcome: Any) -> LookupResult:
    if isinstance(outcome, BaseException):
        logger.warning(f"{name} lookup failed for {component.name}: {outcome}")
        return LookupResult.no_data(f"{name} lookup raised {type(outcome).__name__}")
    return outcome


class PropertyReconciler:
    """
    Enriches CycloneDX components with the twelve CERT-In properties.

    All sources share one cache and one HTTP session. Pass your own to reuse
    them across runs; otherwise the reconciler creates (and owns) them.

    Example:
        with PropertyReconciler(config) as reconciler:
            asyncio.run(reconciler.enrich_components(bom.components, bom.vulnerabilities))
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        cache: Optional[ProviderCache] = None,
        session: Optional[requests.Session] = None,
        registry: Optional[RegistryGateway] = None,
        vulnerability_source: Optional[OSVSource] = None,
        repository_source: Optional[GitHubSource] = None,
        lifecycle_source: Optional[LifecycleSource] = None,
    ) -> None:
        self.config = config or Config()
        self.cache = cache if cache is not None else ProviderCache()
        self._owns_session = session is None
        self.session = session if session is not None else create_session()

        timeout = self.config.http_timeout
        self.registry = registry or create_default_gateway(self.cache, timeout)
        self.vulnerability_source = vulnerability_source or OSVSource(self.cache, timeout=timeout)
        self.repository_source = repository_source or GitHubSource(
            self.cache,
            token=self.config.github_token,
            timeout=timeout,
            retry_delay=self.config.github_retry_delay,
        )
        self.lifecycle_source = lifecycle_source or LifecycleSource(
            self.cache, overrides_source=self.config.eol_overrides, timeout=timeout
        )

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "PropertyReconciler":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    async def reconcile(
        self,
        component: Component,
        vulnerabilities: Iterable[Vulnerability] = (),
    ) -> PropertySet:
        """
        Compute the property set of a component without modifying it.

        Args:
            component: Component to look up
            vulnerabilities: Vulnerabilities declared in the SBOM

        Returns:
            Ordered mapping of all twelve property keys
        """
        logger.debug(f"[{component.name}] Idle")
        identifier = resolve_identifier(
            str(component.purl) if component.purl else None,
            name=component.name,
            version=component.version,
            group=component.group,
        )
        repo_url = get_repository_url(component)
        logger.debug(f"[{component.name}] Resolving as {identifier.ecosystem}:{identifier.qualified_name}")

        registry, vulnerability, repository, end_of_life = await self._lookup_all(component, identifier, repo_url)

        bom_ref = component.bom_ref.value if component.bom_ref else None
        criticality = resolve_criticality(vulnerabilities, bom_ref, vulnerability)

        return derive_properties(
            component,
            identifier,
            registry=registry.value,
            vulnerability=vulnerability.value,
            repository=repository.value,
            end_of_life=end_of_life.value,
            criticality=criticality,
        )

    async def _lookup_all(
        self, component: Component, identifier: ResolvedIdentifier, repo_url: Optional[str]
    ) -> List[LookupResult]:
        registry_task = asyncio.ensure_future(self.registry.fetch(identifier, self.session))
        outcomes = await asyncio.gather(
            registry_task,
            self.vulnerability_source.fetch(identifier, self.session),
            self._lookup_repository(repo_url, registry_task),
            self.lifecycle_source.fetch(identifier, self.session, display_name=component.name),
            return_exceptions=True,
        )
        names = ("registry", "vulnerability", "repository", "lifecycle")
        results = [_settle(name, component, outcome) for name, outcome in zip(names, outcomes)]

        missing = [f"{name} ({result.reason})" for name, result in zip(names, results) if not result.found]
        if missing:
            logger.debug(f"[{component.name}] No data from: {', '.join(missing)}")
        return results

    async def _lookup_repository(self, repo_url: Optional[str], registry_task: "asyncio.Future") -> LookupResult:
        """
        Look up the repository, falling back to the URL the registry reports.

        Without an external reference this waits for the registry lookup; a
        registry failure is reported by the caller, so here it only means
        there is no URL to try.
        """
        if repo_url is None:
            await asyncio.wait({registry_task})
            if registry_task.exception() is None and registry_task.result().found:
                repo_url = registry_task.result().value.repository_url
        return await self.repository_source.fetch(repo_url, self.session)

    async def enrich_component(
        self,
        component: Component,
        vulnerabilities: Iterable[Vulnerability] = (),
    ) -> PropertySet:
        """
        Reconcile a component and merge the result into its properties.

        Returns:
            The component's twelve property values after the merge
        """
        computed = await self.reconcile(component, vulnerabilities)
        logger.debug(f"[{component.name}] Merging")
        merge_properties(component, computed)
        logger.debug(f"[{component.name}] Done")
        return read_properties(component)

    async def enrich_components(
        self,
        components: Iterable[Component],
        vulnerabilities: Iterable[Vulnerability] = (),
    ) -> List[PropertySet]:
        """
        Enrich all components concurrently.

        Returns:
            Property sets in the order of ``components``
        """
        component_list: Sequence[Component] = list(components)
        declared = list(vulnerabilities or ())
        logger.info(f"Enriching {len(component_list)} components")
        return list(
            await asyncio.gather(*(self.enrich_component(component, declared) for component in component_list))
        )
