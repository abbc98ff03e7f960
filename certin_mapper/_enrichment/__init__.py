"""Component enrichment: provider lookups reconciled into CERT-In properties."""

from .cache import ProviderCache
from .criticality import resolve_criticality
from .identifiers import ResolvedIdentifier, resolve_identifier
from .properties import NA, PROPERTY_KEYS, PropertySet, merge_properties
from .protocol import RegistrySource
from .reconciler import PropertyReconciler
from .registry import RegistryGateway, create_default_gateway
from .results import LookupResult, ProviderResult

__all__ = [
    "NA",
    "PROPERTY_KEYS",
    "LookupResult",
    "PropertyReconciler",
    "PropertySet",
    "ProviderCache",
    "ProviderResult",
    "RegistryGateway",
    "RegistrySource",
    "ResolvedIdentifier",
    "create_default_gateway",
    "merge_properties",
    "resolve_criticality",
    "resolve_identifier",
]
