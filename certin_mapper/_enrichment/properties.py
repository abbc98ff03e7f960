"""CERT-In property derivation and merging.

The property set of a component is a fixed, ordered list of twelve keys.
Every key is always present, holding either a meaningful value or the
``"NA"`` placeholder. Derivation functions here are pure: they only look at
provider results that were already fetched.
"""

from typing import Dict, List, Optional

from cyclonedx.model import Property
from cyclonedx.model.component import Component

from certin_mapper.logging_config import logger

from .identifiers import ResolvedIdentifier
from .results import ProviderResult
from .utils import is_newer_version

NA = "NA"

PATCH_STATUS = "Patch Status"
RELEASE_DATE = "Release Date"
END_OF_LIFE_DATE = "End-of-Life Date"
CRITICALITY = "Criticality"
USAGE_RESTRICTIONS = "Usage Restrictions"
COMMENTS = "Comments or Notes"
EXECUTABLE = "Executable Property"
ARCHIVE = "Archive Property"
STRUCTURED = "Structured Property"
UNIQUE_IDENTIFIER = "Unique Identifier"
SUPPLIER = "Component Supplier"
ORIGIN = "Component Origin"

PROPERTY_KEYS = (
    PATCH_STATUS,
    RELEASE_DATE,
    END_OF_LIFE_DATE,
    CRITICALITY,
    USAGE_RESTRICTIONS,
    COMMENTS,
    EXECUTABLE,
    ARCHIVE,
    STRUCTURED,
    UNIQUE_IDENTIFIER,
    SUPPLIER,
    ORIGIN,
)

UP_TO_DATE = "Up to date"
UPDATE_AVAILABLE = "Update available"

AGPL_RESTRICTIONS = "AGPL License - Strong copyleft restrictions"
GPL_RESTRICTIONS = "GPL License - Copyleft restrictions apply"
PERMISSIVE_RESTRICTIONS = "Permissive license - Minimal restrictions"
PERMISSIVE_KEYWORDS = ("mit", "apache", "bsd", "isc")

POPULAR_STAR_THRESHOLD = 100
COMMENT_DELIMITER = "; "

# Ecosystems whose packages ship runnable code
EXECUTABLE_ECOSYSTEMS = frozenset({"npm"})

PropertySet = Dict[str, str]


def is_meaningful(value: Optional[str]) -> bool:
    """True for a non-empty value other than the ``NA`` placeholder."""
    return bool(value and value.strip() and value.strip() != NA)


def compute_patch_status(
    vulnerability: Optional[ProviderResult],
    installed_version: Optional[str],
    registry: Optional[ProviderResult],
) -> str:
    """
    Derive the patch status.

    Examples:
        Vulnerable, fix known:     "Update available (>= 4.17.21)"
        Vulnerable, no fix known:  "Update available (>= NA)"
        Newer release published:   "Update available (latest 5.0.0)"
        Neither signal answered:   "NA"
        Otherwise:                 "Up to date"
    """
    if vulnerability is None and registry is None:
        return NA

    if vulnerability is not None and vulnerability.has_vulnerabilities:
        fixed = vulnerability.fixed_versions[0] if vulnerability.fixed_versions else NA
        return f"{UPDATE_AVAILABLE} (>= {fixed})"

    latest = registry.latest_version if registry is not None else None
    if latest and is_newer_version(latest, installed_version):
        return f"{UPDATE_AVAILABLE} (latest {latest})"

    return UP_TO_DATE


def determine_usage_restrictions(license_text: Optional[str]) -> str:
    if not license_text:
        return NA
    lowered = license_text.lower()
    if "agpl" in lowered:
        return AGPL_RESTRICTIONS
    if "gpl" in lowered:
        return GPL_RESTRICTIONS
    if any(keyword in lowered for keyword in PERMISSIVE_KEYWORDS):
        return PERMISSIVE_RESTRICTIONS
    return NA


def build_comments(
    registry: Optional[ProviderResult],
    vulnerability: Optional[ProviderResult],
    repository: Optional[ProviderResult],
) -> str:
    """
    Join the human-readable signals into one note.

    Order: description, vulnerability count, popularity, recommended version.
    """
    notes: List[str] = []

    if registry is not None and registry.description:
        notes.append(f"Description: {registry.description}")

    if vulnerability is not None and vulnerability.vulnerability_count > 0:
        notes.append(f"{vulnerability.vulnerability_count} known vulnerabilities")

    stars = repository.stars if repository is not None else None
    if stars and stars > POPULAR_STAR_THRESHOLD:
        notes.append(f"Popular project ({stars} stars)")

    if vulnerability is not None and vulnerability.fixed_versions:
        notes.append(f"Recommended version: {vulnerability.fixed_versions[0]}")
    elif vulnerability is not None and vulnerability.has_vulnerabilities:
        notes.append(f"Recommended version: {NA}")

    return COMMENT_DELIMITER.join(notes) if notes else NA


def determine_supplier(registry: Optional[ProviderResult], repository: Optional[ProviderResult]) -> str:
    if registry is None and repository is None:
        return NA
    if repository is not None and (repository.stars or 0) > 0:
        return "Open-source"
    if registry is not None and registry.author:
        return "Vendor"
    return "Third-party"


def determine_origin(registry: Optional[ProviderResult], repository: Optional[ProviderResult]) -> str:
    # No answer from either source leaves the field undetermined
    if registry is None and repository is None:
        return NA
    if repository is not None and (repository.stars or 0) > 0:
        return "Open-source"
    if registry is not None and registry.license and "proprietary" in registry.license.lower():
        return "Proprietary"
    return "Open-source"


def derive_properties(
    component: Component,
    identifier: ResolvedIdentifier,
    registry: Optional[ProviderResult],
    vulnerability: Optional[ProviderResult],
    repository: Optional[ProviderResult],
    end_of_life: Optional[str],
    criticality: Optional[str],
) -> PropertySet:
    """
    Compute all twelve properties from settled lookup results.

    Any provider result may be None; the corresponding fields fall back to
    ``NA`` or to their documented default.
    """
    license_text = (registry.license if registry is not None else None) or (
        repository.license if repository is not None else None
    )
    release_date = (registry.release_date if registry is not None else None) or (
        repository.release_date if repository is not None else None
    )

    purl = str(component.purl) if component.purl else None

    return {
        PATCH_STATUS: compute_patch_status(vulnerability, identifier.version, registry),
        RELEASE_DATE: release_date or NA,
        END_OF_LIFE_DATE: end_of_life or NA,
        CRITICALITY: criticality or NA,
        USAGE_RESTRICTIONS: determine_usage_restrictions(license_text),
        COMMENTS: build_comments(registry, vulnerability, repository),
        EXECUTABLE: "Yes" if identifier.ecosystem in EXECUTABLE_ECOSYSTEMS else "No",
        ARCHIVE: "No",
        STRUCTURED: "Yes",
        UNIQUE_IDENTIFIER: purl or component.name or NA,
        SUPPLIER: determine_supplier(registry, repository),
        ORIGIN: determine_origin(registry, repository),
    }


def read_properties(component: Component) -> PropertySet:
    """Current values of the twelve keys on a component (missing keys omitted)."""
    current: PropertySet = {}
    for prop in component.properties:
        if prop.name in PROPERTY_KEYS and prop.name not in current:
            current[prop.name] = prop.value or ""
    return {key: current[key] for key in PROPERTY_KEYS if key in current}


def merge_properties(component: Component, computed: PropertySet) -> List[str]:
    """
    Upsert computed properties into a component by key.

    A computed value that is empty or ``NA`` never replaces an existing
    meaningful value. Keys the component lacks are added, ``NA`` included,
    so every key is present afterwards.

    Args:
        component: Component to update in place
        computed: Derived property set

    Returns:
        Keys whose stored value changed
    """
    changed: List[str] = []
    for key in PROPERTY_KEYS:
        new_value = computed.get(key) or NA
        existing = [prop for prop in component.properties if prop.name == key]
        current = existing[0].value if existing else None

        if existing and is_meaningful(current) and not is_meaningful(new_value):
            continue
        if len(existing) == 1 and current == new_value:
            continue

        for prop in existing:
            component.properties.remove(prop)
        component.properties.add(Property(name=key, value=new_value))
        changed.append(key)

    if changed:
        logger.debug(f"Updated {len(changed)} properties on {component.name}: {', '.join(changed)}")
    return changed
