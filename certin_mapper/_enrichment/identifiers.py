"""Package identifier resolution.

Turns a component's package URL (or, failing that, its own name/group/version
fields) into a :class:`ResolvedIdentifier` naming the ecosystem to query.
"""

from dataclasses import dataclass
from typing import Optional

from packageurl import PackageURL

from certin_mapper.logging_config import logger

UNKNOWN_ECOSYSTEM = "unknown"


@dataclass(frozen=True)
class ResolvedIdentifier:
    """Ecosystem-qualified package reference."""

    ecosystem: str
    name: str
    version: Optional[str] = None
    group: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        """``group:name`` for grouped packages, otherwise just the name."""
        if self.group:
            return f"{self.group}:{self.name}"
        return self.name


def parse_purl(identifier: Optional[str]) -> Optional[ResolvedIdentifier]:
    """
    Parse a package URL into a ResolvedIdentifier.

    Maven purls must carry a namespace (the group). For every other type the
    namespace is folded into the name, so ``pkg:npm/%40angular/core@17.0.0``
    resolves to the npm package ``@angular/core``.

    Args:
        identifier: Package URL string, e.g. ``pkg:npm/lodash@4.17.21``

    Returns:
        ResolvedIdentifier, or None if the string is absent or unparsable
    """
    if not identifier or not isinstance(identifier, str):
        return None

    try:
        purl = PackageURL.from_string(identifier.strip())
    except ValueError as e:
        logger.debug(f"Failed to parse PURL '{identifier}': {e}")
        return None

    ecosystem = (purl.type or "").lower()
    if not ecosystem or not purl.name:
        return None

    if ecosystem == "maven":
        if not purl.namespace:
            logger.debug(f"Maven PURL without group: {identifier}")
            return None
        return ResolvedIdentifier(ecosystem="maven", group=purl.namespace, name=purl.name, version=purl.version)

    name = f"{purl.namespace}/{purl.name}" if purl.namespace else purl.name
    return ResolvedIdentifier(ecosystem=ecosystem, name=name, version=purl.version)


def resolve_identifier(
    identifier: Optional[str],
    name: Optional[str] = None,
    version: Optional[str] = None,
    group: Optional[str] = None,
) -> ResolvedIdentifier:
    """
    Resolve a component to an ecosystem-qualified identifier.

    Falls back to the component's own fields when the package URL is missing
    or malformed: a component with both a group and a name is treated as a
    Maven artifact, anything else becomes ecosystem ``unknown``. Never raises.
    """
    parsed = parse_purl(identifier)
    if parsed is not None:
        return parsed

    if group and name:
        return ResolvedIdentifier(ecosystem="maven", group=group, name=name, version=version)

    return ResolvedIdentifier(ecosystem=UNKNOWN_ECOSYSTEM, name=name or "", version=version)
