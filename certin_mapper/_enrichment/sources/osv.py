"""OSV data source for known vulnerabilities.

Queries https://api.osv.dev for the vulnerabilities affecting one installed
package version and condenses them into the vulnerability fields of a
:class:`ProviderResult`: whether any exist, how many, the highest CVSS base
score, the advisory-database classification and the versions that fix them.
"""

from typing import Any, Dict, List, Optional

import requests
from cvss import CVSS2, CVSS3, CVSS4

from certin_mapper.logging_config import logger

from ..cache import ProviderCache
from ..identifiers import ResolvedIdentifier
from ..results import LookupResult, ProviderResult
from ..utils import http_post, is_newer_version

OSV_QUERY_URL = "https://api.osv.dev/v1/query"
DEFAULT_TIMEOUT = 10  # seconds

# Our ecosystem tags to OSV ecosystem names
OSV_ECOSYSTEMS = {
    "npm": "npm",
    "pypi": "PyPI",
    "maven": "Maven",
}

# Newest CVSS version first
CVSS_PARSERS = (
    ("CVSS_V4", CVSS4),
    ("CVSS_V3", CVSS3),
    ("CVSS_V2", CVSS2),
)

# Advisory database severity labels, most severe first
SEVERITY_LABELS = {
    "CRITICAL": "Critical",
    "HIGH": "High",
    "MODERATE": "Medium",
    "MEDIUM": "Medium",
    "LOW": "Low",
}
SEVERITY_ORDER = ("Critical", "High", "Medium", "Low")


def extract_cvss_score(severity_entries: Any) -> Optional[float]:
    """
    Score the highest-priority CVSS vector of one vulnerability.

    Args:
        severity_entries: OSV ``severity`` list,
            e.g. ``[{"type": "CVSS_V3", "score": "CVSS:3.1/AV:N/..."}]``

    Returns:
        Base score of the newest parsable CVSS version, or None
    """
    if not isinstance(severity_entries, list):
        return None

    vectors = {entry.get("type"): entry.get("score") for entry in severity_entries if isinstance(entry, dict)}
    for cvss_type, parser in CVSS_PARSERS:
        vector = vectors.get(cvss_type)
        if not vector:
            continue
        try:
            return float(parser(vector).scores()[0])
        except Exception as e:
            logger.debug(f"Failed to parse {cvss_type} vector '{vector}': {e}")
    return None


def normalize_severity_label(label: Any) -> Optional[str]:
    """Map an advisory severity label (``MODERATE``, ``high``...) to Critical/High/Medium/Low."""
    if not isinstance(label, str):
        return None
    return SEVERITY_LABELS.get(label.strip().upper())


def osv_package_name(identifier: ResolvedIdentifier) -> str:
    if identifier.ecosystem == "maven" and identifier.group:
        return f"{identifier.group}:{identifier.name}"
    return identifier.name


class OSVSource:
    """Data source for the OSV vulnerability database."""

    name = "osv.dev"

    def __init__(self, cache: ProviderCache, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._cache = cache
        self._timeout = timeout

    def supports(self, identifier: ResolvedIdentifier) -> bool:
        return identifier.ecosystem in OSV_ECOSYSTEMS and bool(identifier.name) and bool(identifier.version)

    @staticmethod
    def cache_key(identifier: ResolvedIdentifier) -> str:
        return f"osv:{identifier.ecosystem}:{osv_package_name(identifier)}@{identifier.version}"

    async def fetch(self, identifier: ResolvedIdentifier, session: requests.Session) -> LookupResult[ProviderResult]:
        """
        Query OSV for the vulnerabilities of one package version.

        A successful query with no vulnerabilities is a hit with
        ``has_vulnerabilities=False``.
        """
        if not self.supports(identifier):
            return LookupResult.no_data(f"unsupported ecosystem or missing version for {identifier.ecosystem}")

        key = self.cache_key(identifier)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit (OSV): {key}")
            return LookupResult.hit(cached)

        package_name = osv_package_name(identifier)
        payload = {
            "package": {"name": package_name, "ecosystem": OSV_ECOSYSTEMS[identifier.ecosystem]},
            "version": identifier.version,
        }
        try:
            response = await http_post(session, OSV_QUERY_URL, self._timeout, json=payload)
            if response.status_code != 200:
                logger.warning(f"OSV query failed for {package_name}@{identifier.version}: HTTP {response.status_code}")
                return LookupResult.no_data(f"HTTP {response.status_code}")
            data = response.json()
        except requests.exceptions.Timeout:
            logger.warning(f"Timeout querying OSV for {package_name}@{identifier.version}")
            return LookupResult.no_data("timeout")
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error querying OSV for {package_name}@{identifier.version}: {e}")
            return LookupResult.no_data("request error")
        except ValueError as e:
            logger.warning(f"JSON decode error for OSV {package_name}@{identifier.version}: {e}")
            return LookupResult.no_data("malformed response")

        if not isinstance(data, dict):
            return LookupResult.no_data("malformed response")

        vulns = [vuln for vuln in data.get("vulns") or [] if isinstance(vuln, dict)]
        summary = self._summarize(vulns, package_name, identifier.version)
        return self._cache.remember(key, LookupResult.hit(summary))

    def _summarize(self, vulns: List[Dict[str, Any]], package_name: str, installed: str) -> ProviderResult:
        scores = [score for score in (extract_cvss_score(vuln.get("severity")) for vuln in vulns) if score is not None]

        labels = set()
        for vuln in vulns:
            database_specific = vuln.get("database_specific")
            if isinstance(database_specific, dict):
                label = normalize_severity_label(database_specific.get("severity"))
                if label:
                    labels.add(label)
        default_criticality = next((label for label in SEVERITY_ORDER if label in labels), None)

        fixed_versions: List[str] = []
        for vuln in vulns:
            for fixed in _fixed_versions(vuln, package_name):
                if fixed not in fixed_versions:
                    fixed_versions.append(fixed)
        # Fixes newer than the installed version come first, otherwise first-seen order
        fixed_versions.sort(key=lambda fixed: not is_newer_version(fixed, installed))

        if vulns:
            logger.debug(f"OSV reports {len(vulns)} vulnerabilities for {package_name}")

        return ProviderResult(
            source=self.name,
            has_vulnerabilities=bool(vulns),
            vulnerability_count=len(vulns),
            max_severity_score=max(scores) if scores else None,
            default_criticality=default_criticality,
            fixed_versions=tuple(fixed_versions),
        )


def _fixed_versions(vuln: Dict[str, Any], package_name: str) -> List[str]:
    """Fixed versions from the ranges of the ``affected`` entries for this package."""
    fixed: List[str] = []
    for affected in vuln.get("affected") or []:
        if not isinstance(affected, dict):
            continue
        package = affected.get("package")
        if isinstance(package, dict) and package.get("name") and package["name"].lower() != package_name.lower():
            continue
        for version_range in affected.get("ranges") or []:
            if not isinstance(version_range, dict) or version_range.get("type") == "GIT":
                continue
            for event in version_range.get("events") or []:
                if isinstance(event, dict) and event.get("fixed"):
                    fixed.append(str(event["fixed"]))
    return fixed
