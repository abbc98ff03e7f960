"""Criticality resolution for a single component.

Precedence, highest first:

1. Ratings declared in the SBOM's own vulnerabilities section for this
   component (the most severe rating wins).
2. The highest CVSS score reported by the vulnerability source.
3. The vulnerability source's advisory classification.

A rating declared in the SBOM always outranks a computed score, even when the
declared rating is lower.
"""

from typing import Iterable, Optional

from cyclonedx.model.vulnerability import Vulnerability, VulnerabilitySeverity

from .results import LookupResult, ProviderResult

# Most severe first
SEVERITY_RANKING = (
    VulnerabilitySeverity.CRITICAL,
    VulnerabilitySeverity.HIGH,
    VulnerabilitySeverity.MEDIUM,
    VulnerabilitySeverity.LOW,
)

SEVERITY_LABELS = {
    VulnerabilitySeverity.CRITICAL: "Critical",
    VulnerabilitySeverity.HIGH: "High",
    VulnerabilitySeverity.MEDIUM: "Medium",
    VulnerabilitySeverity.LOW: "Low",
}


def criticality_from_sbom(vulnerabilities: Iterable[Vulnerability], bom_ref: Optional[str]) -> Optional[str]:
    """
    Most severe declared rating among vulnerabilities affecting ``bom_ref``.

    Ratings of severity info, none or unknown are ignored.
    """
    if not bom_ref:
        return None

    best: Optional[int] = None
    for vulnerability in vulnerabilities or ():
        if not any(target.ref == bom_ref for target in vulnerability.affects):
            continue
        for rating in vulnerability.ratings:
            if rating.severity in SEVERITY_RANKING:
                rank = SEVERITY_RANKING.index(rating.severity)
                if best is None or rank < best:
                    best = rank

    if best is None:
        return None
    return SEVERITY_LABELS[SEVERITY_RANKING[best]]


def score_to_criticality(score: Optional[float]) -> Optional[str]:
    if score is None:
        return None
    if score >= 9:
        return "Critical"
    if score >= 7:
        return "High"
    if score >= 4:
        return "Medium"
    if score > 0:
        return "Low"
    return None


def resolve_criticality(
    vulnerabilities: Iterable[Vulnerability],
    bom_ref: Optional[str],
    vulnerability_result: LookupResult[ProviderResult],
) -> Optional[str]:
    """
    Resolve the criticality of a component.

    Args:
        vulnerabilities: Vulnerabilities declared in the SBOM
        bom_ref: The component's bom-ref value
        vulnerability_result: Result of the vulnerability lookup

    Returns:
        "Critical", "High", "Medium" or "Low", or None when nothing is known
    """
    declared = criticality_from_sbom(vulnerabilities, bom_ref)
    if declared:
        return declared

    if not vulnerability_result.found:
        return None

    signal = vulnerability_result.value
    return score_to_criticality(signal.max_severity_score) or signal.default_criticality
