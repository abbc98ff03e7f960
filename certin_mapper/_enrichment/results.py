"""Result types returned by enrichment data sources.

Every source call returns a :class:`LookupResult`. A lookup either found a
value or carries a short reason explaining why there is no data. Sources
never raise to their caller; "no data" is propagated instead.
"""

from dataclasses import dataclass
from typing import Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ProviderResult:
    """
    Normalized answer from a single provider.

    All fields are optional. Registry sources fill release/version/license
    fields, the repository source fills popularity fields, and the
    vulnerability source fills the vulnerability fields.
    """

    source: str = ""

    # Registry / repository metadata
    release_date: Optional[str] = None  # DD-MM-YYYY
    latest_version: Optional[str] = None
    license: Optional[str] = None
    description: Optional[str] = None
    homepage: Optional[str] = None
    repository_url: Optional[str] = None
    author: Optional[str] = None
    stars: Optional[int] = None
    forks: Optional[int] = None
    last_updated: Optional[str] = None  # DD-MM-YYYY

    # Vulnerability signal
    has_vulnerabilities: bool = False
    vulnerability_count: int = 0
    max_severity_score: Optional[float] = None
    default_criticality: Optional[str] = None
    fixed_versions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LookupResult(Generic[T]):
    """Either a populated value or an explicit "no data" outcome."""

    value: Optional[T] = None
    reason: str = ""

    @classmethod
    def hit(cls, value: T) -> "LookupResult[T]":
        return cls(value=value)

    @classmethod
    def no_data(cls, reason: str) -> "LookupResult[T]":
        return cls(value=None, reason=reason)

    @property
    def found(self) -> bool:
        return self.value is not None
