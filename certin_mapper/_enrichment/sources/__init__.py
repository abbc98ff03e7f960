"""Data source implementations for component enrichment."""

from .github import GitHubSource, normalize_repo_url
from .lifecycle import LifecycleSource, candidate_slugs
from .maven import MavenCentralSource
from .npm import NpmSource
from .osv import OSVSource
from .pypi import PyPISource

__all__ = [
    "GitHubSource",
    "LifecycleSource",
    "MavenCentralSource",
    "NpmSource",
    "OSVSource",
    "PyPISource",
    "candidate_slugs",
    "normalize_repo_url",
]
