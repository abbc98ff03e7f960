"""Provider cache with success-only writes."""

from typing import Any, Dict, Iterator, Optional

from .results import LookupResult


class ProviderCache:
    """
    Append-only cache shared by the enrichment sources.

    Only successful lookups are stored, so a failed lookup is retried the
    next time it is requested. Once a key is written it is never replaced.
    There is no eviction; the cache lives as long as the object does.

    Keys are namespaced by the sources, e.g. ``npm:lodash``,
    ``maven:org.apache.commons:commons-lang3`` or ``github:psf/requests``.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._entries.get(key)

    def put(self, key: str, value: Any) -> bool:
        """
        Store a value unless it is None or the key is already present.

        Returns:
            True if the value was written
        """
        if value is None or key in self._entries:
            return False
        self._entries[key] = value
        return True

    def remember(self, key: str, result: LookupResult) -> LookupResult:
        """Cache the value of a successful lookup and hand the result back."""
        if result.found:
            self.put(key, result.value)
        return result

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
