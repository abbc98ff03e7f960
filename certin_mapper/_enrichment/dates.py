"""Canonical date handling.

All dates produced by the pipeline use the ``DD-MM-YYYY`` textual form.
"""

from datetime import datetime, timezone
from typing import Any, Optional

CANONICAL_DATE_FORMAT = "%d-%m-%Y"


def format_date(value: Any) -> Optional[str]:
    """
    Convert an ISO 8601 date or timestamp string to ``DD-MM-YYYY``.

    Timezone-aware timestamps are converted to UTC first. Anything that is
    not a parseable string (None, booleans, numbers, garbage) gives None.

    Examples:
        >>> format_date("2023-05-22T15:12:42Z")
        '22-05-2023'
        >>> format_date("2025-10-31")
        '31-10-2025'
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.strftime(CANONICAL_DATE_FORMAT)


def format_epoch_millis(value: Any) -> Optional[str]:
    """Convert a Unix timestamp in milliseconds to ``DD-MM-YYYY`` (UTC)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return None
    try:
        parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return parsed.strftime(CANONICAL_DATE_FORMAT)
