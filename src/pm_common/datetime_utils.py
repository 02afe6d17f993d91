"""UTC time utilities.

The settlement engine works on signed unix-second timestamps; one snapshot
is taken per operation.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def unix_now() -> int:
    """Return the current unix timestamp in whole seconds."""
    return int(utc_now().timestamp())
