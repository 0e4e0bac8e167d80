"""Clock helpers for notification visibility windows.

Windows are compared as aware datetimes in the application timezone. The
database keeps the same instants as naive local values, so every value crossing
the persistence boundary goes through :func:`to_storage_time` or
:func:`to_app_time`.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from notification_engine.config import get_settings

logger = logging.getLogger(__name__)

_UTC_OFFSET = re.compile(r"^(?:UTC|GMT)([+-])(\d{1,2})(?::?(\d{2}))?$", re.IGNORECASE)


@lru_cache(maxsize=1)
def app_timezone() -> tzinfo:
    """Resolve ``APP_TIMEZONE`` as an IANA name or a ``UTC+hh:mm`` offset."""

    name = (get_settings().app_timezone or "").strip() or "UTC"
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        pass
    match = _UTC_OFFSET.match(name)
    if match is None:
        logger.warning("Unknown timezone %r, falling back to UTC", name)
        return timezone.utc
    sign, hours, minutes = match.groups()
    offset = timedelta(hours=int(hours), minutes=int(minutes or 0))
    return timezone(-offset if sign == "-" else offset)


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=app_timezone())


def to_app_time(value: datetime | None) -> datetime | None:
    """Make ``value`` aware in the app timezone; naive values are taken as local."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=app_timezone())
    return value.astimezone(app_timezone())


def to_storage_time(value: datetime | None) -> datetime | None:
    """Local wall-clock time without ``tzinfo``, as stored in ``DATETIME`` columns."""

    aware = to_app_time(value)
    return aware.replace(tzinfo=None) if aware is not None else None


def storage_now() -> datetime:
    return now_in_app_timezone().replace(tzinfo=None)


__all__ = [
    "app_timezone",
    "now_in_app_timezone",
    "storage_now",
    "to_app_time",
    "to_storage_time",
]
