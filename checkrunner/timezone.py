"""Timestamps for delivery rows, in the configured timezone."""

from __future__ import annotations

import datetime as dt
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from checkrunner.config import settings

DEFAULT_TIMEZONE = "UTC"


def _load_timezone(name: str, fallback: str = DEFAULT_TIMEZONE) -> tuple[ZoneInfo, str]:
    try:
        return ZoneInfo(name), name
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(fallback), fallback


TZ, TZ_NAME = _load_timezone(settings.timezone or DEFAULT_TIMEZONE)


def now_local() -> dt.datetime:
    return dt.datetime.now(tz=TZ)


def format_local(value: Optional[dt.datetime]) -> Optional[str]:
    """
    ISO-8601 text for ``value`` in the configured timezone.

    SQLite hands back naive datetimes; those were written by :func:`now_local`
    and are read as local time.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=TZ)
    return value.astimezone(TZ).isoformat()
