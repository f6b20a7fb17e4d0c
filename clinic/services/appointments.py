"""Calendar helpers for appointment filtering."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from clinic.core.config import settings

logger = logging.getLogger(__name__)


def clinic_timezone() -> ZoneInfo:
    """Return the configured clinic timezone, falling back to UTC."""

    try:
        return ZoneInfo(settings.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("unknown clinic timezone", extra={"timezone": settings.timezone})
        return ZoneInfo("UTC")


def clinic_today(now: datetime | None = None) -> date:
    tz = clinic_timezone()
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return current.astimezone(tz).date()


def day_window(target_date: date, tz: ZoneInfo | None = None) -> tuple[datetime, datetime]:
    """Return the naive-UTC [start, end) range covering a local calendar day."""

    tz = tz or clinic_timezone()
    start = datetime.combine(target_date, time.min, tzinfo=tz)
    end = start + timedelta(days=1)
    return (
        start.astimezone(timezone.utc).replace(tzinfo=None),
        end.astimezone(timezone.utc).replace(tzinfo=None),
    )
