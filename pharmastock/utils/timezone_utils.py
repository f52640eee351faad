from __future__ import annotations

from datetime import date, datetime, timezone as dt_timezone

import pytz
from flask import current_app, has_app_context

DEFAULT_TIMEZONE = "UTC"


class TimezoneUtils:
    """Clock helpers. The database stores naive UTC; "today" is the pharmacy's local date."""

    @staticmethod
    def validate_timezone(tz_name: str | None) -> bool:
        return bool(tz_name) and tz_name in pytz.all_timezones_set

    @staticmethod
    def _get_timezone(tz_name: str | None):
        if TimezoneUtils.validate_timezone(tz_name):
            return pytz.timezone(tz_name)
        return pytz.timezone(DEFAULT_TIMEZONE)

    @staticmethod
    def pharmacy_timezone_name() -> str:
        if has_app_context():
            return current_app.config.get("PHARMACY_TIMEZONE") or DEFAULT_TIMEZONE
        return DEFAULT_TIMEZONE

    @staticmethod
    def utc_now() -> datetime:
        """Naive UTC timestamp, the storage convention for every DateTime column."""
        return datetime.now(dt_timezone.utc).replace(tzinfo=None)

    @staticmethod
    def now() -> datetime:
        """Current time localized to the pharmacy timezone."""
        tz = TimezoneUtils._get_timezone(TimezoneUtils.pharmacy_timezone_name())
        return datetime.now(dt_timezone.utc).astimezone(tz)

    @staticmethod
    def today() -> date:
        return TimezoneUtils.now().date()

    @staticmethod
    def local_date(value: datetime | date | None) -> date | None:
        """Calendar date of a stored timestamp as seen from the pharmacy."""
        if value is None:
            return None
        if not isinstance(value, datetime):
            return value
        aware = value if value.tzinfo else value.replace(tzinfo=dt_timezone.utc)
        tz = TimezoneUtils._get_timezone(TimezoneUtils.pharmacy_timezone_name())
        return aware.astimezone(tz).date()

    @staticmethod
    def format_datetime_for_api(value: datetime | None) -> str | None:
        if value is None:
            return None
        aware = value if value.tzinfo else value.replace(tzinfo=dt_timezone.utc)
        return aware.astimezone(dt_timezone.utc).isoformat()
