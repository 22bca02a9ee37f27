from datetime import datetime, timezone
from typing import Optional, Union

from db.database import dt_from_utc_iso
from i18n.translations import Language, get_message


def format_relative_time(
    value: Union[str, datetime, None],
    now: Optional[datetime] = None,
    language: Optional[Language] = None,
) -> str:
    """Render a timestamp as "just now", "5m ago", ... "2y ago"."""
    if isinstance(value, str):
        ts = dt_from_utc_iso(value)
    else:
        ts = value
    if ts is None:
        return get_message("time_unknown", language)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = int((now - ts).total_seconds())
    if seconds < 60:
        return get_message("time_just_now", language)

    minutes = seconds // 60
    if minutes < 60:
        return get_message("time_minutes_ago", language, n=minutes)

    hours = minutes // 60
    if hours < 24:
        return get_message("time_hours_ago", language, n=hours)

    days = hours // 24
    if days < 7:
        return get_message("time_days_ago", language, n=days)

    weeks = days // 7
    if weeks < 4:
        return get_message("time_weeks_ago", language, n=weeks)

    months = days // 30
    if months < 12:
        return get_message("time_months_ago", language, n=max(months, 1))

    return get_message("time_years_ago", language, n=days // 365)
