from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Tuple, Union

Clock = Callable[[], datetime]

EVENT_WINDOW_YEARS = 10


def now() -> datetime:
    return datetime.now(timezone.utc)


def days_to_iso8601(days: Union[int, str, None], clock: Clock = now) -> Optional[str]:
    """Timestamp `days` days before now, or None when `days` is blank, zero or not a number."""
    if not days:
        return None
    try:
        num_days = int(days)
    except (TypeError, ValueError):
        return None
    if not num_days:
        return None
    moment = clock() - timedelta(days=num_days)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _shift_years(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        # Feb 29 into a non-leap year
        return moment.replace(year=moment.year + years, day=28)


def events_date_window(clock: Clock = now) -> Tuple[str, str]:
    """(start_date, end_date) spanning ten years either side of now, Tribe Events format."""
    current = clock()
    fmt = "%Y-%m-%d 00:00:00"
    return (
        _shift_years(current, -EVENT_WINDOW_YEARS).strftime(fmt),
        _shift_years(current, EVENT_WINDOW_YEARS).strftime(fmt),
    )
