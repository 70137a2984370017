from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional, Tuple
from zoneinfo import ZoneInfo

# Both sources publish on Vietnam civil time.
VN_TZ = ZoneInfo("Asia/Ho_Chi_Minh")

DEFAULT_LOOKBACK_DAYS = 7


def start_of_day(d: date) -> datetime:
    return datetime.combine(d, time(0, 0, 0), tzinfo=VN_TZ)


def end_of_day(d: date) -> datetime:
    return datetime.combine(d, time(23, 59, 59, 999000), tzinfo=VN_TZ)


def resolve_range(
    start: Optional[date] = None, end: Optional[date] = None, now: Optional[datetime] = None
) -> Tuple[datetime, datetime]:
    """Resolve an inclusive crawl range.

    ``end`` defaults to today in Vietnam and ``start`` to a week before ``end``.
    The result is normalized to the first and last instant of those days.
    """
    if end is None:
        current = (now or datetime.now(VN_TZ)).astimezone(VN_TZ)
        end = current.date()
    if start is None:
        start = end - timedelta(days=DEFAULT_LOOKBACK_DAYS)
    if start > end:
        raise ValueError(f"start date {start} is after end date {end}")
    return start_of_day(start), end_of_day(end)


def days_between(start: datetime, end: datetime) -> Iterator[date]:
    """Yield every calendar day from ``start`` to ``end`` inclusive, in order."""
    current = start.date()
    last = end.date()
    while current <= last:
        yield current
        current += timedelta(days=1)


def to_unix(dt: datetime) -> int:
    return int(dt.timestamp())
