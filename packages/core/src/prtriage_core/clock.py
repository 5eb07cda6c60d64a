"""Business-day arithmetic for PR age and staleness.

Ages are counted in weekdays so a PR opened on Friday does not look four days
old on Monday morning.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo

_SATURDAY = 5


def _to_local_date(instant: datetime, tz: tzinfo) -> date:
    if instant.tzinfo is None:
        return instant.date()
    return instant.astimezone(tz).date()


def business_days_between(start: datetime, end: datetime, tz: tzinfo = timezone.utc) -> int:
    """Count weekdays in the inclusive date range between two instants.

    Both instants are truncated to their calendar date in ``tz``; naive
    datetimes are taken to already be in ``tz``. Argument order does not
    matter. The same weekday on both sides counts as 1.
    """
    first = _to_local_date(start, tz)
    last = _to_local_date(end, tz)
    if last < first:
        first, last = last, first

    total_days = (last - first).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    count = full_weeks * 5

    day = first + timedelta(days=full_weeks * 7)
    for _ in range(remainder):
        if day.weekday() < _SATURDAY:
            count += 1
        day += timedelta(days=1)

    return count
