"""Whole-day expansion of date filter boundaries.

Callers normally pass calendar dates rather than instants. A boundary whose
time-of-day is midnight is therefore read as "that whole day": an end bound is
pushed to the last instant of its day, and a start bound given without any end
bound becomes a single-day range.
"""

from datetime import datetime, time, timezone

# Last representable instant of a day at microsecond resolution
END_OF_DAY = time(23, 59, 59, 999999)


def has_zero_time(value: datetime) -> bool:
    """True when the value carries no time-of-day (hour, minute and second all zero)."""
    return value.hour == 0 and value.minute == 0 and value.second == 0


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), END_OF_DAY, tzinfo=value.tzinfo)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive values and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def normalize_date_range(
    start: datetime | None, end: datetime | None
) -> tuple[datetime | None, datetime | None]:
    """
    Expand day-granularity boundaries into an inclusive range.

    Rules, applied in order:
    1. start at midnight and no end -> start..end of the same calendar day
    2. end at midnight -> end of that day
    3. start with a time-of-day -> used as given

    Boundaries keep the timezone they were supplied with.
    """
    if start is not None and has_zero_time(start):
        start = start_of_day(start)
        if end is None:
            end = end_of_day(start)

    if end is not None and has_zero_time(end):
        end = end_of_day(end)

    return start, end
