"""Residual caffeine estimation with first-order exponential decay."""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime, time

from caffeine_tracker.domain.entries import DoseEntry
from caffeine_tracker.domain.residual import CaffeineLevel, ResidualReading

logger = logging.getLogger(__name__)

HALF_LIFE_HOURS = 6.0
SECONDS_PER_HOUR = 3600.0

_TIME_FORMATS = (
    "%H:%M",
    "%H:%M:%S",
    "%I:%M %p",
    "%I:%M:%S %p",
    "%I:%M%p",
    "%I:%M:%S%p",
)

_LEVEL_THRESHOLDS = (
    (200.0, CaffeineLevel.VERY_HIGH),
    (100.0, CaffeineLevel.HIGH),
    (50.0, CaffeineLevel.MODERATE),
    (10.0, CaffeineLevel.LOW),
)

_LEVEL_BADGES = {
    CaffeineLevel.VERY_HIGH: "destructive",
    CaffeineLevel.HIGH: "secondary",
    CaffeineLevel.MODERATE: "default",
}


def estimate_residual(
    entries: Iterable[DoseEntry],
    now: datetime,
    *,
    half_life_hours: float = HALF_LIFE_HOURS,
) -> float:
    """Return the total residual caffeine in mg at ``now``.

    Entries whose date or time cannot be parsed are skipped so one bad
    record does not blank out the aggregate.
    """
    total = 0.0
    for entry in entries:
        taken_at = resolve_entry_timestamp(entry, now)
        if taken_at is None:
            continue
        hours_elapsed = _elapsed_seconds(taken_at, now) / SECONDS_PER_HOUR
        if hours_elapsed < 0:
            continue
        total += entry.amount_mg * 0.5 ** (hours_elapsed / half_life_hours)
    return max(0.0, total)


def evaluate(
    entries: Iterable[DoseEntry],
    now: datetime,
    half_life_hours: float = HALF_LIFE_HOURS,
) -> ResidualReading:
    """Estimate the residual at ``now`` and label it."""
    residual = estimate_residual(entries, now, half_life_hours=half_life_hours)
    return ResidualReading(
        now=now, residual_mg=residual, level=classify_residual(residual)
    )


def resolve_entry_timestamp(entry: DoseEntry, now: datetime) -> datetime | None:
    """Attach a year to an entry's month/day and time.

    Uses ``now``'s year and rolls back exactly one year when that would put
    the dose after ``now``. Returns None for malformed values.
    """
    parsed = _parse_month_day(entry.date)
    clock = parse_clock_time(entry.time)
    if parsed is None or clock is None:
        logger.debug(
            "Skipping malformed caffeine entry",
            extra={"date": entry.date, "time": entry.time},
        )
        return None
    month, day = parsed
    try:
        candidate = datetime.combine(
            now.date().replace(month=month, day=day), clock, tzinfo=now.tzinfo
        )
    except ValueError:
        logger.debug(
            "Skipping caffeine entry with impossible date",
            extra={"date": entry.date, "year": now.year},
        )
        return None
    if candidate > now:
        candidate = _previous_year(candidate)
    return candidate


def parse_clock_time(raw: str) -> time | None:
    """Parse a 24-hour or AM/PM wall-clock string."""
    value = raw.strip().upper()
    for time_format in _TIME_FORMATS:
        try:
            return datetime.strptime(value, time_format).time()  # noqa: DTZ007
        except ValueError:
            continue
    return None


def classify_residual(residual_mg: float) -> CaffeineLevel:
    """Map a residual amount to its severity label."""
    for threshold, level in _LEVEL_THRESHOLDS:
        if residual_mg > threshold:
            return level
    return CaffeineLevel.MINIMAL


def level_badge(level: CaffeineLevel) -> str:
    """Return the display variant used for a level badge."""
    return _LEVEL_BADGES.get(level, "outline")


def _parse_month_day(raw: str) -> tuple[int, int] | None:
    parts = raw.strip().split("/")
    if len(parts) != 2:  # noqa: PLR2004
        return None
    month_raw, day_raw = (part.strip() for part in parts)
    if not (month_raw.isdecimal() and day_raw.isdecimal()):
        return None
    return int(month_raw), int(day_raw)


def _previous_year(candidate: datetime) -> datetime:
    try:
        return candidate.replace(year=candidate.year - 1)
    except ValueError:
        # Feb 29 has no counterpart in the previous year; overflow to Mar 1.
        return candidate.replace(year=candidate.year - 1, month=3, day=1)


def _elapsed_seconds(start: datetime, end: datetime) -> float:
    if end.tzinfo is not None:
        start = start.astimezone(UTC)
        end = end.astimezone(UTC)
    return (end - start).total_seconds()
