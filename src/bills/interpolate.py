"""Fill missing half-hour slots in meter data.

Meter exports are often missing slots. A missing slot is estimated as the
average reading at the same time of day over the surrounding days.
"""

from datetime import datetime, timedelta

from .dates import format_timestamp
from .diagnostics import INTERPOLATED_SLOT, Diagnostics
from .models import Reading

SLOT = timedelta(minutes=30)
INTERPOLATION_WINDOW_DAYS = 14  # days either side searched for the same time of day


def slot_range(earliest: datetime, latest: datetime) -> list[datetime]:
    """Every 30-minute slot from earliest to latest inclusive."""
    slots = []
    current = earliest
    while current <= latest:
        slots.append(current)
        current += SLOT
    return slots


def same_time_of_day_average(
    readings_map: dict[str, float],
    slot: datetime,
    window_days: int = INTERPOLATION_WINDOW_DAYS,
) -> tuple[float, int]:
    """Average of readings at this slot's time of day within the window.

    Returns (average, sample count); the average is 0.0 with no samples.
    """
    samples = []
    for day_offset in range(-window_days, window_days + 1):
        key = format_timestamp(slot + timedelta(days=day_offset))
        if key in readings_map:
            samples.append(readings_map[key])

    if not samples:
        return 0.0, 0
    return sum(samples) / len(samples), len(samples)


def interpolate(
    readings_map: dict[str, float],
    earliest: datetime,
    latest: datetime,
    diagnostics: Diagnostics | None = None,
    window_days: int = INTERPOLATION_WINDOW_DAYS,
) -> list[Reading]:
    """Produce a dense, ascending series covering every slot in range.

    Slots present in readings_map keep their value. Missing slots take the
    same-time-of-day average, or 0.0 when nothing is found in the window.
    """
    dense = []
    for slot in slot_range(earliest, latest):
        key = format_timestamp(slot)
        if key in readings_map:
            dense.append(Reading(key, readings_map[key]))
            continue

        value, samples = same_time_of_day_average(readings_map, slot, window_days)
        if diagnostics is not None:
            diagnostics.record(
                INTERPOLATED_SLOT,
                f"Timestamp missing {key}. Interpolated value: {value}",
                timestamp=key,
                value=value,
                samples=samples,
            )
        dense.append(Reading(key, value))

    return dense
