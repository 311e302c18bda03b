"""Timestamp keys for meter readings.

Readings are keyed by a "DD-MM-YYYY HH:MM" string. Meter exports use either
"-" or "/" between the date parts, sometimes both within the same file, so
parsing accepts both while formatting always produces the "-" form.

These run once per reading per interpolation pass, so they stick to plain
field formatting and splitting rather than strftime/strptime.
"""

from datetime import datetime

from .errors import UnrecognizedFormatError

DATE_DELIMITERS = ("-", "/")


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as DD-MM-YYYY HH:MM."""
    return f"{dt.day:02d}-{dt.month:02d}-{dt.year:04d} {dt.hour:02d}:{dt.minute:02d}"


def format_time_of_day(dt: datetime) -> str:
    """Format the time part of a datetime as HH:MM."""
    return f"{dt.hour:02d}:{dt.minute:02d}"


def parse_timestamp(text: str) -> datetime:
    """Parse DD-MM-YYYY HH:MM or DD/MM/YYYY HH:MM into a naive datetime."""
    parts = text.split()
    if len(parts) != 2:
        raise UnrecognizedFormatError(f"Unrecognized timestamp format: {text!r}")
    date_part, time_part = parts

    for delimiter in DATE_DELIMITERS:
        if delimiter in date_part:
            break
    else:
        raise UnrecognizedFormatError(f"Unrecognized timestamp format: {text!r}")

    try:
        day, month, year = (int(p) for p in date_part.split(delimiter))
        hour, minute = (int(p) for p in time_part.split(":"))
        return datetime(year, month, day, hour, minute)
    except ValueError as e:
        raise UnrecognizedFormatError(f"Unrecognized timestamp format: {text!r}") from e


def canonical_key(text: str) -> str:
    """Normalise either input variant to the DD-MM-YYYY HH:MM key."""
    return format_timestamp(parse_timestamp(text))
