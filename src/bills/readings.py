"""Smart-meter interval data importer.

Parses the half-hourly CSV export (HDF format) from the meter operator.
CSV format: MPRN, Meter Serial Number, Read Value, Read Type, Read Date and End Time

Each row is a kW reading for the 30 minutes ending at its timestamp. Rows are
expected latest first.
"""

import csv
import io
import math
from pathlib import Path
from typing import Iterable, Mapping

from .dates import canonical_key
from .diagnostics import INVALID_READING, Diagnostics
from .models import Reading

IMPORT_READ_TYPE = "Active Import Interval (kW)"
EXPORT_READ_TYPE = "Active Export Interval (kW)"

READ_TYPE_FIELD = "Read Type"
READ_VALUE_FIELD = "Read Value"
TIMESTAMP_FIELD = "Read Date and End Time"


def parse_rows(
    rows: Iterable[Mapping[str, str]], diagnostics: Diagnostics | None = None
) -> tuple[list[Reading], list[Reading]]:
    """Split rows into import and export series, keeping row order.

    Rows with any other read type are ignored. Rows whose value isn't a finite
    number are skipped and recorded as diagnostics.
    """
    imports: list[Reading] = []
    exports: list[Reading] = []

    for line_number, row in enumerate(rows, start=2):
        read_type = row.get(READ_TYPE_FIELD)
        if read_type == IMPORT_READ_TYPE:
            series = imports
        elif read_type == EXPORT_READ_TYPE:
            series = exports
        else:
            continue

        raw_value = row.get(READ_VALUE_FIELD)
        try:
            value = float(raw_value)
        except (TypeError, ValueError):
            value = math.nan
        if not math.isfinite(value):
            if diagnostics is not None:
                diagnostics.record(
                    INVALID_READING,
                    f"Skipping row {line_number}: invalid read value {raw_value!r}",
                    line=line_number,
                    value=raw_value,
                )
            continue

        series.append(Reading(canonical_key(row.get(TIMESTAMP_FIELD) or ""), value))

    return imports, exports


def parse_csv_text(
    csv_text: str, diagnostics: Diagnostics | None = None
) -> tuple[list[Reading], list[Reading]]:
    """Parse CSV text with a header row into import and export series."""
    reader = csv.DictReader(io.StringIO(csv_text.strip()))
    return parse_rows(reader, diagnostics)


def parse_csv(
    csv_path: Path, diagnostics: Diagnostics | None = None
) -> tuple[list[Reading], list[Reading]]:
    """Parse a meter CSV export file."""
    with open(csv_path, newline="", encoding="utf-8-sig") as f:
        return parse_rows(csv.DictReader(f), diagnostics)
