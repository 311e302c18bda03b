"""Shared fixtures for bill estimator tests."""

from datetime import datetime, timedelta

import pytest

from bills.readings import EXPORT_READ_TYPE, IMPORT_READ_TYPE

HEADER = "MPRN,Meter Serial Number,Read Value,Read Type,Read Date and End Time"

# All bands at the same price, split across midnight like a real night rate
FLAT_PRICING = """
providers:
  - name: Mock Plan
    pricings:
      - start_date: null
        end_date: null
        standing_charge: 100
        import_rates:
          - start_time: 08:00
            end_time: 23:00
            price_per_kwh: 0.1
          - start_time: 23:00
            end_time: 02:00
            price_per_kwh: 0.1
          - start_time: 02:00
            end_time: 04:00
            price_per_kwh: 0.1
          - start_time: 04:00
            end_time: 08:00
            price_per_kwh: 0.1
        export_rates: []
"""


def generate_meter_csv(
    num_intervals: int,
    consumption_kw: float,
    start: datetime,
    skip_interval: int = 0,
    export_kw: float = 0.0,
    vary_consumption: bool = False,
) -> str:
    """Build a meter CSV export, latest reading first.

    Every skip_interval-th interval is left out. Date delimiters alternate
    between "-" and "/" as they do in real exports. With vary_consumption,
    slots ending in (08:00, 16:00] draw 3 kW, (16:00, 23:00] 2 kW, else 1 kW.
    """
    lines = [HEADER]
    current = start
    value = consumption_kw

    for i in range(num_intervals):
        if skip_interval and i % skip_interval == 0:
            current -= timedelta(minutes=30)
            continue

        fmt = "%d-%m-%Y %H:%M" if i % 2 == 0 else "%d/%m/%Y %H:%M"
        stamp = current.strftime(fmt)

        if vary_consumption:
            time_value = current.hour * 100 + current.minute
            if 800 < time_value <= 1600:
                value = 3
            elif 1600 < time_value <= 2300:
                value = 2
            else:
                value = 1

        lines.append(f"dummy,dummy,{value:.6f},{IMPORT_READ_TYPE},{stamp}")
        lines.append(f"dummy,dummy,{export_kw:.6f},{EXPORT_READ_TYPE},{stamp}")
        current -= timedelta(minutes=30)

    return "\n".join(lines)


@pytest.fixture
def make_meter_csv():
    return generate_meter_csv


@pytest.fixture
def flat_pricing():
    return FLAT_PRICING


@pytest.fixture
def start():
    return datetime(2023, 11, 10, 0, 0)
