"""Annual bill estimation across provider pricing plans."""

from collections import defaultdict
from datetime import timedelta
from typing import Sequence

from .dates import format_time_of_day, parse_timestamp
from .diagnostics import Diagnostics
from .errors import InvalidOrderingError, MissingConsumptionDataError
from .interpolate import SLOT, interpolate as interpolate_slots
from .models import BillBreakdown, ProviderPlan, RateBand, RateBucket, Reading
from .readings import parse_csv_text
from .tariffs import (
    EXPORT,
    IMPORT,
    default_pricing_document,
    get_time_periods_for_rate,
    load_pricing_document,
    price_at,
    price_key,
)

DAYS_PER_YEAR = 365


def annualization_ratio(import_series: Sequence[Reading]) -> float:
    """Ratio scaling the period covered by the series up to a year.

    Timestamps mark the end of each slot, so the window starts one slot
    before the oldest reading. It therefore never spans less than one slot.
    """
    latest = parse_timestamp(import_series[0].timestamp_key)
    window_start = parse_timestamp(import_series[-1].timestamp_key) - SLOT
    number_of_days = max(latest - window_start, SLOT) / timedelta(days=1)
    return DAYS_PER_YEAR / number_of_days


def consumption_by_time_of_day(readings: Sequence[Reading]) -> tuple[float, dict[str, float]]:
    """Total kWh and kWh per slot start time (HH:MM).

    Readings are average kW over the half hour ending at the timestamp.
    """
    total_kwh = 0.0
    per_slot: dict[str, float] = defaultdict(float)
    for reading in readings:
        slot_start = parse_timestamp(reading.timestamp_key) - SLOT
        kwh = reading.value_kw / 2
        total_kwh += kwh
        per_slot[format_time_of_day(slot_start)] += kwh
    return total_kwh, dict(per_slot)


def build_consumption_profile(per_slot: dict[str, float], total_kwh: float) -> dict[str, float]:
    """Fraction of total consumption in each time-of-day slot."""
    if total_kwh == 0:
        return {slot: 0.0 for slot in per_slot}
    return {slot: kwh / total_kwh for slot, kwh in per_slot.items()}


def export_reduction(
    plan: ProviderPlan,
    export_series: Sequence[Reading],
    diagnostics: Diagnostics | None = None,
) -> float:
    """Credit for exported energy over the raw export series (not annualized)."""
    reduction = 0.0
    for reading in export_series:
        time_of_day = reading.timestamp_key[11:16]
        price = price_at(plan, time_of_day, EXPORT, diagnostics)
        if price is None:
            continue
        reduction += price * reading.value_kw / 2
    return reduction


def estimate_bills(
    import_series: Sequence[Reading],
    export_series: Sequence[Reading],
    plans: dict[str, ProviderPlan],
    interpolate: bool = True,
    diagnostics: Diagnostics | None = None,
) -> dict[str, BillBreakdown]:
    """Estimate the annual bill for each plan.

    Series must be latest first. Missing import slots are filled by
    same-time-of-day averaging unless interpolate is False.
    """
    if not import_series:
        raise MissingConsumptionDataError("No import readings to estimate from.")

    latest = parse_timestamp(import_series[0].timestamp_key)
    oldest = parse_timestamp(import_series[-1].timestamp_key)
    if oldest > latest:
        raise InvalidOrderingError(
            "Meter dataset contains unexpected date ordering: "
            f"first reading {import_series[0].timestamp_key} is older than "
            f"last reading {import_series[-1].timestamp_key}."
        )

    readings_map = {r.timestamp_key: r.value_kw for r in import_series}
    if interpolate:
        dense = interpolate_slots(readings_map, oldest, latest, diagnostics)
    else:
        dense = [Reading(key, value) for key, value in readings_map.items()]

    ratio = annualization_ratio(import_series)
    total_kwh, per_slot = consumption_by_time_of_day(dense)
    profile = build_consumption_profile(per_slot, total_kwh)
    annual_kwh = total_kwh * ratio

    bills = {}
    for name, plan in plans.items():
        consumption_charge = 0.0
        unpriced = 0.0
        breakdown: dict[float, RateBucket] = {}

        for time_of_day, share in profile.items():
            consumption = share * annual_kwh
            price = price_at(plan, time_of_day, IMPORT, diagnostics)
            if price is None:
                unpriced += consumption
                continue

            consumption_charge += price * consumption
            key = price_key(price)
            if key not in breakdown:
                breakdown[key] = RateBucket(consumption=0.0)
            breakdown[key].consumption += consumption

        for bucket in breakdown.values():
            bucket.percentage = bucket.consumption / annual_kwh * 100 if annual_kwh else 0.0

        reduction = export_reduction(plan, export_series, diagnostics) * ratio
        bills[name] = BillBreakdown(
            provider=name,
            total=consumption_charge + plan.standing_charge - reduction,
            consumption_charge=consumption_charge,
            standing_charge=plan.standing_charge,
            export_reduction=reduction,
            breakdown=breakdown,
            unpriced_consumption=unpriced,
        )

    return bills


class BillEstimator:
    """Estimate bills for every provider in a pricing document.

    Usage:
        estimator = BillEstimator.create(pricing_yaml)
        bills = estimator.with_consumption(csv_text).estimate()
    """

    def __init__(self, pricing_document: str | None = None, diagnostics: Diagnostics | None = None):
        if pricing_document is None:
            pricing_document = default_pricing_document()
        self.plans = load_pricing_document(pricing_document)
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.import_data: list[Reading] | None = None
        self.export_data: list[Reading] = []

    @classmethod
    def create(cls, pricing_document: str | None = None, diagnostics: Diagnostics | None = None) -> "BillEstimator":
        return cls(pricing_document, diagnostics)

    @property
    def providers(self) -> list[str]:
        return list(self.plans)

    def with_consumption(self, csv_text: str) -> "BillEstimator":
        """Attach meter CSV data; returns self for chaining.

        Diagnostics from any previously attached data are cleared.
        """
        self.diagnostics.clear()
        self.import_data, self.export_data = parse_csv_text(csv_text, self.diagnostics)
        return self

    def estimate(self, interpolate: bool = True) -> dict[str, BillBreakdown]:
        if self.import_data is None:
            raise MissingConsumptionDataError(
                "Consumption data not set. Use `with_consumption` before calling `estimate`."
            )
        return estimate_bills(
            self.import_data,
            self.export_data,
            self.plans,
            interpolate=interpolate,
            diagnostics=self.diagnostics,
        )

    def time_periods_for_rate(self, provider: str, rate: float) -> list[RateBand]:
        """Import bands of a provider billed at the given rate."""
        return get_time_periods_for_rate(self.plans, provider, rate, self.diagnostics)
