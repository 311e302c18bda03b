"""Provider pricing loading and rate lookup."""

from pathlib import Path
from typing import Any, Iterable

import httpx
import yaml

from .diagnostics import MISSING_PROVIDER, NO_PRICE, NO_TIME_PERIODS, Diagnostics
from .errors import PricingDocumentError
from .models import ProviderPlan, RateBand

DEFAULT_PRICING_PATH = Path(__file__).parent / "data" / "provider_pricing.yaml"

IMPORT = "import"
EXPORT = "export"

# Prices are rounded to this many places before being used as breakdown keys
PRICE_KEY_DECIMALS = 6


def default_pricing_document() -> str:
    """Return the text of the bundled provider pricing document."""
    return DEFAULT_PRICING_PATH.read_text(encoding="utf-8")


def fetch_pricing_document(
    url: str,
    timeout: float = 30.0,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """Download a provider pricing document.

    Args:
        url: Location of the YAML document
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)

    Returns:
        Raw YAML text
    """
    with httpx.Client(timeout=timeout, transport=transport) as client:
        response = client.get(url)
        response.raise_for_status()
        return response.text


def load_pricing_document(text: str) -> dict[str, ProviderPlan]:
    """Parse a YAML pricing document into plans keyed by provider name."""
    data = yaml.safe_load(text)
    if not isinstance(data, dict) or not isinstance(data.get("providers"), list):
        raise PricingDocumentError("Pricing document must contain a 'providers' list")
    return load_plans(data["providers"])


def load_plans(providers: Iterable[dict[str, Any]]) -> dict[str, ProviderPlan]:
    """Build plans from provider entries.

    Only the first pricing record of each provider is used. Later providers
    with the same name replace earlier ones.
    """
    plans: dict[str, ProviderPlan] = {}
    for provider in providers:
        if not isinstance(provider, dict):
            raise PricingDocumentError(f"Invalid provider entry: {provider!r}")
        name = provider.get("name")
        pricings = provider.get("pricings")
        if not name or not isinstance(pricings, list) or not pricings:
            raise PricingDocumentError(f"Provider entry needs 'name' and 'pricings': {provider!r}")

        pricing = pricings[0]
        if not isinstance(pricing, dict):
            raise PricingDocumentError(f"Invalid pricing for {name}: {pricing!r}")
        plans[str(name)] = ProviderPlan(
            name=str(name),
            standing_charge=_to_float(pricing.get("standing_charge", 0), "standing_charge"),
            import_rates=_load_bands(pricing.get("import_rates") or []),
            export_rates=_load_bands(pricing.get("export_rates") or []),
        )
    return plans


def _load_bands(rates: Iterable[dict[str, Any]]) -> tuple[RateBand, ...]:
    try:
        return tuple(
            RateBand(
                start_time=normalise_time(r["start_time"]),
                end_time=normalise_time(r["end_time"]),
                price_per_kwh=_to_float(r["price_per_kwh"], "price_per_kwh"),
            )
            for r in rates
        )
    except (KeyError, TypeError) as e:
        raise PricingDocumentError(f"Rate band needs start_time, end_time and price_per_kwh: {e}") from e


def _to_float(value: Any, field_name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise PricingDocumentError(f"Invalid {field_name}: {value!r}") from e


def normalise_time(value: Any) -> str:
    """Return a zero-padded HH:MM string.

    YAML 1.1 reads unquoted times such as 23:00 as base-60 integers (1380),
    so integers are treated as minutes past midnight.
    """
    if isinstance(value, bool):
        raise PricingDocumentError(f"Invalid time value: {value!r}")
    if isinstance(value, int):
        hours, minutes = divmod(value, 60)
    else:
        parts = str(value).strip().split(":")
        try:
            hours, minutes = int(parts[0]), int(parts[1])
        except (IndexError, ValueError) as e:
            raise PricingDocumentError(f"Invalid time value: {value!r}") from e
    if not (0 <= hours <= 24 and 0 <= minutes < 60) or (hours == 24 and minutes):
        raise PricingDocumentError(f"Invalid time value: {value!r}")
    return f"{hours:02d}:{minutes:02d}"


def price_key(price: float) -> float:
    """Canonical breakdown key for a price."""
    return round(price, PRICE_KEY_DECIMALS)


def time_in_range(check_time: str, start: str, end: str) -> bool:
    """Check if an HH:MM time falls within a band (handles overnight bands)."""
    if start <= end:
        return start <= check_time < end
    else:
        # Overnight band (e.g., 23:00 to 02:00)
        return check_time >= start or check_time < end


def price_at(
    plan: ProviderPlan,
    time_of_day: str,
    direction: str = IMPORT,
    diagnostics: Diagnostics | None = None,
) -> float | None:
    """Get the price per kWh for a time of day.

    Returns 0.0 when the plan has no bands for the direction, and None when
    bands exist but none of them covers the time. The first matching band wins.
    """
    rates = plan.import_rates if direction == IMPORT else plan.export_rates
    if not rates:
        return 0.0

    for band in rates:
        if time_in_range(time_of_day, band.start_time, band.end_time):
            return band.price_per_kwh

    if diagnostics is not None:
        diagnostics.record(
            NO_PRICE,
            f"No {direction} price found for {plan.name} at {time_of_day}",
            provider=plan.name,
            time_of_day=time_of_day,
            direction=direction,
        )
    return None


def get_time_periods_for_rate(
    plans: dict[str, ProviderPlan],
    provider: str,
    rate: float,
    diagnostics: Diagnostics | None = None,
) -> list[RateBand]:
    """Get the import bands of a provider billed at the given rate."""
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    plan = plans.get(provider)
    if plan is None:
        diagnostics.record(
            MISSING_PROVIDER, f'Provider "{provider}" not found.', provider=provider
        )
        return []

    periods = [
        band for band in plan.import_rates if price_key(band.price_per_kwh) == price_key(rate)
    ]
    if not periods:
        diagnostics.record(
            NO_TIME_PERIODS,
            f"No time periods found for rate {rate} with provider {provider}.",
            provider=provider,
            rate=rate,
        )
    return periods
