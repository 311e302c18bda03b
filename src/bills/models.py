"""Data models for meter readings, pricing plans and bill estimates."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Reading:
    """A single half-hourly meter reading."""

    timestamp_key: str  # DD-MM-YYYY HH:MM, end of the 30-minute interval
    value_kw: float


@dataclass(frozen=True)
class RateBand:
    """A time-of-day band within a pricing plan."""

    start_time: str  # HH:MM format
    end_time: str  # HH:MM format, earlier than start_time when wrapping midnight
    price_per_kwh: float


@dataclass(frozen=True)
class ProviderPlan:
    """A provider's pricing: standing charge plus import and export bands."""

    name: str
    standing_charge: float
    import_rates: tuple[RateBand, ...]
    export_rates: tuple[RateBand, ...] = ()


@dataclass
class RateBucket:
    """Annualized consumption billed at one price."""

    consumption: float  # kWh
    percentage: float = 0.0  # share of total annualized consumption


@dataclass
class BillBreakdown:
    """Projected annual bill for one provider."""

    provider: str
    total: float
    consumption_charge: float
    standing_charge: float
    export_reduction: float
    breakdown: dict[float, RateBucket] = field(default_factory=dict)
    unpriced_consumption: float = 0.0  # kWh with no matching import band

    def to_dict(self) -> dict:
        """Render with money and kWh values as 2-decimal strings."""
        return {
            "total": f"{self.total:.2f}",
            "consumptionCharge": f"{self.consumption_charge:.2f}",
            "standingCharge": f"{self.standing_charge:.2f}",
            "exportReduction": f"{self.export_reduction:.2f}",
            "breakdown": {
                repr(price): {
                    "consumption": f"{bucket.consumption:.2f}",
                    "percentage": f"{bucket.percentage:.2f}",
                }
                for price, bucket in self.breakdown.items()
            },
        }
