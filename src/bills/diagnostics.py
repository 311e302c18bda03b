"""Non-fatal events raised while estimating.

Interpolated slots, unmatched rate lookups, skipped rows and unknown providers
don't stop an estimate. They are collected here so callers can inspect them,
and forwarded to the standard logger.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

INTERPOLATED_SLOT = "interpolated_slot"
NO_PRICE = "no_price"
MISSING_PROVIDER = "missing_provider"
NO_TIME_PERIODS = "no_time_periods"
INVALID_READING = "invalid_reading"

LOG_LEVELS = {
    INTERPOLATED_SLOT: logging.DEBUG,
    NO_PRICE: logging.WARNING,
    MISSING_PROVIDER: logging.WARNING,
    INVALID_READING: logging.WARNING,
}


@dataclass(frozen=True)
class Diagnostic:
    """A single recorded event."""

    kind: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)


class Diagnostics:
    """Collector for diagnostics emitted during ingestion and estimation."""

    def __init__(self) -> None:
        self.events: list[Diagnostic] = []

    def record(self, kind: str, message: str, **context: Any) -> Diagnostic:
        event = Diagnostic(kind=kind, message=message, context=context)
        self.events.append(event)
        logger.log(LOG_LEVELS.get(kind, logging.INFO), message)
        return event

    def of_kind(self, kind: str) -> list[Diagnostic]:
        return [e for e in self.events if e.kind == kind]

    def counts(self) -> dict[str, int]:
        """Number of events per kind."""
        return dict(Counter(e.kind for e in self.events))

    def clear(self) -> None:
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)
