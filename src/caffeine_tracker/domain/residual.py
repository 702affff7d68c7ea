"""Domain models for residual caffeine readings."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class CaffeineLevel(StrEnum):
    """Severity label for a residual amount."""

    VERY_HIGH = "Very High"
    HIGH = "High"
    MODERATE = "Moderate"
    LOW = "Low"
    MINIMAL = "Minimal"


@dataclass(frozen=True)
class ResidualReading:
    """Residual caffeine evaluated at one instant."""

    now: datetime
    residual_mg: float
    level: CaffeineLevel
