"""Market data models."""

from dataclasses import dataclass
from datetime import date
from typing import Any


@dataclass(frozen=True)
class PricePoint:
    """Daily closing price for one trading session."""
    date: date
    close: float

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat(), "close": self.close}
