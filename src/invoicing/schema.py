"""
Invoice data structures.

This module defines the records that flow through the generator: the form
input for one ride, the derived tax invoice, and the bulk request/result pair.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Any, Optional, Tuple, FrozenSet

from .errors import ShortfallWarning


@dataclass(frozen=True)
class InvoiceInput:
    """Ride details for a single invoice."""
    customer_name: str
    pickup_address: str
    invoice_date: date
    driver_name: str
    price: float


@dataclass(frozen=True)
class InvoiceRecord:
    """A synthesized tax invoice. Amounts keep full float precision."""
    customer_name: str
    pickup_address: str
    invoice_date: date
    formatted_date: str
    driver_name: str
    invoice_number: str
    total_amount: float
    net_amount: float
    cgst: float
    sgst: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = dict(self.__dict__)
        data["invoice_date"] = self.invoice_date.isoformat()
        return data


@dataclass(frozen=True)
class ExclusionPolicy:
    """Which days of a range may not carry an invoice."""
    exclude_weekends: bool = True
    excluded_dates: FrozenSet[date] = frozenset()

    def is_eligible(self, day: date) -> bool:
        # date.weekday(): Saturday == 5, Sunday == 6
        if self.exclude_weekends and day.weekday() >= 5:
            return False
        return day not in self.excluded_dates


@dataclass(frozen=True)
class BulkRequest:
    """One submission of the bulk form."""
    start_date: date
    end_date: date
    requested_count: int
    price_band: Tuple[float, float]
    customer_name: str
    pickup_address: str
    exclusion_policy: ExclusionPolicy = field(default_factory=ExclusionPolicy)


@dataclass(frozen=True)
class BulkResult:
    """Outcome of a bulk run. The invoice set is fixed once built."""
    invoices: Tuple[InvoiceRecord, ...]
    eligible_count: int
    shortfall: Optional[ShortfallWarning] = None

    def __post_init__(self):
        object.__setattr__(self, "invoices", tuple(self.invoices))

    @property
    def info_message(self) -> str:
        return str(self.shortfall) if self.shortfall else ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "invoices": [invoice.to_dict() for invoice in self.invoices],
            "eligible_count": self.eligible_count,
            "shortfall": self.shortfall is not None,
            "info_message": self.info_message,
        }
