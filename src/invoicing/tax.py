"""
GST constants and tax arithmetic for passenger transport invoices.

Fares are GST-inclusive at a flat 5%, split evenly into CGST and SGST.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

GST_RATE = 0.05
GROSS_UP_DIVISOR = 1.05
CGST_RATE = 0.025
SGST_RATE = 0.025

CURRENCY_SYMBOL = "₹"


@dataclass(frozen=True)
class TaxBreakdown:
    """Tax components derived from a gross fare."""
    total_amount: float
    net_amount: float
    cgst: float
    sgst: float


def compute_tax_breakdown(total_amount: float) -> TaxBreakdown:
    """Gross-up model: the total already includes GST.

    No rounding is applied here; amounts are rounded only for display.
    """
    net_amount = total_amount / GROSS_UP_DIVISOR
    return TaxBreakdown(
        total_amount=total_amount,
        net_amount=net_amount,
        cgst=net_amount * CGST_RATE,
        sgst=net_amount * SGST_RATE,
    )


def round_currency(value: float) -> float:
    """Round currency value to 2 decimal places."""
    return float(Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


def format_currency(amount: float) -> str:
    return f"{CURRENCY_SYMBOL}{amount:.2f}"


def percent_label(rate: float) -> str:
    """``0.025`` -> ``2.5%``"""
    return f"{rate * 100:g}%"
