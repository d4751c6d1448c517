"""
Turns ride details into tax invoice records.
"""

import math
import numbers
import logging
import random
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from .dates import format_invoice_date
from .errors import InvalidPriceError
from .schema import InvoiceInput, InvoiceRecord
from .tax import compute_tax_breakdown, round_currency
from .sampler import default_rng

logger = logging.getLogger(__name__)

DEFAULT_INVOICE_PREFIX = "FFCDCBIA24"


class InvoiceSynthesizer:
    """Derives invoice numbers, display dates and tax fields.

    All randomness (invoice numbers, prices, driver picks) flows through
    ``rng`` so a seeded ``random.Random`` makes output reproducible.
    """

    def __init__(self, name_provider=None, rng: Optional[random.Random] = None,
                 invoice_prefix: str = DEFAULT_INVOICE_PREFIX):
        self.name_provider = name_provider
        self.rng = rng or default_rng()
        self.invoice_prefix = invoice_prefix

    def generate_invoice_number(self) -> str:
        """Prefix followed by a random integer in [100000, 999999].

        Numbers are not checked for uniqueness.
        """
        random_part = int(100000 + self.rng.random() * 900000)
        return f"{self.invoice_prefix}{random_part}"

    def random_price(self, price_band: Tuple[float, float]) -> float:
        """Uniform price within the band, rounded to paise. Bounds may be given in either order."""
        low, high = min(price_band), max(price_band)
        return round_currency(self.rng.random() * (high - low) + low)

    def synthesize(self, invoice_input: InvoiceInput) -> InvoiceRecord:
        """Build the invoice record for one ride.

        Raises:
            InvalidPriceError: if the price is not a positive finite number.
        """
        price = invoice_input.price
        if isinstance(price, bool) or not isinstance(price, (numbers.Real, Decimal)):
            raise InvalidPriceError(price)
        try:
            amount = float(price)
        except (ValueError, OverflowError):
            raise InvalidPriceError(price) from None
        if not math.isfinite(amount) or amount <= 0:
            raise InvalidPriceError(price)
        return self._build_record(invoice_input)

    def _build_record(self, invoice_input: InvoiceInput) -> InvoiceRecord:
        tax = compute_tax_breakdown(float(invoice_input.price))
        return InvoiceRecord(
            customer_name=invoice_input.customer_name,
            pickup_address=invoice_input.pickup_address,
            invoice_date=invoice_input.invoice_date,
            formatted_date=format_invoice_date(invoice_input.invoice_date),
            driver_name=invoice_input.driver_name,
            invoice_number=self.generate_invoice_number(),
            total_amount=tax.total_amount,
            net_amount=tax.net_amount,
            cgst=tax.cgst,
            sgst=tax.sgst,
        )

    def synthesize_all(self, customer_name: str, pickup_address: str,
                       dates: Sequence[date], price_band: Tuple[float, float]) -> List[InvoiceRecord]:
        """One invoice per date with a random driver and price.

        Names are fetched one invoice at a time. A provider failure propagates
        and no partial list is returned.
        """
        if self.name_provider is None:
            raise ValueError("A name provider is required for bulk synthesis")

        invoices = []
        for invoice_date in dates:
            driver_name = self.name_provider.get_random_name()
            invoice_input = InvoiceInput(
                customer_name=customer_name,
                pickup_address=pickup_address,
                invoice_date=invoice_date,
                driver_name=driver_name,
                price=self.random_price(price_band),
            )
            # Band prices are generated, so they skip single-invoice validation
            invoices.append(self._build_record(invoice_input))
        return invoices
