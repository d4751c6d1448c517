"""
Invoice generation entry points for the single and bulk forms.
"""

import math
import time
import logging
import random
from typing import Iterable, Optional

from .config import InvoiceSettings, load_settings
from .dates import DateLike, expand_date_range, parse_excluded_dates, parse_iso_date
from .errors import (
    InvalidPriceError,
    InvoiceError,
    InvoiceInputError,
    MissingFieldError,
    NoEligibleDatesError,
    ShortfallWarning,
)
from .names import create_name_provider
from .sampler import sample_dates
from .schema import BulkRequest, BulkResult, ExclusionPolicy, InvoiceInput, InvoiceRecord
from .session_stats import GenerationTracker
from .synthesizer import InvoiceSynthesizer

logger = logging.getLogger(__name__)


def parse_price(value) -> float:
    """Parse a price form value; must be a positive finite number."""
    if isinstance(value, bool):
        raise InvalidPriceError(value)
    try:
        price = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise InvalidPriceError(value) from None
    if not math.isfinite(price) or price <= 0:
        raise InvalidPriceError(value)
    return price


def _parse_number(value, field_name: str, cast=float):
    label = field_name.replace('_', ' ').capitalize()
    if isinstance(value, bool):
        raise InvoiceInputError(f"{label} must be a number (got {value!r}).")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvoiceInputError(f"{label} must be a number (got {value!r}).") from None
    if not math.isfinite(number):
        raise InvoiceInputError(f"{label} must be finite (got {value!r}).")
    if cast is int:
        if not number.is_integer():
            raise InvoiceInputError(f"{label} must be a whole number (got {value!r}).")
        return int(number)
    return number


def _require_text(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise MissingFieldError(field_name)
    return str(value)


def build_bulk_request(start_date: DateLike, end_date: DateLike, requested_count,
                       min_price, max_price, customer_name: str, pickup_address: str,
                       exclude_weekends: bool = True,
                       excluded_dates: Iterable[DateLike] = ()) -> BulkRequest:
    """Parse raw bulk form values into a BulkRequest.

    The price band is kept as entered; the synthesizer reorders it.
    """
    policy = ExclusionPolicy(
        exclude_weekends=bool(exclude_weekends),
        excluded_dates=parse_excluded_dates(excluded_dates),
    )
    return BulkRequest(
        start_date=parse_iso_date(start_date),
        end_date=parse_iso_date(end_date),
        requested_count=_parse_number(requested_count, "requested_count", cast=int),
        price_band=(_parse_number(min_price, "min_price"), _parse_number(max_price, "max_price")),
        customer_name=customer_name,
        pickup_address=pickup_address,
        exclusion_policy=policy,
    )


class InvoiceGenerator:
    """Orchestrates date expansion, sampling and invoice synthesis."""

    def __init__(self,
                 settings: Optional[InvoiceSettings] = None,
                 name_provider=None,
                 seed: Optional[int] = None,
                 rng: Optional[random.Random] = None,
                 tracker: Optional[GenerationTracker] = None):
        """Initialize the generator.

        Args:
            settings: Invoice settings; loaded from config/env when omitted
            name_provider: Object with ``get_random_name()``; built from settings when omitted
            seed: Seed for a private random source (reproducible output)
            rng: Explicit random source; takes precedence over ``seed``
            tracker: Session statistics collector
        """
        self.settings = settings or load_settings()
        if rng is None and seed is not None:
            rng = random.Random(seed)
        self.rng = rng
        self.name_provider = name_provider or create_name_provider(self.settings, rng=rng, seed=seed)
        self.tracker = tracker or GenerationTracker()
        self.synthesizer = InvoiceSynthesizer(
            name_provider=self.name_provider,
            rng=rng,
            invoice_prefix=self.settings.invoice_number_prefix,
        )

        logger.info(
            "Invoice generator initialized (prefix=%s, names=%s)",
            self.settings.invoice_number_prefix,
            type(self.name_provider).__name__,
        )

    def generate_single(self, customer_name: str, pickup_address: str, invoice_date: DateLike,
                        driver_name: str, price) -> InvoiceRecord:
        """Validate single-form input and build one invoice.

        Raises:
            MissingFieldError: a text field is empty
            InvalidDateError: the date is not ISO-8601
            InvalidPriceError: the price is not a positive number
        """
        try:
            invoice_input = InvoiceInput(
                customer_name=_require_text(customer_name, "customer_name"),
                pickup_address=_require_text(pickup_address, "pickup_address"),
                invoice_date=parse_iso_date(invoice_date),
                driver_name=_require_text(driver_name, "driver_name"),
                price=parse_price(price),
            )
            record = self.synthesizer.synthesize(invoice_input)
        except InvoiceError as e:
            self.tracker.record_failure()
            logger.warning(f"Single invoice rejected: {e}")
            raise

        self.tracker.record_single(record.total_amount, record.cgst + record.sgst)
        logger.info(f"Generated invoice {record.invoice_number} for {record.formatted_date}")
        return record

    def generate_bulk(self, request: BulkRequest) -> BulkResult:
        """Generate a batch of invoices over the request's date range.

        Raises:
            NoEligibleDatesError: no date survives the exclusion policy
            NameProviderError: driver names could not be loaded
        """
        start_time = time.time()
        logger.info(
            "Bulk generation: %s..%s, count=%d, band=%s",
            request.start_date, request.end_date, request.requested_count, request.price_band,
        )

        try:
            eligible = expand_date_range(request.start_date, request.end_date, request.exclusion_policy)
            chosen, shortfall = sample_dates(eligible, request.requested_count, rng=self.synthesizer.rng)
            invoices = self.synthesizer.synthesize_all(
                request.customer_name,
                request.pickup_address,
                chosen,
                request.price_band,
            )
        except NoEligibleDatesError:
            self.tracker.record_failure()
            logger.warning("Bulk generation aborted: no eligible dates in range")
            raise
        except InvoiceError as e:
            self.tracker.record_failure()
            logger.error(f"Bulk generation failed: {e}")
            raise

        warning = ShortfallWarning(request.requested_count, len(invoices)) if shortfall else None
        if warning:
            logger.info(str(warning))

        self.tracker.record_batch(
            requested=request.requested_count,
            produced=len(invoices),
            total_amount=sum(inv.total_amount for inv in invoices),
            tax_amount=sum(inv.cgst + inv.sgst for inv in invoices),
        )
        logger.info(
            "Generated %d invoices from %d eligible dates in %.3fs",
            len(invoices), len(eligible), time.time() - start_time,
        )
        return BulkResult(invoices=invoices, eligible_count=len(eligible), shortfall=warning)

    def get_session_stats(self):
        return self.tracker.snapshot()
