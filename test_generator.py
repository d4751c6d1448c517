#!/usr/bin/env python3
"""
Test script for the invoice generator: bulk runs, shortfalls and single-form validation.
"""

import sys
import os
import math
import dataclasses
import re
from datetime import date

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from src.invoicing.config import InvoiceSettings
from src.invoicing.errors import (
    InvalidDateError,
    InvalidPriceError,
    InvoiceInputError,
    MissingFieldError,
    NameProviderError,
    NoEligibleDatesError,
    ShortfallWarning,
)
from src.invoicing.generator import InvoiceGenerator, build_bulk_request, parse_price
from src.invoicing.schema import BulkResult


class ListNameProvider:
    def __init__(self, names):
        self.names = list(names)
        self.calls = 0

    def get_random_name(self):
        name = self.names[self.calls % len(self.names)]
        self.calls += 1
        return name


class FailingNameProvider:
    """Fails on the Nth lookup."""

    def __init__(self, fail_on=1):
        self.fail_on = fail_on
        self.calls = 0

    def get_random_name(self):
        self.calls += 1
        if self.calls >= self.fail_on:
            raise NameProviderError("names unavailable")
        return "Ravi Kumar"


def _generator(provider=None, seed=42):
    return InvoiceGenerator(
        settings=InvoiceSettings(),
        name_provider=provider or ListNameProvider(["Ravi Kumar", "Nagaraj H", "Mahesh Shetty"]),
        seed=seed,
    )


def _request(**overrides):
    values = dict(
        start_date="2024-03-01",
        end_date="2024-03-31",
        requested_count="5",
        min_price="100",
        max_price="200",
        customer_name="Shashi Kiran",
        pickup_address="Shivaji Nagar, Bengaluru",
        exclude_weekends=True,
        excluded_dates=[],
    )
    values.update(overrides)
    return build_bulk_request(**values)


def test_build_bulk_request_parses_form_strings():
    request = _request(excluded_dates=["2024-03-08", ""])
    assert request.start_date == date(2024, 3, 1)
    assert request.end_date == date(2024, 3, 31)
    assert request.requested_count == 5
    assert request.price_band == (100.0, 200.0)
    assert request.exclusion_policy.exclude_weekends is True
    assert request.exclusion_policy.excluded_dates == frozenset({date(2024, 3, 8)})

    # Whole-valued floats from number widgets are accepted
    assert _request(requested_count=7.0).requested_count == 7
    assert _request(requested_count="3.0").requested_count == 3


def test_build_bulk_request_rejects_bad_numbers():
    bad_overrides = (
        {"requested_count": "ten"},
        {"requested_count": "2.9"},
        {"requested_count": 2.5},
        {"requested_count": "inf"},
        {"min_price": "abc"},
        {"max_price": "inf"},
    )
    for overrides in bad_overrides:
        try:
            _request(**overrides)
            assert False, f"expected InvoiceInputError for {overrides}"
        except InvoiceInputError:
            pass
    try:
        _request(start_date="03/01/2024")
        assert False, "expected InvalidDateError"
    except InvalidDateError:
        pass


def test_bulk_generation_happy_path():
    print("🧪 Testing bulk generation...")
    generator = _generator()
    result = generator.generate_bulk(_request(excluded_dates=["2024-03-08"]))

    assert len(result.invoices) == 5
    assert result.shortfall is None
    assert result.info_message == ""
    # March 2024 has 21 weekdays, one excluded
    assert result.eligible_count == 20

    dates = [inv.invoice_date for inv in result.invoices]
    assert len(set(dates)) == 5
    for invoice in result.invoices:
        assert invoice.invoice_date.weekday() < 5
        assert invoice.invoice_date != date(2024, 3, 8)
        assert 100 <= invoice.total_amount <= 200
        assert re.match(r"^FFCDCBIA24\d{6}$", invoice.invoice_number)
        assert abs(invoice.net_amount + invoice.cgst + invoice.sgst - invoice.total_amount) < 1e-9
        assert invoice.customer_name == "Shashi Kiran"
    print(f"  ✅ {len(result.invoices)} invoices: {[inv.formatted_date for inv in result.invoices]}")


def test_bulk_result_is_immutable():
    result = _generator().generate_bulk(_request())
    assert isinstance(result.invoices, tuple)
    try:
        result.invoices = ()
        assert False, "expected FrozenInstanceError"
    except dataclasses.FrozenInstanceError:
        pass

    # Lists handed in directly are frozen as well
    direct = BulkResult(invoices=list(result.invoices), eligible_count=result.eligible_count)
    assert direct.invoices == result.invoices
    assert isinstance(direct.invoices, tuple)


def test_bulk_shortfall_scenario():
    """10 requested, 3 eligible -> 3 invoices and an informational message quoting 3."""
    print("🧪 Testing shortfall...")
    generator = _generator()
    # Mon 4th .. Wed 6th March 2024
    result = generator.generate_bulk(_request(start_date="2024-03-04", end_date="2024-03-06", requested_count=10))

    assert len(result.invoices) == 3
    assert isinstance(result.shortfall, ShortfallWarning)
    assert result.shortfall.produced == 3
    assert result.shortfall.requested == 10
    assert "3" in result.info_message
    assert result.info_message == (
        "Only 3 invoices generated as there are only 3 eligible dates in the selected range."
    )
    assert result.to_dict()["shortfall"] is True


def test_bulk_no_eligible_dates_aborts():
    provider = ListNameProvider(["Ravi Kumar"])
    generator = _generator(provider)
    try:
        # Saturday and Sunday only
        generator.generate_bulk(_request(start_date="2024-03-02", end_date="2024-03-03"))
        assert False, "expected NoEligibleDatesError"
    except NoEligibleDatesError:
        pass
    assert provider.calls == 0
    assert generator.get_session_stats()['failures'] == 1


def test_bulk_inverted_range_aborts():
    generator = _generator()
    try:
        generator.generate_bulk(_request(start_date="2024-03-31", end_date="2024-03-01"))
        assert False, "expected NoEligibleDatesError"
    except NoEligibleDatesError:
        pass


def test_name_failure_aborts_whole_batch():
    print("🧪 Testing name provider failure mid-batch...")
    generator = _generator(FailingNameProvider(fail_on=3))
    try:
        generator.generate_bulk(_request(requested_count=5))
        assert False, "expected NameProviderError"
    except NameProviderError:
        pass
    stats = generator.get_session_stats()
    assert stats['bulk_batches'] == 0
    assert stats['invoices_generated'] == 0
    assert stats['failures'] == 1


def test_seeded_generators_match():
    first = _generator(seed=7).generate_bulk(_request())
    second = _generator(seed=7).generate_bulk(_request())
    assert [inv.to_dict() for inv in first.invoices] == [inv.to_dict() for inv in second.invoices]


def test_custom_prefix_from_settings():
    generator = InvoiceGenerator(
        settings=InvoiceSettings(invoice_number_prefix="TESTPFX"),
        name_provider=ListNameProvider(["Ravi Kumar"]),
        seed=1,
    )
    record = generator.generate_single("A", "B", "2024-03-05", "C", "10")
    assert re.match(r"^TESTPFX\d{6}$", record.invoice_number)


def test_generate_single():
    print("🧪 Testing single invoice...")
    generator = _generator()
    record = generator.generate_single(
        "Shashi Kiran", "Shivaji Nagar, Bengaluru", "2024-03-05", "NARENDRAN NARENDRAN", "105.00"
    )
    assert record.formatted_date == "05 Mar 2024"
    assert record.total_amount == 105.0
    assert math.isclose(record.net_amount, 100.0, abs_tol=1e-9)
    assert math.isclose(record.cgst, 2.5, abs_tol=1e-9)
    assert record.cgst == record.sgst
    assert generator.get_session_stats()['single_invoices'] == 1


def test_generate_single_validation():
    generator = _generator()
    for bad_price in ["", "abc", "0", "-1", "nan", "inf", None]:
        try:
            generator.generate_single("A", "B", "2024-03-05", "C", bad_price)
            assert False, f"expected InvalidPriceError for {bad_price!r}"
        except InvalidPriceError:
            pass

    for field_index, field_name in enumerate(["customer_name", "pickup_address"]):
        args = ["A", "B", "2024-03-05", "C", "10"]
        args[field_index] = "   "
        try:
            generator.generate_single(*args)
            assert False, "expected MissingFieldError"
        except MissingFieldError as e:
            assert e.field_name == field_name

    try:
        generator.generate_single("A", "B", "2024-02-30", "C", "10")
        assert False, "expected InvalidDateError"
    except InvalidDateError:
        pass

    stats = generator.get_session_stats()
    assert stats['single_invoices'] == 0
    assert stats['failures'] == 10


def test_parse_price():
    assert parse_price("43.40") == 43.40
    assert parse_price(" 12 ") == 12.0
    assert parse_price(5) == 5.0
    try:
        parse_price(True)
        assert False, "expected InvalidPriceError"
    except InvalidPriceError:
        pass


if __name__ == "__main__":
    test_build_bulk_request_parses_form_strings()
    test_build_bulk_request_rejects_bad_numbers()
    test_bulk_generation_happy_path()
    test_bulk_result_is_immutable()
    test_bulk_shortfall_scenario()
    test_bulk_no_eligible_dates_aborts()
    test_bulk_inverted_range_aborts()
    test_name_failure_aborts_whole_batch()
    test_seeded_generators_match()
    test_custom_prefix_from_settings()
    test_generate_single()
    test_generate_single_validation()
    test_parse_price()
    print("✅ Generator tests passed!")
