#!/usr/bin/env python3
"""
Test script for date parsing, range expansion and invoice date formatting.
"""

import sys
import os
from datetime import date, datetime, timedelta, timezone

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from src.invoicing.dates import (
    expand_date_range,
    format_invoice_date,
    parse_excluded_dates,
    parse_iso_date,
)
from src.invoicing.errors import InvalidDateError
from src.invoicing.schema import ExclusionPolicy


def test_weekend_exclusion_scenario():
    """Friday..Sunday with weekends excluded leaves only the Friday."""
    print("🧪 Testing weekend exclusion...")
    policy = ExclusionPolicy(exclude_weekends=True)
    eligible = expand_date_range(date(2024, 3, 1), date(2024, 3, 3), policy)
    print(f"  Eligible: {eligible}")
    assert eligible == [date(2024, 3, 1)]


def test_weekends_kept_when_not_excluded():
    policy = ExclusionPolicy(exclude_weekends=False)
    eligible = expand_date_range(date(2024, 3, 1), date(2024, 3, 3), policy)
    assert eligible == [date(2024, 3, 1), date(2024, 3, 2), date(2024, 3, 3)]


def test_inverted_range_is_empty():
    policy = ExclusionPolicy(exclude_weekends=False)
    assert expand_date_range(date(2024, 3, 10), date(2024, 3, 1), policy) == []


def test_single_ineligible_day_is_empty():
    saturday = date(2024, 3, 2)
    assert expand_date_range(saturday, saturday, ExclusionPolicy(exclude_weekends=True)) == []

    monday = date(2024, 3, 4)
    policy = ExclusionPolicy(exclude_weekends=False, excluded_dates=frozenset({monday}))
    assert expand_date_range(monday, monday, policy) == []


def test_properties_over_a_quarter():
    """No weekend and no excluded date ever survives; order is chronological."""
    print("🧪 Testing expansion properties over Q1 2024...")
    excluded = frozenset({date(2024, 1, 26), date(2024, 3, 8), date(2024, 2, 14)})
    policy = ExclusionPolicy(exclude_weekends=True, excluded_dates=excluded)
    eligible = expand_date_range(date(2024, 1, 1), date(2024, 3, 31), policy)

    assert all(d.weekday() < 5 for d in eligible)
    assert not excluded.intersection(eligible)
    assert eligible == sorted(eligible)
    assert len(eligible) == len(set(eligible))

    # Every weekday of the range that is not excluded is present
    expected = []
    current = date(2024, 1, 1)
    while current <= date(2024, 3, 31):
        if current.weekday() < 5 and current not in excluded:
            expected.append(current)
        current += timedelta(days=1)
    assert eligible == expected
    print(f"  ✅ {len(eligible)} eligible weekdays")


def test_range_spanning_leap_day():
    policy = ExclusionPolicy(exclude_weekends=False)
    eligible = expand_date_range(date(2024, 2, 28), date(2024, 3, 1), policy)
    assert eligible == [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]


def test_parse_iso_date():
    assert parse_iso_date("2024-03-05") == date(2024, 3, 5)
    assert parse_iso_date(" 2024-03-05 ") == date(2024, 3, 5)
    assert parse_iso_date(date(2024, 3, 5)) == date(2024, 3, 5)
    # Late-evening timestamps keep their own calendar day
    late = datetime(2024, 3, 5, 23, 30, tzinfo=timezone(timedelta(hours=5, minutes=30)))
    assert parse_iso_date(late) == date(2024, 3, 5)

    bad_values = [
        "2024-13-01", "not a date", "", None, 20240305,
        # Trailing text and other ISO forms are not plain YYYY-MM-DD
        "2024-03-05garbage", "2024-03-05T10:00:00", "20240305", "2024-W10-2", "2024-3-5",
    ]
    for bad in bad_values:
        try:
            parse_iso_date(bad)
            assert False, f"expected InvalidDateError for {bad!r}"
        except InvalidDateError:
            pass


def test_parse_excluded_dates_skips_blanks():
    parsed = parse_excluded_dates(["2024-03-05", "", None, date(2024, 3, 6), "2024-03-05"])
    assert parsed == frozenset({date(2024, 3, 5), date(2024, 3, 6)})


def test_format_invoice_date():
    print("🧪 Testing invoice date formatting...")
    assert format_invoice_date(date(2024, 3, 5)) == "05 Mar 2024"
    assert format_invoice_date("2024-09-30") == "30 Sep 2024"
    assert format_invoice_date("2025-12-01") == "01 Dec 2025"


if __name__ == "__main__":
    test_weekend_exclusion_scenario()
    test_weekends_kept_when_not_excluded()
    test_inverted_range_is_empty()
    test_single_ineligible_day_is_empty()
    test_properties_over_a_quarter()
    test_range_spanning_leap_day()
    test_parse_iso_date()
    test_parse_excluded_dates_skips_blanks()
    test_format_invoice_date()
    print("✅ Date tests passed!")
