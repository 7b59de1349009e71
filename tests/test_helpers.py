"""
Unit tests for the pure helpers behind the services: distance checks, dates,
invoice arithmetic, assignment rules, reminders and dashboard periods.
"""

from datetime import date, datetime
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from cleanmanager.domain.checkins.service import evaluate_location, summarize_check_ins
from cleanmanager.domain.company.service import normalize_notification_settings
from cleanmanager.domain.dashboard.service import percent_change, resolve_period
from cleanmanager.domain.feedback.service import parse_rating, summarize_ratings
from cleanmanager.domain.invoices.calculations import (
    apply_payment_totals,
    calculate_invoice_totals,
    format_invoice_number,
    next_invoice_sequence,
)
from cleanmanager.domain.invoices.service import reminder_offset
from cleanmanager.domain.jobs.assignments import (
    AssignmentError,
    diff_assignments,
    normalize_assignments,
    parse_duration_minutes,
    resolve_pay,
)
from cleanmanager.domain.jobs.lifecycle import build_full_address
from cleanmanager.domain.supplies.service import stock_status
from cleanmanager.domain.time_off.service import ranges_overlap
from cleanmanager.security_utils import check_password_strength, sanitize_text
from cleanmanager.shared.validators import validate_email, validate_uk_phone
from cleanmanager.utils.dates import count_weekdays, parse_datetime
from cleanmanager.utils.geo import haversine_distance, is_valid_location
from cleanmanager.utils.sanitization import escape_text, format_money


# ══════════════════════════════════════════════════════════════════════════
# Location
# ══════════════════════════════════════════════════════════════════════════


class TestLocation:

    def test_haversine_london_to_paris(self):
        distance = haversine_distance(51.5074, -0.1278, 48.8566, 2.3522)
        assert 340_000 < distance < 347_000

    def test_zero_coordinates_are_not_a_location(self):
        assert not is_valid_location(0, -0.1278)
        assert not is_valid_location(None, -0.1278)
        assert is_valid_location(51.5, -0.12)

    def test_no_location_is_out_of_range(self):
        assert evaluate_location(None, None, 51.5, -0.12) == (None, False)

    def test_job_without_coordinates_accepts_any_location(self):
        assert evaluate_location(51.5, -0.12, None, None) == (0.0, True)

    def test_within_and_beyond_range(self):
        distance, within = evaluate_location(51.5, -0.12, 51.5, -0.12)
        assert distance == 0.0 and within

        distance, within = evaluate_location(51.51, -0.12, 51.5, -0.12, max_distance=200)
        assert distance > 1000
        assert not within


class TestCheckInSummary:

    def _record(self, kind, hour, minute=0):
        return SimpleNamespace(type=kind, checked_at=datetime(2025, 3, 3, hour, minute))

    def test_nothing_recorded(self):
        summary = summarize_check_ins([], now=datetime(2025, 3, 3, 12))
        assert summary["status"] == "not_checked_in"
        assert summary["totalTimeOnSite"] == 0
        assert not summary["hasCheckedIn"]

    def test_open_visit_counts_until_now(self):
        summary = summarize_check_ins([self._record("check_in", 9)], now=datetime(2025, 3, 3, 9, 45))
        assert summary["status"] == "checked_in"
        assert summary["totalTimeOnSite"] == 45
        assert summary["jobDuration"] is None

    def test_completed_visit(self):
        records = [self._record("check_in", 9), self._record("check_out", 10, 30)]
        summary = summarize_check_ins(records, now=datetime(2025, 3, 3, 18))
        assert summary["status"] == "checked_out"
        assert summary["totalTimeOnSite"] == 90
        assert summary["jobDuration"] == 90


# ══════════════════════════════════════════════════════════════════════════
# Dates and text
# ══════════════════════════════════════════════════════════════════════════


class TestDatesAndText:

    def test_count_weekdays_skips_weekend(self):
        assert count_weekdays(date(2025, 3, 3), date(2025, 3, 9)) == 5
        assert count_weekdays(date(2025, 3, 9), date(2025, 3, 3)) == 0

    def test_parse_datetime_converts_to_naive_utc(self):
        assert parse_datetime("2025-03-03T10:00:00+01:00") == datetime(2025, 3, 3, 9, 0)
        assert parse_datetime("") is None
        with pytest.raises(ValueError):
            parse_datetime("not a date")

    def test_sanitize_text_strips_markup_and_truncates(self):
        assert sanitize_text("<b>Hi</b> there ", 5) == "Hi th"
        assert sanitize_text(None) is None

    def test_escape_and_money(self):
        assert escape_text("<a>") == "&lt;a&gt;"
        assert escape_text(None) == ""
        assert format_money(1234.5) == "£1,234.50"
        assert format_money(10, "CHF") == "CHF 10.00"

    def test_validators(self):
        assert validate_email(" A@B.CO ") == "a@b.co"
        with pytest.raises(ValueError):
            validate_email("nope")
        assert validate_uk_phone("07700900123") == "07700 900 123"
        with pytest.raises(ValueError):
            validate_uk_phone("12345")

    def test_password_strength(self):
        assert check_password_strength("Abcdefg1") == []
        assert "Password must contain a number" in check_password_strength("Abcdefgh")


# ══════════════════════════════════════════════════════════════════════════
# Invoices
# ══════════════════════════════════════════════════════════════════════════


class TestInvoiceCalculations:

    def test_tax_applies_to_taxable_items_only(self):
        totals = calculate_invoice_totals(
            [
                {"quantity": 2, "unitPrice": 50},
                {"quantity": 1, "unitPrice": 20, "taxable": False},
            ],
            tax_rate=20,
            discount_amount=10,
        )
        assert totals == {"subtotal": 120.0, "taxAmount": 20.0, "total": 130.0}

    def test_invoice_numbers(self):
        assert next_invoice_sequence(None) == 1
        assert next_invoice_sequence("INV-0007") == 8
        assert next_invoice_sequence("INV-0007 - Jane Doe - 01-02-2025") == 8
        assert format_invoice_number(3) == "INV-0003"
        assert format_invoice_number(3, "Jane Doe", datetime(2025, 2, 1)) == "INV-0003 - Jane Doe - 01-02-2025"

    def test_payment_totals(self):
        invoice = SimpleNamespace(total=100.0, status="sent", paid_at=None)
        now = datetime(2025, 3, 3)

        apply_payment_totals(invoice, 100, now)
        assert invoice.status == "paid"
        assert invoice.amount_due == 0
        assert invoice.paid_at == now

        apply_payment_totals(invoice, 50, now)
        assert invoice.status == "sent"
        assert invoice.amount_due == 50
        assert invoice.paid_at is None


class TestReminderOffset:

    def _invoice(self, **overrides):
        fields = {"due_at": datetime(2025, 3, 10), "amount_due": 50.0, "last_reminder_at": None}
        fields.update(overrides)
        return SimpleNamespace(**fields)

    def test_reminder_days(self):
        assert reminder_offset(self._invoice(), date(2025, 3, 3)) == 7
        assert reminder_offset(self._invoice(), date(2025, 3, 5)) is None
        assert reminder_offset(self._invoice(), date(2025, 3, 11)) == -1

    def test_paid_or_already_reminded_today(self):
        assert reminder_offset(self._invoice(amount_due=0), date(2025, 3, 3)) is None
        reminded = self._invoice(last_reminder_at=datetime(2025, 3, 3, 8))
        assert reminder_offset(reminded, date(2025, 3, 3)) is None


# ══════════════════════════════════════════════════════════════════════════
# Jobs
# ══════════════════════════════════════════════════════════════════════════


class TestAssignments:

    def test_normalize_mixed_entries(self):
        result = normalize_assignments([1, {"employeeId": "2", "payAmount": 30}, 1, "x"])
        assert result == [{"employeeId": 1, "payAmount": None}, {"employeeId": 2, "payAmount": 30}]

    def test_normalize_falls_back_to_assigned_to(self):
        assert normalize_assignments(None, "3", 20) == [{"employeeId": 3, "payAmount": 20}]
        assert normalize_assignments([], None) == []

    def test_per_job_employee_needs_pay(self):
        employees = {1: SimpleNamespace(first_name="Ann", last_name="Lee", pay_type="per_job")}
        with pytest.raises(AssignmentError, match="Pay per job is required for Ann Lee"):
            resolve_pay([{"employeeId": 1, "payAmount": None}], employees, 80)

    def test_pay_capped_by_plan_price(self):
        employees = {1: SimpleNamespace(first_name="Ann", last_name="Lee", pay_type="hourly")}
        with pytest.raises(AssignmentError, match="cannot exceed"):
            resolve_pay([{"employeeId": 1, "payAmount": 90}], employees, 80)

        resolved = resolve_pay([{"employeeId": 1, "payAmount": "30.5"}], employees, 80)
        assert resolved == [{"employee_id": 1, "pay_amount": 30.5, "pay_type": "hourly"}]

    def test_diff_assignments(self):
        assert diff_assignments([1, 2, 3], [3, 4]) == ([1, 2], [4], [3])

    def test_parse_duration(self):
        assert parse_duration_minutes("2h 30m") == 150
        assert parse_duration_minutes("45 mins") == 45
        assert parse_duration_minutes("90") == 90
        assert parse_duration_minutes("5m") == 15
        assert parse_duration_minutes(None) == 60

    def test_full_address_skips_repeated_parts(self):
        job = SimpleNamespace(
            location="1 High Street, London", address_line2=None, city="London", postcode="SW1A 1AA"
        )
        assert build_full_address(job) == "1 High Street, London, SW1A 1AA"


# ══════════════════════════════════════════════════════════════════════════
# Dashboard, feedback, supplies, time off, settings
# ══════════════════════════════════════════════════════════════════════════


class TestPeriods:

    def test_week_starts_monday(self):
        start, end, prev_start, prev_end = resolve_period("week", datetime(2025, 3, 5, 15))
        assert start == datetime(2025, 3, 3)
        assert end.date() == date(2025, 3, 5)
        assert prev_start == datetime(2025, 2, 24)
        assert prev_end.date() == date(2025, 3, 2)

    def test_month_compares_whole_previous_month(self):
        start, _, prev_start, prev_end = resolve_period("month", datetime(2025, 3, 5, 15))
        assert start == datetime(2025, 3, 1)
        assert prev_start == datetime(2025, 2, 1)
        assert prev_end.date() == date(2025, 2, 28)

    def test_custom_compares_same_duration_before(self):
        start, end, prev_start, prev_end = resolve_period(
            "custom", datetime(2025, 3, 20), "2025-03-01", "2025-03-10"
        )
        assert start == datetime(2025, 3, 1)
        assert end.date() == date(2025, 3, 10)
        assert prev_start == datetime(2025, 2, 19)
        assert prev_end.date() == date(2025, 2, 28)

    def test_custom_requires_both_dates(self):
        with pytest.raises(HTTPException) as exc:
            resolve_period("custom", datetime(2025, 3, 20), "2025-03-01")
        assert exc.value.status_code == 400

    def test_percent_change(self):
        assert percent_change(150, 100) == 50.0
        assert percent_change(5, 0) == 100.0
        assert percent_change(0, 0) == 0.0


class TestSmallRules:

    @pytest.mark.parametrize("value,expected", [("4", 4), (5, 5), (1.0, 1)])
    def test_valid_ratings(self, value, expected):
        assert parse_rating(value) == expected

    @pytest.mark.parametrize("value", [0, 6, 4.5, True, None, "great"])
    def test_invalid_ratings(self, value):
        with pytest.raises(HTTPException) as exc:
            parse_rating(value)
        assert exc.value.detail == "Rating must be between 1 and 5"

    def test_rating_summary(self):
        summary = summarize_ratings([5, 4, 3, 2, 1])
        assert summary["averageRating"] == 3.0
        assert summary["ratingDistribution"] == {"excellent": 1, "good": 1, "average": 1, "poor": 2}
        assert summarize_ratings([])["averageRating"] is None

    def test_stock_status(self):
        assert stock_status(0, 5) == "out-of-stock"
        assert stock_status(5, 5) == "low-stock"
        assert stock_status(6, 5) == "in-stock"

    def test_ranges_overlap(self):
        assert ranges_overlap(date(2025, 3, 3), date(2025, 3, 5), date(2025, 3, 5), date(2025, 3, 7))
        assert not ranges_overlap(date(2025, 3, 3), date(2025, 3, 4), date(2025, 3, 5), date(2025, 3, 7))

    def test_notification_settings_keep_known_booleans(self):
        settings = normalize_notification_settings({"jobUpdates": False, "financeUpdates": "no", "extra": True})
        assert settings["jobUpdates"] is False
        assert settings["financeUpdates"] is True
        assert "extra" not in settings
        assert normalize_notification_settings(None)["employeeUpdates"] is True
