"""
HRIS Console - Loan and Adjustment Tests

Unit tests for installment schedules and adjustment payloads.
"""

from datetime import date
from decimal import Decimal

import pytest

from hris.services.adjustment_service import build_adjustment_payload
from hris.services.calculators import LoanCalculator, calculate_loan_installments
from hris.utils.error_handling import InvalidAmountException, ValidationException


class TestInstallments:
    """Installments = ceil(total / installment)."""

    def test_exact(self):
        assert calculate_loan_installments(6000000, 1000000) == 6

    def test_rounds_up(self):
        assert calculate_loan_installments(5000000, 1500000) == 4

    def test_single_installment(self):
        assert calculate_loan_installments("750000", "750000") == 1

    def test_installment_larger_than_loan(self):
        with pytest.raises(ValidationException) as exc_info:
            calculate_loan_installments(100, 200)

        assert exc_info.value.field == "installment_amount"

    @pytest.mark.parametrize("total,installment", [(0, 100), (-5, 1), ("abc", 1), (100, 0), (100, None)])
    def test_invalid_amounts(self, total, installment):
        with pytest.raises(InvalidAmountException):
            calculate_loan_installments(total, installment)


class TestSchedule:

    def test_end_date(self):
        assert LoanCalculator.end_date(date(2025, 1, 15), 6) == date(2025, 7, 15)

    def test_end_date_clamps_month_end(self):
        assert LoanCalculator.end_date(date(2025, 1, 31), 1) == date(2025, 2, 28)

    def test_schedule(self):
        schedule = LoanCalculator.schedule(5000000, 1500000, date(2025, 3, 1))

        assert schedule["total_installments"] == 4
        assert schedule["end_date"] == date(2025, 7, 1)
        assert schedule["installment_amount"] == Decimal("1500000")

    def test_schedule_without_effective_date(self):
        assert LoanCalculator.schedule(1000, 500)["end_date"] is None

    @pytest.mark.parametrize("current,total,expected", [
        (0, 6, 0),
        (3, 6, 50),
        (1, 3, 33),
        (2, 3, 67),
        (7, 6, 100),
        (None, 6, 0),
        (2, 0, 0),
        (2, None, 0),
    ])
    def test_progress(self, current, total, expected):
        assert LoanCalculator.progress_percent(current, total) == expected


class TestAdjustmentPayload:
    """Loan-aware adjustment request assembly."""

    def test_loan_payload(self):
        payload = build_adjustment_payload({
            "employee_id": 7,
            "type": "loan",
            "total_loan_amount": Decimal("5000000"),
            "installment_amount": Decimal("1500000"),
            "effective_date": date(2025, 3, 1),
        })

        assert payload["amount"] == Decimal("1500000")
        assert payload["total_installments"] == 4
        assert payload["is_recurring"] is True
        assert payload["recurring_frequency"] == "monthly"
        assert payload["recurring_end_date"] == date(2025, 7, 1)

    def test_advance_requires_loan_figures(self):
        with pytest.raises(ValidationException) as exc_info:
            build_adjustment_payload({"employee_id": 7, "type": "advance", "amount": 100})

        assert exc_info.value.field == "total_loan_amount"

    def test_penalty_payload(self):
        payload = build_adjustment_payload({"employee_id": 7, "type": "penalty", "amount": Decimal("50000")})

        assert payload == {
            "employee_id": 7,
            "type": "penalty",
            "amount": Decimal("50000"),
            "is_recurring": False,
        }

    def test_recurring_deduction_defaults_monthly(self):
        payload = build_adjustment_payload({
            "employee_id": 7,
            "type": "deduction",
            "amount": 1000,
            "is_recurring": True,
        })

        assert payload["recurring_frequency"] == "monthly"

    def test_missing_employee(self):
        with pytest.raises(ValidationException) as exc_info:
            build_adjustment_payload({"type": "penalty", "amount": 100})

        assert exc_info.value.field == "employee_id"

    def test_missing_amount(self):
        with pytest.raises(ValidationException) as exc_info:
            build_adjustment_payload({"employee_id": 7, "type": "penalty"})

        assert exc_info.value.field == "amount"

    def test_unknown_type(self):
        with pytest.raises(ValidationException) as exc_info:
            build_adjustment_payload({"employee_id": 7, "type": "gift", "amount": 100})

        assert exc_info.value.field == "type"
