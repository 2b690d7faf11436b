"""
HRIS Console - Repeatability Tests

Calculators and summaries are pure: the same input gives the same output
on every call and the input is never modified.
"""

import copy
from datetime import date

import pytest

from hris.schemas.leave import LeaveType
from hris.services.calculators import (
    DEFAULT_PRORATION_POLICIES,
    LeaveProrationCalculator,
    ProrationPolicy,
    ProrationStrategy,
    prorated_days,
    resolve_period,
    total_amount,
)
from hris.services.stats_service import (
    summarize_allowances,
    summarize_balances,
    summarize_deductions,
    summarize_leave_by_department,
    summarize_leave_by_month,
    summarize_leave_by_type,
    summarize_leave_requests,
    summarize_overtime,
    summarize_payroll,
)


TODAY = date(2024, 12, 31)

LEAVE_TYPES = [LeaveType(id=1, code="AL", name="Annual"), LeaveType(id=2, code="SL", name="Sick")]

LEAVE_REQUESTS = [
    {"leave_type_id": 1, "status": "approved", "start_date": "2025-03-10", "end_date": "2025-03-11",
     "employee": {"department": {"name": "Finance"}}},
    {"leave_type_id": 2, "status": "rejected", "start_date": "2025-04-01", "end_date": "2025-04-01"},
    {"leave_type_id": 1, "status": "pending", "start_date": "2024-12-30", "end_date": "2025-01-02"},
]

PAYROLLS = [
    {"status": "draft", "gross_salary": "10000000", "net_salary": "9000000"},
    {"status": "paid", "gross_salary": "NaN", "pph21": 50000},
]

OVERTIME = [
    {"status": "approved", "hours": "2", "total_amount": 30000},
    {"status": "pending", "hours": 3},
]

ADJUSTMENTS = [
    {"type": "loan", "status": "approved", "amount": "500000"},
    {"type": "bonus", "status": "approved", "amount": "100"},
]

ALLOWANCES = [
    {"status": "active", "amount": "250000", "is_taxable": True},
    {"status": "inactive", "amount": "1"},
]

BALANCES = [{"allocated_days": 12, "used_days": 2, "remaining_days": 10}]


class TestCalculatorsRepeat:

    def test_resolve_period(self):
        assert resolve_period("2025-03", 20) == resolve_period("2025-03", 20)
        assert resolve_period("2025-01", 25) == resolve_period("2025-01", 25)

    def test_total_amount(self):
        assert total_amount(1730000, 2, 1.5) == total_amount(1730000, 2, 1.5)

    @pytest.mark.parametrize("join_date, code", [
        (date(2024, 1, 15), "AL"),
        (None, "AL"),
        (date(2024, 5, 1), "SL"),
    ])
    def test_prorated_days(self, join_date, code):
        first = prorated_days(join_date, 12, code, 2024, TODAY)

        assert prorated_days(join_date, 12, code, 2024, TODAY) == first

    def test_custom_table_leaves_defaults_alone(self):
        defaults = dict(DEFAULT_PRORATION_POLICIES)
        custom = {"SL": ProrationPolicy(ProrationStrategy.PROBATION, probation_months=6)}

        calculator = LeaveProrationCalculator(custom)
        calculator.calculate(date(2024, 1, 15), 12, "SL", 2024, TODAY)
        calculator.policies["ML"] = ProrationPolicy(ProrationStrategy.PROBATION, probation_months=1)

        assert DEFAULT_PRORATION_POLICIES == defaults
        assert set(custom) == {"SL"}
        assert LeaveProrationCalculator().policy_for("SL").strategy == ProrationStrategy.FULL


class TestSummariesRepeat:

    @pytest.mark.parametrize("summarize, records", [
        (summarize_payroll, PAYROLLS),
        (summarize_leave_requests, LEAVE_REQUESTS),
        (summarize_leave_by_month, LEAVE_REQUESTS),
        (summarize_leave_by_department, LEAVE_REQUESTS),
        (summarize_balances, BALANCES),
        (summarize_overtime, OVERTIME),
        (summarize_deductions, ADJUSTMENTS),
        (summarize_allowances, ALLOWANCES),
    ])
    def test_same_result_input_untouched(self, summarize, records):
        snapshot = copy.deepcopy(records)

        first = summarize(records)
        second = summarize(records)

        assert first == second
        assert records == snapshot

    def test_leave_by_type(self):
        snapshot = copy.deepcopy(LEAVE_REQUESTS)

        first = summarize_leave_by_type(LEAVE_REQUESTS, LEAVE_TYPES, year=2025)
        second = summarize_leave_by_type(LEAVE_REQUESTS, LEAVE_TYPES, year=2025)

        assert first == second
        assert LEAVE_REQUESTS == snapshot
        assert [leave_type.id for leave_type in LEAVE_TYPES] == [1, 2]
