"""
HRIS Console - Calculators Package

Display-side payroll and leave arithmetic.

Modules:
- period_service: pay period resolution from a cutoff day, working days
- overtime_service: overtime pay (hourly rate = floor(basic / 173))
- leave_service: prorated leave entitlement (3-month probation for AL)
- loan_service: loan and advance installment schedules
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional, Union

from hris.config import settings
from hris.services.calculators.period_service import (
    PeriodCalculator,
    PayrollPeriod,
    PayrollSettingService,
    Holiday,
    WorkingDaysSummary,
    resolve_period,
    calculate_period_working_days,
    calculate_month_working_days,
)
from hris.services.calculators.overtime_service import (
    OvertimeCalculator,
    OvertimeService,
    MONTHLY_WORKING_HOURS,
    MAX_OVERTIME_HOURS,
    MULTIPLIER_TYPES,
    hourly_rate,
    total_amount,
    calculate_hours,
    multiplier_for_type,
)
from hris.services.calculators.leave_service import (
    LeaveProrationCalculator,
    LeaveService,
    ProrationPolicy,
    ProrationStrategy,
    DEFAULT_PRORATION_POLICIES,
    prorated_days,
    leave_days,
)
from hris.services.calculators.loan_service import LoanCalculator


# ===========================================
# CONVENIENCE FUNCTIONS
# ===========================================

def calculate_overtime(basic_salary: Any, hours: Any, multiplier: Any) -> Decimal:
    """
    Calculate payable overtime.

    Args:
        basic_salary: Monthly basic salary
        hours: Overtime hours (0 < hours <= 200)
        multiplier: 1.0, 1.5, 2.0 or 3.0

    Returns:
        floor(basic_salary / 173) x hours x multiplier
    """
    return OvertimeCalculator.total_amount(basic_salary, hours, multiplier)


def calculate_annual_leave(
    join_date: Optional[date],
    default_days: Any,
    target_year: int,
    today: Optional[date] = None,
) -> Union[int, Decimal]:
    """
    Prorated Annual Leave for a year.

    `today` defaults to the current date; pass it explicitly for
    reproducible results.
    """
    return prorated_days(
        join_date,
        default_days,
        settings.annual_leave_code,
        target_year,
        today or date.today(),
    )


def calculate_loan_installments(total_loan_amount: Any, installment_amount: Any) -> int:
    """Number of monthly installments, rounded up."""
    return LoanCalculator.total_installments(total_loan_amount, installment_amount)


__all__ = [
    # Period
    "PeriodCalculator",
    "PayrollPeriod",
    "PayrollSettingService",
    "Holiday",
    "WorkingDaysSummary",
    "resolve_period",
    "calculate_period_working_days",
    "calculate_month_working_days",
    # Overtime
    "OvertimeCalculator",
    "OvertimeService",
    "MONTHLY_WORKING_HOURS",
    "MAX_OVERTIME_HOURS",
    "MULTIPLIER_TYPES",
    "hourly_rate",
    "total_amount",
    "calculate_hours",
    "multiplier_for_type",
    # Leave
    "LeaveProrationCalculator",
    "LeaveService",
    "ProrationPolicy",
    "ProrationStrategy",
    "DEFAULT_PRORATION_POLICIES",
    "prorated_days",
    "leave_days",
    # Loan
    "LoanCalculator",
    # Convenience
    "calculate_overtime",
    "calculate_annual_leave",
    "calculate_loan_installments",
]
