"""
HRIS Console - Loan Installment Calculator

Installment schedule for loan and salary-advance adjustments.

- Installments = ceil(total loan / installment amount)
- End date     = effective date + installments months
- Progress     = paid installments / installments x 100, capped at 100
"""

from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_CEILING, ROUND_HALF_UP
from typing import Any, Dict, Optional

from dateutil.relativedelta import relativedelta

from hris.schemas.adjustment import AdjustmentType, LOAN_TYPES
from hris.utils.error_handling import InvalidAmountException, ValidationException


class LoanCalculator:
    """Loan and advance repayment arithmetic."""

    @staticmethod
    def is_loan_type(adjustment_type: Any) -> bool:
        try:
            return AdjustmentType(adjustment_type) in LOAN_TYPES
        except ValueError:
            return False

    @staticmethod
    def total_installments(total_loan_amount: Any, installment_amount: Any) -> int:
        try:
            total = Decimal(str(total_loan_amount))
        except InvalidOperation:
            raise InvalidAmountException(total_loan_amount, "total_loan_amount")
        try:
            installment = Decimal(str(installment_amount))
        except InvalidOperation:
            raise InvalidAmountException(installment_amount, "installment_amount")
        if not total.is_finite() or total <= 0:
            raise InvalidAmountException(total_loan_amount, "total_loan_amount")
        if not installment.is_finite() or installment <= 0:
            raise InvalidAmountException(installment_amount, "installment_amount")
        if installment > total:
            raise ValidationException(
                "Installment amount cannot exceed the total loan amount",
                field="installment_amount",
            )
        return int((total / installment).to_integral_value(rounding=ROUND_CEILING))

    @staticmethod
    def end_date(effective_date: date, installments: int) -> date:
        # relativedelta clamps 31 Jan + 1 month to the end of February
        return effective_date + relativedelta(months=installments)

    @staticmethod
    def progress_percent(current_installment: Optional[int], total_installments: Optional[int]) -> int:
        if not total_installments:
            return 0
        percent = Decimal(current_installment or 0) / Decimal(total_installments) * 100
        return min(100, int(percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP)))

    @classmethod
    def schedule(
        cls,
        total_loan_amount: Any,
        installment_amount: Any,
        effective_date: Optional[date] = None,
    ) -> Dict[str, Any]:
        installments = cls.total_installments(total_loan_amount, installment_amount)
        return {
            "total_loan_amount": Decimal(str(total_loan_amount)),
            "installment_amount": Decimal(str(installment_amount)),
            "total_installments": installments,
            "effective_date": effective_date,
            "end_date": cls.end_date(effective_date, installments) if effective_date else None,
        }
