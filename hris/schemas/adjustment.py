"""
HRIS Console - Payroll Adjustment Schemas

Deductions, penalties, loans and salary advances, plus allowances.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from hris.schemas.common import BackendRecord


class AdjustmentType(str, Enum):
    DEDUCTION = "deduction"
    PENALTY = "penalty"
    LOAN = "loan"
    ADVANCE = "advance"
    BONUS = "bonus"
    ALLOWANCE = "allowance"
    REIMBURSEMENT = "reimbursement"
    CORRECTION = "correction"
    INCENTIVE = "incentive"
    COMMISSION = "commission"


class AdjustmentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PROCESSED = "processed"
    CANCELLED = "cancelled"


class AllowanceStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"


# Adjustment types that reduce pay
DEDUCTION_TYPES = (
    AdjustmentType.DEDUCTION,
    AdjustmentType.PENALTY,
    AdjustmentType.LOAN,
    AdjustmentType.ADVANCE,
)

# Adjustment types repaid in monthly installments
LOAN_TYPES = (AdjustmentType.LOAN, AdjustmentType.ADVANCE)

ADJUSTMENT_TYPE_LABELS = {
    AdjustmentType.DEDUCTION: "Potongan",
    AdjustmentType.PENALTY: "Denda/Penalty",
    AdjustmentType.LOAN: "Pinjaman",
    AdjustmentType.ADVANCE: "Kasbon",
    AdjustmentType.BONUS: "Bonus",
    AdjustmentType.ALLOWANCE: "Tunjangan",
    AdjustmentType.REIMBURSEMENT: "Reimbursement",
    AdjustmentType.CORRECTION: "Koreksi",
    AdjustmentType.INCENTIVE: "Insentif",
    AdjustmentType.COMMISSION: "Komisi",
}


# ===========================================
# RECORDS
# ===========================================

class AdjustmentRecord(BackendRecord):
    id: int
    employee_id: Optional[int] = None
    type: str = AdjustmentType.DEDUCTION.value
    amount: Optional[Decimal] = None
    status: str = AdjustmentStatus.PENDING.value
    total_loan_amount: Optional[Decimal] = None
    installment_amount: Optional[Decimal] = None
    total_installments: Optional[int] = None
    current_installment: Optional[int] = None


class AllowanceRecord(BackendRecord):
    id: int
    employee_id: Optional[int] = None
    name: Optional[str] = None
    type: Optional[str] = None
    amount: Optional[Decimal] = None
    status: str = AllowanceStatus.ACTIVE.value
    is_taxable: bool = False


# ===========================================
# REQUESTS
# ===========================================

class AdjustmentCreate(BaseModel):
    """
    Create a deduction-type adjustment.

    For loans and advances `total_loan_amount` and `installment_amount` are
    required; `amount` becomes the installment and the recurring end date is
    derived from the installment count.
    """
    employee_id: int
    type: AdjustmentType
    category: Optional[str] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    description: Optional[str] = None
    reason: Optional[str] = None
    effective_date: Optional[date] = None
    pay_period: Optional[str] = None
    is_recurring: bool = False
    recurring_frequency: Optional[str] = None
    recurring_end_date: Optional[date] = None
    reference_number: Optional[str] = None
    company_id: Optional[int] = None
    total_loan_amount: Optional[Decimal] = Field(None, gt=0)
    installment_amount: Optional[Decimal] = Field(None, gt=0)


class AdjustmentReject(BaseModel):
    rejection_reason: str = Field(..., min_length=1)


class BulkAdjustmentCreate(BaseModel):
    employee_ids: List[int] = Field(..., min_length=1)
    type: AdjustmentType
    category: Optional[str] = None
    amount: Decimal = Field(..., gt=0)
    description: Optional[str] = None
    reason: Optional[str] = None
    effective_date: Optional[date] = None
    pay_period: Optional[str] = None
    is_taxable: Optional[bool] = None


class LoanScheduleRequest(BaseModel):
    total_loan_amount: Decimal = Field(..., gt=0)
    installment_amount: Decimal = Field(..., gt=0)
    effective_date: Optional[date] = None


class LoanScheduleResponse(BaseModel):
    total_loan_amount: Decimal
    installment_amount: Decimal
    total_installments: int
    effective_date: Optional[date] = None
    end_date: Optional[date] = None
