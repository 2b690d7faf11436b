"""
HRIS Console - Payroll Schemas

Payroll records, workflow requests and dashboard summaries.
Tax (PPh21) and BPJS figures are computed by the backend and carried as
opaque amounts.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from hris.schemas.common import BackendRecord


class PayrollStatus(str, Enum):
    DRAFT = "draft"
    PROCESSING = "processing"
    VALIDATED = "validated"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"
    CANCELLED = "cancelled"


class PayType(str, Enum):
    GROSS = "gross"
    NET = "net"
    GROSS_UP = "gross_up"


# ===========================================
# RECORDS
# ===========================================

class PayrollRecord(BackendRecord):
    id: int
    employee_id: Optional[int] = None
    company_id: Optional[int] = None
    payroll_number: Optional[str] = None
    period: Optional[str] = None
    period_start: Optional[str] = None
    period_end: Optional[str] = None
    basic_salary: Optional[Decimal] = None
    gross_salary: Optional[Decimal] = None
    total_deductions: Optional[Decimal] = None
    pph21: Optional[Decimal] = None
    bpjs_employee_total: Optional[Decimal] = None
    bpjs_company_total: Optional[Decimal] = None
    net_salary: Optional[Decimal] = None
    status: str = PayrollStatus.DRAFT.value


# ===========================================
# REQUESTS
# ===========================================

class GeneratePayrollRequest(BaseModel):
    company_id: int
    period: str = Field(..., description="YYYY-MM")
    employee_ids: Optional[List[int]] = None


class CalculatePayrollRequest(BaseModel):
    employee_id: int
    period: str = Field(..., description="YYYY-MM")
    pay_type: Optional[PayType] = None
    basic_salary: Optional[Decimal] = Field(None, ge=0)
    allowances: Optional[Dict[str, Decimal]] = None
    deductions: Optional[Dict[str, Decimal]] = None
    overtime_hours: Optional[Decimal] = Field(None, ge=0)
    working_days: Optional[int] = Field(None, ge=0)
    actual_working_days: Optional[int] = Field(None, ge=0)
    absent_days: Optional[int] = Field(None, ge=0)
    late_days: Optional[int] = Field(None, ge=0)
    leave_days: Optional[int] = Field(None, ge=0)


class PayrollApprove(BaseModel):
    approval_notes: Optional[str] = None


class PayrollReject(BaseModel):
    rejection_reason: str = Field(..., min_length=1)

    @field_validator("rejection_reason")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Rejection reason is required")
        return v.strip()


class PayrollMarkPaid(BaseModel):
    payment_reference: Optional[str] = None
    payment_method: Optional[str] = None
    payment_date: Optional[date] = None


class PayrollBulkApprove(BaseModel):
    ids: List[int] = Field(..., min_length=1)
    approval_notes: Optional[str] = None


class PayrollBulkReject(BaseModel):
    ids: List[int] = Field(..., min_length=1)
    rejection_reason: str = Field(..., min_length=1)


# ===========================================
# SUMMARIES
# ===========================================

class PayrollSummary(BaseModel):
    total_employees: int = 0
    pending_count: int = 0
    processing_count: int = 0
    validated_count: int = 0
    approved_count: int = 0
    paid_count: int = 0
    rejected_count: int = 0
    total_gross: Decimal = Decimal("0")
    total_net: Decimal = Decimal("0")
    total_tax: Decimal = Decimal("0")
    total_bpjs_employee: Decimal = Decimal("0")
    total_bpjs_company: Decimal = Decimal("0")
