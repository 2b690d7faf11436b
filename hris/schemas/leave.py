"""
HRIS Console - Leave Schemas

Leave types, balances, requests, proration previews and bulk allocation.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from hris.schemas.common import BackendRecord
from hris.schemas.employee import Employee


class LeaveRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


# ===========================================
# RECORDS
# ===========================================

class LeaveType(BackendRecord):
    id: int
    name: str = ""
    code: Optional[str] = None
    default_days: Decimal = Decimal("0")
    is_paid: bool = True
    is_active: bool = True

    @field_validator("default_days", mode="before")
    @classmethod
    def blank_to_zero(cls, v):
        return 0 if v in (None, "") else v


class LeaveBalance(BackendRecord):
    """
    Per (employee, leave type, year) balance.

    remaining_days = allocated_days - used_days - pending_days is kept by the
    backend; the console displays the value it is given.
    """
    id: int = 0
    employee_id: int
    leave_type_id: int
    year: int
    allocated_days: Decimal = Decimal("0")
    used_days: Decimal = Decimal("0")
    pending_days: Decimal = Decimal("0")
    remaining_days: Decimal = Decimal("0")


class LeaveRequestRecord(BackendRecord):
    id: int
    employee_id: Optional[int] = None
    leave_type_id: Optional[int] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    total_days: Optional[Decimal] = None
    status: str = LeaveRequestStatus.PENDING.value


class EmployeeEntitlement(BaseModel):
    """One employee with a balance for every leave type (zeros when unallocated)."""
    employee: Employee
    balances: List[LeaveBalance]


# ===========================================
# REQUESTS
# ===========================================

class LeaveRequestCreate(BaseModel):
    leave_type_id: int
    start_date: date
    end_date: date
    reason: Optional[str] = None
    work_handover: Optional[str] = None
    contact_during_leave: Optional[str] = None


class LeaveApprove(BaseModel):
    comment: Optional[str] = None


class LeaveReject(BaseModel):
    reason: str = Field(..., min_length=1)


class LeaveAllocationRequest(BaseModel):
    employee_id: int
    leave_type_id: int
    year: int = Field(..., ge=1900, le=9999)
    allocated_days: Decimal = Field(..., ge=0)
    carried_forward_days: Optional[Decimal] = Field(None, ge=0)
    expires_at: Optional[date] = None


class LeaveAdjustmentRequest(BaseModel):
    employee_id: int
    leave_type_id: int
    year: int = Field(..., ge=1900, le=9999)
    adjustment_days: Decimal
    adjustment_reason: str = Field(..., min_length=1)


class ProrationRequest(BaseModel):
    join_date: Optional[date] = None
    default_days: Union[int, float] = Field(..., ge=0)
    leave_type_code: Optional[str] = None
    target_year: int = Field(..., ge=1900, le=9999)
    today: Optional[date] = None


class ProrationResponse(BaseModel):
    leave_type_code: Optional[str]
    target_year: int
    default_days: Union[int, float]
    prorated_days: Union[int, float]
    probation_end: Optional[date] = None
    policy: str


class BulkAllocationRequest(BaseModel):
    year: int = Field(..., ge=1900, le=9999)
    company_id: Optional[int] = None
    today: Optional[date] = None


class AllocationPreviewRow(BaseModel):
    employee_id: int
    employee_code: Optional[str] = None
    employee_name: Optional[str] = None
    leave_type_id: int
    leave_type_code: Optional[str] = None
    year: int
    allocated_days: Union[int, float]


class BulkAllocationResult(BaseModel):
    employees: int = 0
    total_operations: int = 0
    success: int = 0
    failed: int = 0
    errors: List[str] = Field(default_factory=list)
