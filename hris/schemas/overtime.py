"""
HRIS Console - Overtime Schemas

Pydantic schemas for overtime requests and amount previews.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from hris.schemas.common import BackendRecord


# ===========================================
# ENUMS
# ===========================================

class OvertimeStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class OvertimeType(str, Enum):
    REGULAR = "regular"
    WEEKDAY = "weekday"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"


# ===========================================
# RECORDS
# ===========================================

class OvertimeRecord(BackendRecord):
    id: int
    employee_id: Optional[int] = None
    date: Optional[str] = None
    hours: Optional[Decimal] = None
    rate_multiplier: Optional[Decimal] = None
    rate_per_hour: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    overtime_type: Optional[str] = None
    status: str = OvertimeStatus.PENDING.value


# ===========================================
# REQUESTS / RESPONSES
# ===========================================

class OvertimeCalculationRequest(BaseModel):
    """Amount preview input. Range checks happen in the calculator."""
    basic_salary: Decimal = Field(..., ge=0)
    hours: Decimal
    rate_multiplier: Decimal


class OvertimeCalculationResponse(BaseModel):
    basic_salary: Decimal
    hourly_rate: Decimal
    hours: Decimal
    rate_multiplier: Decimal
    overtime_type: OvertimeType
    total_amount: Decimal


class OvertimeHoursRequest(BaseModel):
    start_time: str = Field(..., description="HH:MM")
    end_time: str = Field(..., description="HH:MM")
    break_minutes: int = Field(0, ge=0)


class OvertimeCreate(BaseModel):
    """
    Create overtime request.

    Either `hours` or a start/end time pair is required. `overtime_type` is
    derived from `rate_multiplier` when both are given.
    """
    employee_id: Optional[int] = None
    date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    hours: Optional[Decimal] = None
    break_duration: int = Field(0, ge=0)
    reason: str = Field(..., min_length=1)
    task_description: Optional[str] = None
    overtime_type: Optional[OvertimeType] = None
    rate_multiplier: Optional[Decimal] = None


class OvertimeApprove(BaseModel):
    approval_notes: Optional[str] = None


class OvertimeReject(BaseModel):
    rejection_reason: str = Field(..., min_length=1)
