"""
HRIS Console - Employee Schemas

Read-only employee shapes as returned by the backend.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import field_validator

from hris.schemas.common import BackendRecord, NamedRef


class Employee(BackendRecord):
    """Employee record. Only the fields used by calculations are typed."""
    id: int
    employee_id: Optional[str] = None  # Human-readable code, e.g. "EMP-0042"
    name: Optional[str] = None
    basic_salary: Optional[Decimal] = None
    join_date: Optional[date] = None
    company_id: Optional[int] = None
    department: Optional[Union[NamedRef, str]] = None
    company: Optional[Union[NamedRef, str]] = None
    employment_status: Optional[str] = None

    @field_validator("join_date", mode="before")
    @classmethod
    def strip_time_part(cls, v: Any) -> Any:
        # Backend sends ISO timestamps for date columns
        if isinstance(v, str):
            return v.split("T")[0] or None
        return v

    @property
    def department_name(self) -> str:
        if isinstance(self.department, NamedRef):
            return self.department.name or ""
        return self.department or ""

    @property
    def company_name(self) -> str:
        if isinstance(self.company, NamedRef):
            return self.company.name or ""
        return self.company or ""

    @property
    def display_name(self) -> str:
        return self.name or self.employee_id or str(self.id)
