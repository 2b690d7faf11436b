"""
HRIS Console - Overtime Calculator Service

Overtime pay preview and overtime request handling.

Formula:
- Hourly rate  = floor(basic salary / 173)
- Total amount = hourly rate x hours x multiplier

173 is the statutory average number of working hours in a month.

Multipliers are a closed set, each tied to one overtime type:
- 1.0 regular
- 1.5 weekday
- 2.0 weekend
- 3.0 holiday
"""

import logging
import re
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Any, Dict, Optional

from hris.schemas.overtime import OvertimeStatus, OvertimeType
from hris.services.api_client import BackendClient, Page
from hris.services.workflow import OVERTIME_WORKFLOW, WorkflowAction
from hris.utils.error_handling import (
    InvalidOvertimeHoursException,
    InvalidRateMultiplierException,
    InvalidTimeFormatException,
    ValidationException,
)

logger = logging.getLogger(__name__)


# Average monthly working hours
MONTHLY_WORKING_HOURS = Decimal("173")

MAX_OVERTIME_HOURS = Decimal("200")

MULTIPLIER_TYPES: Dict[Decimal, OvertimeType] = {
    Decimal("1.0"): OvertimeType.REGULAR,
    Decimal("1.5"): OvertimeType.WEEKDAY,
    Decimal("2.0"): OvertimeType.WEEKEND,
    Decimal("3.0"): OvertimeType.HOLIDAY,
}

TYPE_MULTIPLIERS: Dict[OvertimeType, Decimal] = {t: m for m, t in MULTIPLIER_TYPES.items()}

TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation(value)
    # str() first so floats like 1.5 keep their short form
    return Decimal(str(value))


class OvertimeCalculator:
    """Pure overtime arithmetic."""

    @staticmethod
    def hourly_rate(basic_salary: Any) -> Decimal:
        """floor(basic_salary / 173)."""
        try:
            salary = _to_decimal(basic_salary)
        except (InvalidOperation, ValueError):
            raise ValidationException(f"Invalid basic salary: {basic_salary}", field="basic_salary")
        if not salary.is_finite() or salary < 0:
            raise ValidationException(f"Invalid basic salary: {basic_salary}", field="basic_salary")
        return (salary / MONTHLY_WORKING_HOURS).to_integral_value(rounding=ROUND_FLOOR)

    @staticmethod
    def validate_hours(hours: Any) -> Decimal:
        """Hours must lie in (0, 200]. Out-of-range input is rejected, never clamped."""
        try:
            value = _to_decimal(hours)
        except (InvalidOperation, ValueError):
            raise InvalidOvertimeHoursException(hours, MAX_OVERTIME_HOURS)
        if not value.is_finite() or value <= 0 or value > MAX_OVERTIME_HOURS:
            raise InvalidOvertimeHoursException(hours, MAX_OVERTIME_HOURS)
        return value

    @staticmethod
    def overtime_type_for(multiplier: Any) -> OvertimeType:
        try:
            value = _to_decimal(multiplier)
        except (InvalidOperation, ValueError):
            raise InvalidRateMultiplierException(multiplier, MULTIPLIER_TYPES.keys())
        for known, overtime_type in MULTIPLIER_TYPES.items():
            if value.is_finite() and value == known:
                return overtime_type
        raise InvalidRateMultiplierException(multiplier, MULTIPLIER_TYPES.keys())

    @classmethod
    def total_amount(cls, basic_salary: Any, hours: Any, multiplier: Any) -> Decimal:
        """
        Payable overtime.

        Args:
            basic_salary: Monthly basic salary
            hours: Overtime hours, 0 < hours <= 200
            multiplier: One of 1.0, 1.5, 2.0, 3.0

        Returns:
            hourly_rate x hours x multiplier
        """
        rate = cls.hourly_rate(basic_salary)
        checked_hours = cls.validate_hours(hours)
        cls.overtime_type_for(multiplier)
        return rate * checked_hours * _to_decimal(multiplier)

    @classmethod
    def calculate(cls, basic_salary: Any, hours: Any, multiplier: Any) -> Dict[str, Any]:
        """Full breakdown for display."""
        rate = cls.hourly_rate(basic_salary)
        checked_hours = cls.validate_hours(hours)
        overtime_type = cls.overtime_type_for(multiplier)
        rate_multiplier = _to_decimal(multiplier)
        return {
            "basic_salary": _to_decimal(basic_salary),
            "hourly_rate": rate,
            "hours": checked_hours,
            "rate_multiplier": rate_multiplier,
            "overtime_type": overtime_type,
            "total_amount": rate * checked_hours * rate_multiplier,
        }

    @staticmethod
    def _minutes(value: str, field: str) -> int:
        match = TIME_PATTERN.match(str(value or "").strip())
        if not match:
            raise InvalidTimeFormatException(value, field)
        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours > 23 or minutes > 59:
            raise InvalidTimeFormatException(value, field)
        return hours * 60 + minutes

    @classmethod
    def calculate_hours(cls, start_time: str, end_time: str, break_minutes: int = 0) -> Decimal:
        """
        Hours between two HH:MM clock times, less the break.

        Negative spans give 0. Result is rounded to 2 decimal places.
        """
        total = cls._minutes(end_time, "end_time") - cls._minutes(start_time, "start_time") - int(break_minutes or 0)
        return round(Decimal(max(0, total)) / Decimal(60), 2)


# ===========================================
# MODULE-LEVEL HELPERS
# ===========================================

def hourly_rate(basic_salary: Any) -> Decimal:
    return OvertimeCalculator.hourly_rate(basic_salary)


def total_amount(basic_salary: Any, hours: Any, multiplier: Any) -> Decimal:
    return OvertimeCalculator.total_amount(basic_salary, hours, multiplier)


def calculate_hours(start_time: str, end_time: str, break_minutes: int = 0) -> Decimal:
    return OvertimeCalculator.calculate_hours(start_time, end_time, break_minutes)


def multiplier_for_type(overtime_type: Any) -> Decimal:
    try:
        return TYPE_MULTIPLIERS[OvertimeType(overtime_type)]
    except ValueError:
        raise ValidationException(f"Unknown overtime type: {overtime_type}", field="overtime_type")


class OvertimeService:
    """Overtime requests on the backend (`/overtime`)."""

    def __init__(self, client: BackendClient):
        self.client = client

    async def list(self, **filters) -> Page:
        return await self.client.get_page("/overtime", params=filters)

    async def list_mine(self, **filters) -> Page:
        return await self.client.get_page("/overtime/me", params=filters)

    async def get(self, overtime_id: int) -> Dict[str, Any]:
        return await self.client.get(f"/overtime/{overtime_id}")

    async def pending_approvals(self) -> list:
        return await self.client.get("/overtime/pending-approvals") or []

    @staticmethod
    def build_payload(
        overtime_date: date,
        reason: str,
        hours: Optional[Any] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        break_duration: int = 0,
        rate_multiplier: Optional[Any] = None,
        overtime_type: Optional[Any] = None,
        task_description: Optional[str] = None,
        employee_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Validate an overtime request and assemble the backend payload.

        Direct `hours` take precedence over a start/end time pair. When a
        multiplier is given the overtime type always comes from the
        multiplier table.
        """
        if not reason or not str(reason).strip():
            raise ValidationException("Reason is required", field="reason")

        if hours is None:
            if not start_time or not end_time:
                raise ValidationException(
                    "Either hours or start and end time are required",
                    field="hours",
                )
            hours = OvertimeCalculator.calculate_hours(start_time, end_time, break_duration)
        checked_hours = OvertimeCalculator.validate_hours(hours)

        payload: Dict[str, Any] = {
            "date": overtime_date.isoformat(),
            "hours": float(checked_hours),
            "reason": str(reason).strip(),
            "break_duration": break_duration,
        }
        if start_time:
            payload["start_time"] = start_time
        if end_time:
            payload["end_time"] = end_time
        if task_description:
            payload["task_description"] = task_description
        if employee_id is not None:
            payload["employee_id"] = employee_id

        if rate_multiplier is not None:
            derived = OvertimeCalculator.overtime_type_for(rate_multiplier)
            payload["rate_multiplier"] = float(_to_decimal(rate_multiplier))
            payload["overtime_type"] = derived.value
        elif overtime_type is not None:
            ot_type = OvertimeType(overtime_type)
            payload["overtime_type"] = ot_type.value
            payload["rate_multiplier"] = float(TYPE_MULTIPLIERS[ot_type])

        return payload

    async def create(self, **fields) -> Dict[str, Any]:
        """Create for self, or for an employee when `employee_id` is given."""
        payload = self.build_payload(**fields)
        endpoint = "/overtime/employee" if payload.get("employee_id") is not None else "/overtime"
        result = await self.client.post(endpoint, json=payload)
        logger.info(f"Created overtime request for {payload['date']} ({payload['hours']}h)")
        return result

    async def update(self, overtime_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        if data.get("hours") is not None:
            data["hours"] = float(OvertimeCalculator.validate_hours(data["hours"]))
        return await self.client.put(f"/overtime/{overtime_id}", json=data)

    async def delete(self, overtime_id: int) -> None:
        await self.client.delete(f"/overtime/{overtime_id}")

    async def _guard(self, overtime_id: int, action: WorkflowAction) -> None:
        record = await self.get(overtime_id)
        OVERTIME_WORKFLOW.next_state((record or {}).get("status", OvertimeStatus.PENDING.value), action)

    async def approve(self, overtime_id: int, approval_notes: Optional[str] = None) -> Dict[str, Any]:
        await self._guard(overtime_id, WorkflowAction.APPROVE)
        body = {"approval_notes": approval_notes} if approval_notes else {}
        return await self.client.post(f"/overtime/{overtime_id}/approve", json=body)

    async def reject(self, overtime_id: int, rejection_reason: str) -> Dict[str, Any]:
        if not rejection_reason or not rejection_reason.strip():
            raise ValidationException("Rejection reason is required", field="rejection_reason")
        await self._guard(overtime_id, WorkflowAction.REJECT)
        return await self.client.post(
            f"/overtime/{overtime_id}/reject",
            json={"rejection_reason": rejection_reason.strip()},
        )
