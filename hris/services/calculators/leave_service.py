"""
HRIS Console - Leave Entitlement Service

Prorated leave entitlement and leave balance handling.

Annual Leave (AL) proration, 3-month probation:
1. No join date -> full entitlement
2. Probation ends after 31 Dec of the target year -> 0
3. Probation has not ended yet (relative to `today`) -> 0
4. Probation ended before 1 Jan of the target year -> full entitlement
5. Otherwise -> default days x remaining months / 12, rounded half up,
   where remaining months counts the month probation ends in

Full entitlements pass the default days through unchanged, only the
prorated case rounds. Unusable default days (blank, NaN, infinite) count as 0.

Which leave types are prorated is a lookup table, not a hard-coded code.
Every type missing from the table gets its full entitlement.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from dateutil.relativedelta import relativedelta

from hris.config import settings
from hris.schemas.employee import Employee
from hris.schemas.leave import EmployeeEntitlement, LeaveBalance, LeaveRequestStatus, LeaveType
from hris.services.api_client import BackendClient, Page
from hris.services.workflow import LEAVE_WORKFLOW, WorkflowAction
from hris.utils.error_handling import ValidationException, validate_date_range
from hris.utils.numbers import safe_number

logger = logging.getLogger(__name__)


class ProrationStrategy(str, Enum):
    FULL = "full"
    PROBATION = "probation"


@dataclass(frozen=True)
class ProrationPolicy:
    """How a leave type's yearly entitlement is reduced for new joiners."""
    strategy: ProrationStrategy = ProrationStrategy.FULL
    probation_months: int = 0


FULL_ENTITLEMENT = ProrationPolicy()

DEFAULT_PRORATION_POLICIES: Dict[str, ProrationPolicy] = {
    settings.annual_leave_code: ProrationPolicy(
        strategy=ProrationStrategy.PROBATION,
        probation_months=settings.probation_months,
    ),
}


@dataclass(frozen=True)
class ProrationResult:
    days: Union[int, Decimal]
    policy: ProrationPolicy
    probation_end: Optional[date] = None


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def whole_days(value: Decimal) -> Union[int, Decimal]:
    """`value` as an int when it has no fractional part, otherwise as is."""
    return int(value) if value == value.to_integral_value() else value


class LeaveProrationCalculator:
    """Prorated entitlement for one employee and leave type."""

    def __init__(self, policies: Optional[Mapping[str, ProrationPolicy]] = None):
        self.policies = dict(DEFAULT_PRORATION_POLICIES if policies is None else policies)

    def policy_for(self, leave_type_code: Optional[str]) -> ProrationPolicy:
        return self.policies.get(leave_type_code or "", FULL_ENTITLEMENT)

    def calculate(
        self,
        join_date: Optional[date],
        default_days: Any,
        leave_type_code: Optional[str],
        target_year: int,
        today: date,
    ) -> ProrationResult:
        """
        Prorated days for `target_year`, evaluated as of `today`.

        `today` is explicit so results do not depend on the wall clock.
        """
        days = safe_number(default_days)
        full_days = whole_days(days)
        policy = self.policy_for(leave_type_code)

        if policy.strategy == ProrationStrategy.FULL or join_date is None:
            return ProrationResult(days=full_days, policy=policy)

        probation_end = join_date + relativedelta(months=policy.probation_months)
        year_start = date(target_year, 1, 1)
        year_end = date(target_year, 12, 31)

        if probation_end > year_end:
            return ProrationResult(days=0, policy=policy, probation_end=probation_end)
        if probation_end > today:
            return ProrationResult(days=0, policy=policy, probation_end=probation_end)
        if probation_end < year_start:
            return ProrationResult(days=full_days, policy=policy, probation_end=probation_end)

        remaining_months = 12 - (probation_end.month - 1)
        prorated = round_half_up(days * remaining_months / Decimal(12))
        return ProrationResult(days=prorated, policy=policy, probation_end=probation_end)


def prorated_days(
    join_date: Optional[date],
    default_days: Any,
    leave_type_code: Optional[str],
    target_year: int,
    today: date,
    policies: Optional[Mapping[str, ProrationPolicy]] = None,
) -> Union[int, Decimal]:
    """Prorated entitlement; whole days unless a full fractional entitlement passes through."""
    return LeaveProrationCalculator(policies).calculate(
        join_date, default_days, leave_type_code, target_year, today
    ).days


def leave_days(start_date: date, end_date: date) -> int:
    """Inclusive calendar days of a leave request."""
    validate_date_range(start_date, end_date)
    return (end_date - start_date).days + 1


def build_entitlements(
    employees: Iterable[Employee],
    leave_types: List[LeaveType],
    balances: Iterable[LeaveBalance],
    year: int,
) -> List[EmployeeEntitlement]:
    """
    Pair every employee with one balance per leave type.

    Types with no allocation yet show as zero balances.
    """
    by_key = {(b.employee_id, b.leave_type_id): b for b in balances}
    result = []
    for employee in employees:
        rows = []
        for leave_type in leave_types:
            balance = by_key.get((employee.id, leave_type.id))
            if balance is None:
                balance = LeaveBalance(employee_id=employee.id, leave_type_id=leave_type.id, year=year)
            rows.append(balance)
        result.append(EmployeeEntitlement(employee=employee, balances=rows))
    return result


class LeaveService:
    """Leave types, requests and balances on the backend (`/leaves`)."""

    def __init__(self, client: BackendClient):
        self.client = client

    # ===========================================
    # LEAVE TYPES
    # ===========================================

    async def get_types(self) -> List[LeaveType]:
        data = await self.client.get("/leaves/types") or []
        return [LeaveType.model_validate(item) for item in data]

    # ===========================================
    # REQUESTS
    # ===========================================

    async def list(self, **filters) -> Page:
        return await self.client.get_page("/leaves", params=filters)

    async def list_mine(self, **filters) -> Page:
        return await self.client.get_page("/leaves/me", params=filters)

    async def get(self, leave_id: int) -> Dict[str, Any]:
        return await self.client.get(f"/leaves/{leave_id}")

    async def pending_approvals(self, status: Optional[str] = None) -> list:
        params = {"status": status} if status and status != "all" else None
        return await self.client.get("/leaves/pending-approvals", params=params) or []

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        start = data["start_date"]
        end = data["end_date"]
        validate_date_range(start, end)
        payload = {k: (v.isoformat() if isinstance(v, date) else v) for k, v in data.items() if v is not None}
        return await self.client.post("/leaves", json=payload)

    async def _guard(self, leave_id: int, action: WorkflowAction) -> None:
        record = await self.get(leave_id)
        LEAVE_WORKFLOW.next_state((record or {}).get("status", LeaveRequestStatus.PENDING.value), action)

    async def approve(self, leave_id: int, comment: Optional[str] = None) -> Dict[str, Any]:
        await self._guard(leave_id, WorkflowAction.APPROVE)
        return await self.client.post(f"/leaves/{leave_id}/approve", json={"comment": comment})

    async def reject(self, leave_id: int, reason: str) -> Dict[str, Any]:
        if not reason or not reason.strip():
            raise ValidationException("Rejection reason is required", field="reason")
        await self._guard(leave_id, WorkflowAction.REJECT)
        return await self.client.post(f"/leaves/{leave_id}/reject", json={"reason": reason.strip()})

    async def cancel(self, leave_id: int) -> Dict[str, Any]:
        await self._guard(leave_id, WorkflowAction.CANCEL)
        return await self.client.post(f"/leaves/{leave_id}/cancel")

    # ===========================================
    # BALANCES
    # ===========================================

    async def my_balances(self) -> List[LeaveBalance]:
        data = await self.client.get("/leaves/me/balances") or []
        return [LeaveBalance.model_validate(item) for item in data]

    async def list_balances(self, **filters) -> List[LeaveBalance]:
        data = await self.client.get("/leaves/balances/list", params=filters) or []
        return [LeaveBalance.model_validate(item) for item in data]

    async def allocate(
        self,
        employee_id: int,
        leave_type_id: int,
        year: int,
        allocated_days: Any,
        carried_forward_days: Optional[Any] = None,
        expires_at: Optional[date] = None,
    ) -> Dict[str, Any]:
        if Decimal(str(allocated_days)) < 0:
            raise ValidationException("Allocated days cannot be negative", field="allocated_days")
        payload: Dict[str, Any] = {
            "employee_id": employee_id,
            "leave_type_id": leave_type_id,
            "year": year,
            "allocated_days": allocated_days,
        }
        if carried_forward_days is not None:
            payload["carried_forward_days"] = carried_forward_days
        if expires_at is not None:
            payload["expires_at"] = expires_at.isoformat()
        return await self.client.post("/leaves/balances/allocate", json=payload)

    async def adjust(
        self,
        employee_id: int,
        leave_type_id: int,
        year: int,
        adjustment_days: Any,
        adjustment_reason: str,
    ) -> Dict[str, Any]:
        if not adjustment_reason or not adjustment_reason.strip():
            raise ValidationException("Adjustment reason is required", field="adjustment_reason")
        return await self.client.post(
            "/leaves/balances/adjust",
            json={
                "employee_id": employee_id,
                "leave_type_id": leave_type_id,
                "year": year,
                "adjustment_days": adjustment_days,
                "adjustment_reason": adjustment_reason.strip(),
            },
        )
