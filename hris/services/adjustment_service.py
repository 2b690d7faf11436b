"""
HRIS Console - Payroll Adjustment Service

Deductions, penalties, loans and salary advances (`/payroll-adjustments`)
and allowances (`/allowances`).

Loans and advances are repaid in monthly installments. For those types the
console derives the installment count and the recurring end date before
sending, and the per-month `amount` is the installment amount.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from hris.schemas.adjustment import AdjustmentStatus, AdjustmentType
from hris.services.api_client import BackendClient, Page
from hris.services.calculators.loan_service import LoanCalculator
from hris.services.stats_service import summarize_allowances, summarize_deductions
from hris.services.workflow import ADJUSTMENT_WORKFLOW, WorkflowAction
from hris.utils.error_handling import ValidationException, validate_amount

logger = logging.getLogger(__name__)


def build_adjustment_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a create/update request and assemble the backend payload.

    Raises:
        ValidationException: Missing employee, amount or loan figures
    """
    if not data.get("employee_id"):
        raise ValidationException("Employee is required", field="employee_id")

    try:
        adjustment_type = AdjustmentType(data.get("type") or AdjustmentType.DEDUCTION)
    except ValueError:
        raise ValidationException(f"Unknown adjustment type: {data.get('type')}", field="type")
    is_loan = LoanCalculator.is_loan_type(adjustment_type)

    payload: Dict[str, Any] = {
        "employee_id": int(data["employee_id"]),
        "type": adjustment_type.value,
    }
    for key in ("category", "description", "reason", "pay_period", "reference_number", "company_id"):
        if data.get(key):
            payload[key] = data[key]
    effective_date: Optional[date] = data.get("effective_date")
    if effective_date:
        payload["effective_date"] = effective_date

    if is_loan:
        total_loan = data.get("total_loan_amount")
        installment = data.get("installment_amount")
        if not total_loan or not installment:
            raise ValidationException(
                "Total loan amount and monthly installment are required",
                field="total_loan_amount",
            )
        installments = LoanCalculator.total_installments(total_loan, installment)
        payload.update({
            "amount": installment,
            "total_loan_amount": total_loan,
            "installment_amount": installment,
            "total_installments": installments,
            "is_recurring": True,
            "recurring_frequency": "monthly",
        })
        if effective_date:
            payload["recurring_end_date"] = LoanCalculator.end_date(effective_date, installments)
    else:
        if not data.get("amount"):
            raise ValidationException("Amount is required", field="amount")
        validate_amount(data["amount"])
        payload["amount"] = data["amount"]
        payload["is_recurring"] = bool(data.get("is_recurring"))
        if payload["is_recurring"]:
            payload["recurring_frequency"] = data.get("recurring_frequency") or "monthly"
            if data.get("recurring_end_date"):
                payload["recurring_end_date"] = data["recurring_end_date"]

    return payload


class AdjustmentService:
    """Deduction-type payroll adjustments."""

    BASE_URL = "/payroll-adjustments"

    def __init__(self, client: BackendClient):
        self.client = client

    async def list(self, **filters) -> Page:
        return await self.client.get_page(self.BASE_URL, params=filters)

    async def get(self, adjustment_id: int) -> Dict[str, Any]:
        return await self.client.get(f"{self.BASE_URL}/{adjustment_id}")

    async def list_for_employee(self, employee_id: int) -> List[Dict[str, Any]]:
        return await self.client.get(f"{self.BASE_URL}/employee/{employee_id}") or []

    async def pending_approvals(self) -> List[Dict[str, Any]]:
        return await self.client.get(f"{self.BASE_URL}/pending") or []

    async def statistics(self, company_id: Optional[int] = None, pay_period: Optional[str] = None) -> Dict[str, Any]:
        return await self.client.get(
            f"{self.BASE_URL}/statistics",
            params={"company_id": company_id, "pay_period": pay_period},
        )

    async def summary(self, **filters) -> Dict[str, Any]:
        page = await self.list(**filters)
        return summarize_deductions(page.data, total_items=page.total)

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        payload = build_adjustment_payload(data)
        result = await self.client.post(self.BASE_URL, json=payload)
        logger.info(f"Created {payload['type']} adjustment for employee {payload['employee_id']}")
        return result

    async def update(self, adjustment_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        payload = build_adjustment_payload(data)
        return await self.client.put(f"{self.BASE_URL}/{adjustment_id}", json=payload)

    async def delete(self, adjustment_id: int) -> None:
        await self.client.delete(f"{self.BASE_URL}/{adjustment_id}")

    async def bulk_create(self, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        if not data.get("employee_ids"):
            raise ValidationException("At least one employee is required", field="employee_ids")
        validate_amount(data.get("amount"))
        return await self.client.post(f"{self.BASE_URL}/bulk", json=data) or []

    async def _guard(self, adjustment_id: int, action: WorkflowAction) -> None:
        record = await self.get(adjustment_id)
        ADJUSTMENT_WORKFLOW.next_state((record or {}).get("status", AdjustmentStatus.PENDING.value), action)

    async def approve(self, adjustment_id: int) -> Dict[str, Any]:
        await self._guard(adjustment_id, WorkflowAction.APPROVE)
        return await self.client.post(f"{self.BASE_URL}/{adjustment_id}/approve")

    async def reject(self, adjustment_id: int, rejection_reason: str) -> Dict[str, Any]:
        if not rejection_reason or not rejection_reason.strip():
            raise ValidationException("Rejection reason is required", field="rejection_reason")
        await self._guard(adjustment_id, WorkflowAction.REJECT)
        return await self.client.post(
            f"{self.BASE_URL}/{adjustment_id}/reject",
            json={"rejection_reason": rejection_reason.strip()},
        )

    async def bulk_approve(self, ids: List[int]) -> Dict[str, Any]:
        return await self.client.post(f"{self.BASE_URL}/bulk/approve", json={"ids": ids})


class AllowanceService:
    """Allowances (`/allowances`)."""

    def __init__(self, client: BackendClient):
        self.client = client

    async def list(self, **filters) -> Page:
        return await self.client.get_page("/allowances", params=filters)

    async def get(self, allowance_id: int) -> Dict[str, Any]:
        return await self.client.get(f"/allowances/{allowance_id}")

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if not data.get("name"):
            raise ValidationException("Allowance name is required", field="name")
        if data.get("amount") is None and data.get("percentage") is None:
            raise ValidationException("Either amount or percentage is required", field="amount")
        return await self.client.post("/allowances", json=data)

    async def update(self, allowance_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.put(f"/allowances/{allowance_id}", json=data)

    async def delete(self, allowance_id: int) -> None:
        await self.client.delete(f"/allowances/{allowance_id}")

    async def summary(self, **filters) -> Dict[str, Any]:
        page = await self.list(**filters)
        return summarize_allowances(page.data, total_items=page.total)


__all__ = [
    "build_adjustment_payload",
    "AdjustmentService",
    "AllowanceService",
]
