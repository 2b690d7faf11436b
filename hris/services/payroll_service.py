"""
HRIS Console - Payroll Service

Payroll listing, generation and approval workflow against the backend.

PPh21, BPJS and net pay are calculated by the backend. This service
validates requests locally (period format, workflow state) before anything
is sent, so a request that cannot succeed never leaves the console.
"""

import logging
from typing import Any, Dict, List, Optional

from hris.schemas.common import BulkActionResult
from hris.schemas.payroll import PayrollStatus, PayrollSummary
from hris.services.api_client import BackendClient, Page
from hris.services.bulk_operations import WorkQueue
from hris.services.calculators.period_service import PeriodCalculator
from hris.services.stats_service import summarize_payroll
from hris.services.workflow import PAYROLL_WORKFLOW, WorkflowAction
from hris.utils.error_handling import ValidationException

logger = logging.getLogger(__name__)


# Backend endpoint suffix for each workflow action
ACTION_ENDPOINTS: Dict[WorkflowAction, str] = {
    WorkflowAction.VALIDATE: "validate",
    WorkflowAction.SUBMIT: "submit",
    WorkflowAction.APPROVE: "approve",
    WorkflowAction.REJECT: "reject",
    WorkflowAction.MARK_PAID: "paid",
}


class PayrollService:
    """Payroll records (`/payroll`)."""

    def __init__(self, client: BackendClient, queue: Optional[WorkQueue] = None):
        self.client = client
        self.queue = queue or WorkQueue()

    # ===========================================
    # READ
    # ===========================================

    async def list(self, **filters) -> Page:
        if filters.get("period"):
            PeriodCalculator.parse_period_key(filters["period"])
        return await self.client.get_page("/payroll", params=filters)

    async def get(self, payroll_id: int) -> Dict[str, Any]:
        return await self.client.get(f"/payroll/{payroll_id}")

    async def list_mine(self, **filters) -> Page:
        return await self.client.get_page("/payroll/me", params=filters)

    async def get_my_payslip(self, payroll_id: int) -> Dict[str, Any]:
        return await self.client.get(f"/payroll/me/{payroll_id}")

    async def summary(self, **filters) -> PayrollSummary:
        """Dashboard summary over the payroll list matching `filters`."""
        page = await self.list(**filters)
        return summarize_payroll(page.data)

    # ===========================================
    # GENERATE / CALCULATE / UPDATE
    # ===========================================

    async def generate(
        self,
        company_id: int,
        period: str,
        employee_ids: Optional[List[int]] = None,
    ) -> Dict[str, Any]:
        """
        Generate draft payrolls for a company period.

        The backend answers without the usual `data` envelope.
        """
        year, month = PeriodCalculator.parse_period_key(period)
        payload: Dict[str, Any] = {"company_id": company_id, "period": f"{year:04d}-{month:02d}"}
        if employee_ids:
            payload["employee_ids"] = employee_ids
        response = await self.client.request("POST", "/payroll/generate", json=payload)
        body = response.json() if response.content else {}
        logger.info(
            f"Generated payroll for company {company_id} {period}: "
            f"{body.get('generated', 0)} generated, {body.get('errors', 0)} errors"
        )
        return {
            "generated": body.get("generated", 0),
            "errors": body.get("errors", 0),
            "results": body.get("results", []),
            "error_details": body.get("errorDetails", body.get("error_details", [])),
        }

    async def calculate(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Preview a payroll calculation without saving it."""
        PeriodCalculator.parse_period_key(data.get("period"))
        return await self.client.post("/payroll/calculate", json=data)

    async def update(self, payroll_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        record = await self.get(payroll_id)
        status = (record or {}).get("status")
        if status not in (PayrollStatus.DRAFT.value, PayrollStatus.PROCESSING.value):
            raise ValidationException(
                f"Only draft payrolls can be edited (current status: {status})",
                field="status",
            )
        return await self.client.put(f"/payroll/{payroll_id}", json=data)

    # ===========================================
    # WORKFLOW
    # ===========================================

    async def transition(
        self,
        payroll_id: int,
        action: WorkflowAction,
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Check the payroll's current status allows `action`, then forward it."""
        record = await self.get(payroll_id)
        target = PAYROLL_WORKFLOW.next_state((record or {}).get("status"), action)
        result = await self.client.post(f"/payroll/{payroll_id}/{ACTION_ENDPOINTS[action]}", json=body or {})
        logger.info(f"Payroll {payroll_id}: {action.value} -> {target.value}")
        return result

    async def validate(self, payroll_id: int) -> Dict[str, Any]:
        return await self.transition(payroll_id, WorkflowAction.VALIDATE)

    async def submit(self, payroll_id: int) -> Dict[str, Any]:
        return await self.transition(payroll_id, WorkflowAction.SUBMIT)

    async def approve(self, payroll_id: int, approval_notes: Optional[str] = None) -> Dict[str, Any]:
        body = {"approval_notes": approval_notes} if approval_notes else {}
        return await self.transition(payroll_id, WorkflowAction.APPROVE, body)

    async def reject(self, payroll_id: int, rejection_reason: str) -> Dict[str, Any]:
        if not rejection_reason or not rejection_reason.strip():
            raise ValidationException("Rejection reason is required", field="rejection_reason")
        return await self.transition(
            payroll_id, WorkflowAction.REJECT, {"rejection_reason": rejection_reason.strip()}
        )

    async def mark_paid(
        self,
        payroll_id: int,
        payment_reference: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> Dict[str, Any]:
        body = {k: v for k, v in {
            "payment_reference": payment_reference,
            "payment_method": payment_method,
        }.items() if v}
        return await self.transition(payroll_id, WorkflowAction.MARK_PAID, body)

    # ===========================================
    # BATCH
    # ===========================================

    async def _per_record(self, ids: List[int], action: WorkflowAction, body: Optional[Dict[str, Any]] = None) -> BulkActionResult:
        outcome = await self.queue.run(
            [lambda pid=pid: self.transition(pid, action, body) for pid in ids],
            describe=lambda i: f"payroll {ids[i]}",
        )
        return BulkActionResult(
            total=outcome.total,
            success=outcome.success,
            failed=outcome.failed,
            errors=outcome.errors,
        )

    async def validate_batch(self, ids: List[int]) -> BulkActionResult:
        return await self._per_record(ids, WorkflowAction.VALIDATE)

    async def mark_paid_batch(self, ids: List[int], payment_reference: Optional[str] = None) -> BulkActionResult:
        body = {"payment_reference": payment_reference} if payment_reference else None
        return await self._per_record(ids, WorkflowAction.MARK_PAID, body)

    async def _bulk_endpoint(self, endpoint: str, body: Dict[str, Any]) -> BulkActionResult:
        data = await self.client.post(endpoint, json=body) or {}
        return BulkActionResult(
            total=len(body["ids"]),
            success=data.get("success", 0),
            failed=data.get("failed", 0),
            errors=data.get("errors") or [],
        )

    async def submit_batch(self, ids: List[int]) -> BulkActionResult:
        return await self._bulk_endpoint("/payroll/bulk/submit", {"ids": ids})

    async def approve_batch(self, ids: List[int], approval_notes: Optional[str] = None) -> BulkActionResult:
        return await self._bulk_endpoint("/payroll/bulk/approve", {"ids": ids, "approval_notes": approval_notes})

    async def reject_batch(self, ids: List[int], rejection_reason: str) -> BulkActionResult:
        if not rejection_reason or not rejection_reason.strip():
            raise ValidationException("Rejection reason is required", field="rejection_reason")
        return await self._bulk_endpoint(
            "/payroll/bulk/reject", {"ids": ids, "rejection_reason": rejection_reason.strip()}
        )

    # ===========================================
    # EXPORT
    # ===========================================

    async def export_excel(self, period: str, company_id: Optional[int] = None) -> bytes:
        """Backend-rendered Excel workbook for a period."""
        PeriodCalculator.parse_period_key(period)
        response = await self.client.request(
            "GET", "/payroll/export", params={"period": period, "company_id": company_id}
        )
        return response.content

    @staticmethod
    def export_filename(period: str, company_id: Optional[int] = None) -> str:
        if company_id:
            return f"Payroll_{period}_Company{company_id}.xlsx"
        return f"Payroll_{period}_AllCompanies.xlsx"
