"""
HRIS Console - Payroll Router

Payroll dashboard, period lookup and approval workflow.

Workflow actions are checked against the payroll state machine before
they are forwarded, so an impossible transition is answered locally with
422 INVALID_STATUS_TRANSITION.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import StreamingResponse

from hris.config import settings
from hris.dependencies import get_payroll_service, get_payroll_setting_service
from hris.schemas.common import ActionResponse, BulkActionResult, BulkIdsRequest
from hris.schemas.payroll import (
    CalculatePayrollRequest,
    GeneratePayrollRequest,
    PayrollApprove,
    PayrollBulkApprove,
    PayrollBulkReject,
    PayrollMarkPaid,
    PayrollReject,
    PayrollSummary,
)
from hris.services.calculators.period_service import PayrollSettingService
from hris.services.export_service import export_filename, export_payroll_csv
from hris.services.payroll_service import PayrollService


router = APIRouter()


# ===========================================
# DASHBOARD
# ===========================================

@router.get(
    "/summary",
    response_model=PayrollSummary,
    summary="Payroll dashboard summary",
)
async def payroll_summary(
    period: Optional[str] = Query(None, description="YYYY-MM"),
    company_id: Optional[int] = Query(None),
    service: PayrollService = Depends(get_payroll_service),
):
    return await service.summary(period=period, company_id=company_id, limit=settings.employee_fetch_limit)


@router.get(
    "/period",
    summary="Pay period of a company",
    description="Resolves the period using the company's cutoff day (default 20 when unset).",
)
async def company_period(
    company_id: int = Query(...),
    period: str = Query(..., description="YYYY-MM"),
    service: PayrollSettingService = Depends(get_payroll_setting_service),
) -> Dict[str, Any]:
    resolved = await service.resolve_company_period(company_id, period)
    return resolved.to_dict()


# ===========================================
# GENERATE / CALCULATE
# ===========================================

@router.post(
    "/generate",
    status_code=status.HTTP_201_CREATED,
    summary="Generate draft payrolls for a company period",
)
async def generate_payroll(
    data: GeneratePayrollRequest,
    service: PayrollService = Depends(get_payroll_service),
) -> Dict[str, Any]:
    return await service.generate(data.company_id, data.period, data.employee_ids)


@router.post(
    "/calculate",
    summary="Preview a payroll calculation",
)
async def calculate_payroll(
    data: CalculatePayrollRequest,
    service: PayrollService = Depends(get_payroll_service),
):
    return await service.calculate(data.model_dump(exclude_none=True))


# ===========================================
# EXPORT
# ===========================================

@router.get(
    "/export",
    summary="Export payrolls for a period",
    description="`csv` is rendered here from the payroll list; `xlsx` is rendered by the backend.",
)
async def export_payroll(
    period: str = Query(..., description="YYYY-MM"),
    company_id: Optional[int] = Query(None),
    format: str = Query("csv", pattern="^(csv|xlsx)$"),
    service: PayrollService = Depends(get_payroll_service),
):
    if format == "xlsx":
        content = await service.export_excel(period, company_id)
        return Response(
            content=content,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={
                "Content-Disposition": f"attachment; filename={service.export_filename(period, company_id)}"
            },
        )

    page = await service.list(period=period, company_id=company_id, limit=settings.employee_fetch_limit)
    return StreamingResponse(
        iter([export_payroll_csv(page.data)]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={export_filename(f'payroll_{period}', 'csv')}"
        },
    )


# ===========================================
# BULK ACTIONS
# ===========================================

@router.post("/bulk/validate", response_model=BulkActionResult, summary="Validate several payrolls")
async def bulk_validate(data: BulkIdsRequest, service: PayrollService = Depends(get_payroll_service)):
    return await service.validate_batch(data.ids)


@router.post("/bulk/submit", response_model=BulkActionResult, summary="Submit several payrolls")
async def bulk_submit(data: BulkIdsRequest, service: PayrollService = Depends(get_payroll_service)):
    return await service.submit_batch(data.ids)


@router.post("/bulk/approve", response_model=BulkActionResult, summary="Approve several payrolls")
async def bulk_approve(data: PayrollBulkApprove, service: PayrollService = Depends(get_payroll_service)):
    return await service.approve_batch(data.ids, data.approval_notes)


@router.post("/bulk/reject", response_model=BulkActionResult, summary="Reject several payrolls")
async def bulk_reject(data: PayrollBulkReject, service: PayrollService = Depends(get_payroll_service)):
    return await service.reject_batch(data.ids, data.rejection_reason)


@router.post("/bulk/paid", response_model=BulkActionResult, summary="Mark several payrolls as paid")
async def bulk_mark_paid(data: BulkIdsRequest, service: PayrollService = Depends(get_payroll_service)):
    return await service.mark_paid_batch(data.ids)


# ===========================================
# WORKFLOW
# ===========================================

@router.post("/{payroll_id}/validate", response_model=ActionResponse, summary="Validate a draft payroll")
async def validate_payroll(payroll_id: int, service: PayrollService = Depends(get_payroll_service)):
    result = await service.validate(payroll_id)
    return ActionResponse(message="Payroll validated", data=result)


@router.post("/{payroll_id}/submit", response_model=ActionResponse, summary="Submit a payroll for approval")
async def submit_payroll(payroll_id: int, service: PayrollService = Depends(get_payroll_service)):
    result = await service.submit(payroll_id)
    return ActionResponse(message="Payroll submitted for approval", data=result)


@router.post("/{payroll_id}/approve", response_model=ActionResponse, summary="Approve a payroll")
async def approve_payroll(
    payroll_id: int,
    data: Optional[PayrollApprove] = None,
    service: PayrollService = Depends(get_payroll_service),
):
    result = await service.approve(payroll_id, data.approval_notes if data else None)
    return ActionResponse(message="Payroll approved", data=result)


@router.post("/{payroll_id}/reject", response_model=ActionResponse, summary="Reject a payroll")
async def reject_payroll(
    payroll_id: int,
    data: PayrollReject,
    service: PayrollService = Depends(get_payroll_service),
):
    result = await service.reject(payroll_id, data.rejection_reason)
    return ActionResponse(message="Payroll rejected", data=result)


@router.post("/{payroll_id}/paid", response_model=ActionResponse, summary="Mark a payroll as paid")
async def mark_payroll_paid(
    payroll_id: int,
    data: Optional[PayrollMarkPaid] = None,
    service: PayrollService = Depends(get_payroll_service),
):
    result = await service.mark_paid(
        payroll_id,
        payment_reference=data.payment_reference if data else None,
        payment_method=data.payment_method if data else None,
    )
    return ActionResponse(message="Payroll marked as paid", data=result)
