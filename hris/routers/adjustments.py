"""
HRIS Console - Adjustments Router

Deduction-type payroll adjustments (loans, advances, penalties) and
allowance statistics.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from hris.dependencies import get_adjustment_service, get_allowance_service
from hris.schemas.adjustment import AdjustmentCreate, AdjustmentReject, BulkAdjustmentCreate
from hris.schemas.common import ActionResponse, BulkIdsRequest
from hris.services.adjustment_service import AdjustmentService, AllowanceService


router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a payroll adjustment",
    description=(
        "Loans and advances need `total_loan_amount` and `installment_amount`; "
        "the installment count and recurring end date are derived."
    ),
)
async def create_adjustment(
    data: AdjustmentCreate,
    service: AdjustmentService = Depends(get_adjustment_service),
):
    return await service.create(data.model_dump(exclude_none=True))


@router.post(
    "/bulk",
    status_code=status.HTTP_201_CREATED,
    summary="Create the same adjustment for several employees",
)
async def bulk_create_adjustments(
    data: BulkAdjustmentCreate,
    service: AdjustmentService = Depends(get_adjustment_service),
):
    return await service.bulk_create(data.model_dump(exclude_none=True))


@router.post("/bulk/approve", summary="Approve several adjustments")
async def bulk_approve_adjustments(
    data: BulkIdsRequest,
    service: AdjustmentService = Depends(get_adjustment_service),
):
    return await service.bulk_approve(data.ids)


@router.get(
    "/stats",
    summary="Deduction statistics",
    description="`total_items` is the backend total; counts and amount come from the fetched page.",
)
async def adjustment_stats(
    company_id: Optional[int] = Query(None),
    pay_period: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=1000),
    service: AdjustmentService = Depends(get_adjustment_service),
) -> Dict[str, Any]:
    return await service.summary(
        company_id=company_id,
        pay_period=pay_period,
        status=status_filter,
        page=page,
        limit=limit,
    )


@router.get("/allowances/stats", summary="Allowance statistics")
async def allowance_stats(
    company_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=1000),
    service: AllowanceService = Depends(get_allowance_service),
) -> Dict[str, Any]:
    return await service.summary(company_id=company_id, page=page, limit=limit)


@router.post("/{adjustment_id}/approve", response_model=ActionResponse, summary="Approve an adjustment")
async def approve_adjustment(
    adjustment_id: int,
    service: AdjustmentService = Depends(get_adjustment_service),
):
    result = await service.approve(adjustment_id)
    return ActionResponse(message="Adjustment approved", data=result)


@router.post("/{adjustment_id}/reject", response_model=ActionResponse, summary="Reject an adjustment")
async def reject_adjustment(
    adjustment_id: int,
    data: AdjustmentReject,
    service: AdjustmentService = Depends(get_adjustment_service),
):
    result = await service.reject(adjustment_id, data.rejection_reason)
    return ActionResponse(message="Adjustment rejected", data=result)
