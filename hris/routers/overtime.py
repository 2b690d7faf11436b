"""
HRIS Console - Overtime Router

Overtime requests are validated here (hours, multiplier, reason) before
they reach the backend.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from hris.config import settings
from hris.dependencies import get_overtime_service
from hris.schemas.common import ActionResponse
from hris.schemas.overtime import OvertimeApprove, OvertimeCreate, OvertimeReject
from hris.services.calculators.overtime_service import OvertimeService
from hris.services.stats_service import summarize_overtime


router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create an overtime request",
    description="For the caller, or for another employee when `employee_id` is given.",
)
async def create_overtime(
    data: OvertimeCreate,
    service: OvertimeService = Depends(get_overtime_service),
):
    return await service.create(
        overtime_date=data.date,
        reason=data.reason,
        hours=data.hours,
        start_time=data.start_time,
        end_time=data.end_time,
        break_duration=data.break_duration,
        rate_multiplier=data.rate_multiplier,
        overtime_type=data.overtime_type,
        task_description=data.task_description,
        employee_id=data.employee_id,
    )


@router.get(
    "/stats",
    summary="Overtime statistics",
    description="Hours and amount are totals of approved requests only.",
)
async def overtime_stats(
    status_filter: Optional[str] = Query(None, alias="status"),
    company_id: Optional[int] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    service: OvertimeService = Depends(get_overtime_service),
) -> Dict[str, Any]:
    page = await service.list(
        status=status_filter,
        company_id=company_id,
        start_date=start_date,
        end_date=end_date,
        limit=settings.employee_fetch_limit,
    )
    return summarize_overtime(page.data)


@router.post("/{overtime_id}/approve", response_model=ActionResponse, summary="Approve an overtime request")
async def approve_overtime(
    overtime_id: int,
    data: Optional[OvertimeApprove] = None,
    service: OvertimeService = Depends(get_overtime_service),
):
    result = await service.approve(overtime_id, data.approval_notes if data else None)
    return ActionResponse(message="Overtime approved", data=result)


@router.post("/{overtime_id}/reject", response_model=ActionResponse, summary="Reject an overtime request")
async def reject_overtime(
    overtime_id: int,
    data: OvertimeReject,
    service: OvertimeService = Depends(get_overtime_service),
):
    result = await service.reject(overtime_id, data.rejection_reason)
    return ActionResponse(message="Overtime rejected", data=result)
