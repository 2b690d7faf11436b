"""
HRIS Console - Leave Router

Leave requests, balances, entitlement export and the bulk allocation job.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse

from hris.config import settings
from hris.dependencies import get_bulk_allocation_service, get_employee_service, get_leave_service
from hris.schemas.common import ActionResponse
from hris.schemas.leave import (
    AllocationPreviewRow,
    BulkAllocationRequest,
    BulkAllocationResult,
    EmployeeEntitlement,
    LeaveAdjustmentRequest,
    LeaveAllocationRequest,
    LeaveApprove,
    LeaveReject,
    LeaveRequestCreate,
)
from hris.services.bulk_operations import BulkAllocationService
from hris.services.calculators.leave_service import LeaveService, build_entitlements
from hris.services.employee_service import EmployeeService
from hris.services.export_service import export_entitlements_csv, export_filename
from hris.services.stats_service import (
    filter_by_year,
    summarize_leave_by_department,
    summarize_leave_by_month,
    summarize_leave_by_type,
    summarize_leave_requests,
)


router = APIRouter()


async def _entitlements(
    year: int,
    company_id: Optional[int],
    leave_service: LeaveService,
    employee_service: EmployeeService,
):
    employees = await employee_service.list_all(company_id=company_id)
    leave_types = await leave_service.get_types()
    balances = await leave_service.list_balances(year=year, company_id=company_id)
    return build_entitlements(employees, leave_types, balances, year), leave_types


# ===========================================
# REQUESTS
# ===========================================

@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Submit a leave request",
)
async def create_leave_request(
    data: LeaveRequestCreate,
    service: LeaveService = Depends(get_leave_service),
):
    return await service.create(data.model_dump())


@router.get(
    "/stats",
    summary="Leave request statistics",
    description=(
        "Counters overall, per leave type, per start month and per department. "
        "Approval rate is approved / (approved + rejected). "
        "`year` keeps only requests starting in that year."
    ),
)
async def leave_stats(
    status_filter: Optional[str] = Query(None, alias="status"),
    company_id: Optional[int] = Query(None),
    year: Optional[int] = Query(None, ge=1900, le=2100),
    service: LeaveService = Depends(get_leave_service),
) -> Dict[str, Any]:
    page = await service.list(status=status_filter, company_id=company_id, limit=settings.employee_fetch_limit)
    leave_types = await service.get_types()
    requests = filter_by_year(page.data, year)
    return {
        "year": year,
        "summary": summarize_leave_requests(requests),
        "by_type": summarize_leave_by_type(requests, leave_types),
        "by_month": summarize_leave_by_month(requests),
        "by_department": summarize_leave_by_department(requests),
    }


# ===========================================
# BALANCES / ENTITLEMENTS
# ===========================================

@router.post("/balances/allocate", summary="Allocate a leave balance")
async def allocate_balance(
    data: LeaveAllocationRequest,
    service: LeaveService = Depends(get_leave_service),
):
    return await service.allocate(**data.model_dump())


@router.post("/balances/adjust", summary="Adjust a leave balance")
async def adjust_balance(
    data: LeaveAdjustmentRequest,
    service: LeaveService = Depends(get_leave_service),
):
    return await service.adjust(**data.model_dump())


@router.get(
    "/entitlements",
    response_model=List[EmployeeEntitlement],
    summary="Leave entitlements of every employee",
)
async def list_entitlements(
    year: int = Query(..., ge=1900, le=9999),
    company_id: Optional[int] = Query(None),
    leave_service: LeaveService = Depends(get_leave_service),
    employee_service: EmployeeService = Depends(get_employee_service),
):
    entitlements, _ = await _entitlements(year, company_id, leave_service, employee_service)
    return entitlements


@router.get(
    "/entitlements/export",
    summary="Export leave entitlements as CSV",
)
async def export_entitlements(
    year: int = Query(..., ge=1900, le=9999),
    company_id: Optional[int] = Query(None),
    leave_service: LeaveService = Depends(get_leave_service),
    employee_service: EmployeeService = Depends(get_employee_service),
):
    entitlements, leave_types = await _entitlements(year, company_id, leave_service, employee_service)
    return StreamingResponse(
        iter([export_entitlements_csv(entitlements, leave_types)]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={export_filename('leave_entitlements', 'csv')}"
        },
    )


# ===========================================
# BULK ALLOCATION
# ===========================================

@router.get(
    "/allocation/preview",
    response_model=List[AllocationPreviewRow],
    summary="Preview prorated allocations for a year",
)
async def allocation_preview(
    year: int = Query(..., ge=1900, le=9999),
    company_id: Optional[int] = Query(None),
    today: Optional[date] = Query(None, description="Evaluation date, defaults to the current date"),
    service: BulkAllocationService = Depends(get_bulk_allocation_service),
):
    return await service.build_preview(year, today or date.today(), company_id)


@router.post(
    "/allocation/bulk",
    response_model=BulkAllocationResult,
    summary="Allocate prorated leave to every employee",
    description="One backend call per employee and leave type. Failures are counted, not retried.",
)
async def bulk_allocate(
    data: BulkAllocationRequest,
    service: BulkAllocationService = Depends(get_bulk_allocation_service),
):
    return await service.allocate(data.year, data.today or date.today(), data.company_id)


# ===========================================
# WORKFLOW
# ===========================================

@router.post("/{leave_id}/approve", response_model=ActionResponse, summary="Approve a leave request")
async def approve_leave(
    leave_id: int,
    data: Optional[LeaveApprove] = None,
    service: LeaveService = Depends(get_leave_service),
):
    result = await service.approve(leave_id, data.comment if data else None)
    return ActionResponse(message="Leave request approved", data=result)


@router.post("/{leave_id}/reject", response_model=ActionResponse, summary="Reject a leave request")
async def reject_leave(
    leave_id: int,
    data: LeaveReject,
    service: LeaveService = Depends(get_leave_service),
):
    result = await service.reject(leave_id, data.reason)
    return ActionResponse(message="Leave request rejected", data=result)


@router.post("/{leave_id}/cancel", response_model=ActionResponse, summary="Cancel a leave request")
async def cancel_leave(leave_id: int, service: LeaveService = Depends(get_leave_service)):
    result = await service.cancel(leave_id)
    return ActionResponse(message="Leave request cancelled", data=result)
