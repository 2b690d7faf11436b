"""
HRIS Console - FastAPI Dependencies

Per-request backend client and the services built on it.

The caller's bearer token is forwarded to the backend as-is; the console
does no authentication of its own. Without a caller token the configured
service token is used.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from hris.config import settings
from hris.services.adjustment_service import AdjustmentService, AllowanceService
from hris.services.announcement_service import AnnouncementService
from hris.services.api_client import BackendClient
from hris.services.bulk_operations import BulkAllocationService, WorkQueue
from hris.services.calculators.leave_service import LeaveService
from hris.services.calculators.overtime_service import OvertimeService
from hris.services.calculators.period_service import PayrollSettingService
from hris.services.employee_service import EmployeeService
from hris.services.payroll_service import PayrollService


# HTTP Bearer token, forwarded to the backend
security = HTTPBearer(auto_error=False)


async def get_backend_client(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> BackendClient:
    """
    Backend client acting on behalf of the caller.

    Token can be provided via:
    1. Authorization: Bearer <token> header
    2. access_token cookie
    """
    token = None
    if credentials:
        token = credentials.credentials
    else:
        token = request.cookies.get("access_token")
        if token and token.startswith("Bearer "):
            token = token[7:]
    return BackendClient(token=token or settings.backend_api_token)


def get_work_queue() -> WorkQueue:
    return WorkQueue()


# ===========================================
# SERVICES
# ===========================================

def get_payroll_service(
    client: BackendClient = Depends(get_backend_client),
    queue: WorkQueue = Depends(get_work_queue),
) -> PayrollService:
    return PayrollService(client, queue)


def get_payroll_setting_service(client: BackendClient = Depends(get_backend_client)) -> PayrollSettingService:
    return PayrollSettingService(client)


def get_employee_service(client: BackendClient = Depends(get_backend_client)) -> EmployeeService:
    return EmployeeService(client)


def get_leave_service(client: BackendClient = Depends(get_backend_client)) -> LeaveService:
    return LeaveService(client)


def get_overtime_service(client: BackendClient = Depends(get_backend_client)) -> OvertimeService:
    return OvertimeService(client)


def get_adjustment_service(client: BackendClient = Depends(get_backend_client)) -> AdjustmentService:
    return AdjustmentService(client)


def get_allowance_service(client: BackendClient = Depends(get_backend_client)) -> AllowanceService:
    return AllowanceService(client)


def get_announcement_service(client: BackendClient = Depends(get_backend_client)) -> AnnouncementService:
    return AnnouncementService(client)


def get_bulk_allocation_service(
    leave_service: LeaveService = Depends(get_leave_service),
    employee_service: EmployeeService = Depends(get_employee_service),
    queue: WorkQueue = Depends(get_work_queue),
) -> BulkAllocationService:
    return BulkAllocationService(leave_service, employee_service, queue=queue)
