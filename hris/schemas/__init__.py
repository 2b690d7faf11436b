"""
HRIS Console - Schemas Package

Pydantic schemas for backend records and request/response validation.
"""

from hris.schemas.common import (
    BackendRecord,
    NamedRef,
    PaginationMeta,
    PaginatedResponse,
    ActionResponse,
    BulkIdsRequest,
    BulkActionResult,
)
from hris.schemas.employee import Employee
from hris.schemas.payroll import (
    PayrollStatus,
    PayType,
    PayrollRecord,
    GeneratePayrollRequest,
    CalculatePayrollRequest,
    PayrollApprove,
    PayrollReject,
    PayrollMarkPaid,
    PayrollBulkApprove,
    PayrollBulkReject,
    PayrollSummary,
)
from hris.schemas.overtime import (
    OvertimeStatus,
    OvertimeType,
    OvertimeRecord,
    OvertimeCalculationRequest,
    OvertimeCalculationResponse,
    OvertimeHoursRequest,
    OvertimeCreate,
    OvertimeApprove,
    OvertimeReject,
)
from hris.schemas.leave import (
    LeaveRequestStatus,
    LeaveType,
    LeaveBalance,
    LeaveRequestRecord,
    EmployeeEntitlement,
    LeaveRequestCreate,
    LeaveApprove,
    LeaveReject,
    LeaveAllocationRequest,
    LeaveAdjustmentRequest,
    ProrationRequest,
    ProrationResponse,
    BulkAllocationRequest,
    AllocationPreviewRow,
    BulkAllocationResult,
)
from hris.schemas.adjustment import (
    AdjustmentType,
    AdjustmentStatus,
    AllowanceStatus,
    DEDUCTION_TYPES,
    LOAN_TYPES,
    ADJUSTMENT_TYPE_LABELS,
    AdjustmentRecord,
    AllowanceRecord,
    AdjustmentCreate,
    AdjustmentReject,
    BulkAdjustmentCreate,
    LoanScheduleRequest,
    LoanScheduleResponse,
)
from hris.schemas.announcement import (
    AnnouncementCategory,
    AnnouncementPriority,
    AnnouncementVisibility,
    Announcement,
    AnnouncementCreate,
    AnnouncementUpdate,
)
