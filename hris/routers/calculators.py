"""
HRIS Console - Calculators Router

Pure calculation previews. Nothing here calls the backend.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from hris.schemas.adjustment import LoanScheduleRequest, LoanScheduleResponse
from hris.schemas.leave import ProrationRequest, ProrationResponse
from hris.schemas.overtime import (
    OvertimeCalculationRequest,
    OvertimeCalculationResponse,
    OvertimeHoursRequest,
)
from hris.services.calculators.leave_service import LeaveProrationCalculator
from hris.services.calculators.loan_service import LoanCalculator
from hris.services.calculators.overtime_service import OvertimeCalculator
from hris.services.calculators.period_service import Holiday, PeriodCalculator
from hris.services.workflow import get_workflow
from hris.utils.error_handling import NotFoundException


router = APIRouter()


class HolidayInput(BaseModel):
    date: date
    name: str = ""
    is_active: bool = True


class WorkingDaysRequest(BaseModel):
    period: str = Field(..., description="Pay period key, YYYY-MM")
    cutoff_day: int
    holidays: List[HolidayInput] = Field(default_factory=list)


# ===========================================
# PAY PERIOD
# ===========================================

@router.get(
    "/period",
    summary="Resolve a pay period",
    description="Inclusive start and end dates of the pay period closing in the given month.",
)
async def resolve_period(
    period: str = Query(..., description="YYYY-MM"),
    cutoff_day: int = Query(..., description="Payroll cutoff day (1-31)"),
) -> Dict[str, Any]:
    return PeriodCalculator.resolve(period, cutoff_day).to_dict()


@router.post(
    "/working-days",
    summary="Count working days in a pay period",
)
async def working_days(data: WorkingDaysRequest) -> Dict[str, Any]:
    period = PeriodCalculator.resolve(data.period, data.cutoff_day)
    holidays = [Holiday(date=h.date, name=h.name, is_active=h.is_active) for h in data.holidays]
    summary = PeriodCalculator.count_working_days(period.start, period.end, holidays)
    return {"period": period.to_dict(), **summary.to_dict()}


# ===========================================
# OVERTIME
# ===========================================

@router.post(
    "/overtime",
    response_model=OvertimeCalculationResponse,
    summary="Preview an overtime amount",
    description="hourly rate = floor(basic salary / 173); amount = rate x hours x multiplier.",
)
async def overtime_amount(data: OvertimeCalculationRequest):
    return OvertimeCalculator.calculate(data.basic_salary, data.hours, data.rate_multiplier)


@router.post(
    "/overtime/hours",
    summary="Hours between two HH:MM times",
)
async def overtime_hours(data: OvertimeHoursRequest) -> Dict[str, Any]:
    hours = OvertimeCalculator.calculate_hours(data.start_time, data.end_time, data.break_minutes)
    return {"hours": hours}


# ===========================================
# LEAVE
# ===========================================

@router.post(
    "/leave/proration",
    response_model=ProrationResponse,
    summary="Preview a prorated leave entitlement",
)
async def leave_proration(data: ProrationRequest):
    result = LeaveProrationCalculator().calculate(
        data.join_date,
        data.default_days,
        data.leave_type_code,
        data.target_year,
        data.today or date.today(),
    )
    return ProrationResponse(
        leave_type_code=data.leave_type_code,
        target_year=data.target_year,
        default_days=data.default_days,
        prorated_days=result.days,
        probation_end=result.probation_end,
        policy=result.policy.strategy.value,
    )


# ===========================================
# LOANS
# ===========================================

@router.post(
    "/loan-schedule",
    response_model=LoanScheduleResponse,
    summary="Preview a loan installment schedule",
)
async def loan_schedule(data: LoanScheduleRequest):
    return LoanCalculator.schedule(data.total_loan_amount, data.installment_amount, data.effective_date)


# ===========================================
# WORKFLOWS
# ===========================================

@router.get(
    "/workflows/{workflow}",
    summary="Status labels and allowed actions of a workflow",
)
async def workflow_info(
    workflow: str,
    status: Optional[str] = Query(None, description="Current status; limits the actions listed"),
) -> Dict[str, Any]:
    try:
        machine = get_workflow(workflow)
    except ValueError:
        raise NotFoundException("Workflow", workflow)

    statuses = [status] if status else [s.value for s in machine.status_enum]
    return {
        "workflow": workflow,
        "labels": {s.value: machine.label(s) for s in machine.status_enum},
        "terminal": sorted(s.value for s in machine.terminal_states),
        "actions": {
            s: [a.value for a in machine.available_actions(s)] for s in statuses
        },
    }
