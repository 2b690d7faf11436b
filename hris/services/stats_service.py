"""
HRIS Console - Dashboard Statistics Service

Single-pass folds of fetched records into dashboard counters.

Rules shared by every summary:
- missing, blank, unparseable, NaN or infinite amounts count as 0
- percentages with a zero denominator are 0
- an empty list gives an all-zero summary

Records may be plain dicts (as returned by the backend) or pydantic models.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from hris.schemas.adjustment import AdjustmentStatus, AllowanceStatus, DEDUCTION_TYPES
from hris.schemas.leave import LeaveRequestStatus
from hris.schemas.overtime import OvertimeStatus
from hris.schemas.payroll import PayrollStatus, PayrollSummary
from hris.services.calculators.period_service import parse_date
from hris.utils.numbers import ZERO, safe_number

UNKNOWN_DEPARTMENT = "Unknown"
MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _get(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


def percentage(part: Any, total: Any, precision: int = 1) -> float:
    """part / total x 100 rounded half up, 0 when total is 0."""
    numerator = safe_number(part)
    denominator = safe_number(total)
    if denominator == 0:
        return 0.0
    exponent = Decimal(1).scaleb(-precision)
    return float((numerator / denominator * 100).quantize(exponent, rounding=ROUND_HALF_UP))


def average(total: Any, count: int, precision: int = 1) -> float:
    if not count:
        return 0.0
    exponent = Decimal(1).scaleb(-precision)
    return float((safe_number(total) / Decimal(count)).quantize(exponent, rounding=ROUND_HALF_UP))


def _status(record: Any) -> str:
    value = _get(record, "status", "")
    return getattr(value, "value", value) or ""


def _inclusive_days(record: Any) -> int:
    start, end = _get(record, "start_date"), _get(record, "end_date")
    if not start or not end:
        return int(safe_number(_get(record, "total_days")))
    try:
        days = (parse_date(end) - parse_date(start)).days + 1
    except ValueError:
        return 0
    return max(days, 0)


# ===========================================
# PAYROLL
# ===========================================

def summarize_payroll(payrolls: Iterable[Any]) -> PayrollSummary:
    """
    Counters and totals for a payroll list.

    pending  = draft + processing
    approved = submitted + approved
    """
    summary = PayrollSummary()
    for p in payrolls:
        summary.total_employees += 1
        summary.total_gross += safe_number(_get(p, "gross_salary"))
        summary.total_net += safe_number(_get(p, "net_salary"))
        summary.total_tax += safe_number(_get(p, "pph21"))
        summary.total_bpjs_employee += safe_number(_get(p, "bpjs_employee_total"))
        summary.total_bpjs_company += safe_number(_get(p, "bpjs_company_total"))

        status = _status(p)
        if status in (PayrollStatus.DRAFT.value, PayrollStatus.PROCESSING.value):
            summary.pending_count += 1
            if status == PayrollStatus.PROCESSING.value:
                summary.processing_count += 1
        elif status == PayrollStatus.VALIDATED.value:
            summary.validated_count += 1
        elif status in (PayrollStatus.SUBMITTED.value, PayrollStatus.APPROVED.value):
            summary.approved_count += 1
        elif status == PayrollStatus.PAID.value:
            summary.paid_count += 1
        elif status == PayrollStatus.REJECTED.value:
            summary.rejected_count += 1
    return summary


# ===========================================
# LEAVE
# ===========================================

def summarize_leave_requests(requests: Iterable[Any]) -> Dict[str, Any]:
    """
    Leave request counters.

    total_days counts inclusive calendar days of approved requests.
    approval_rate = approved / (approved + rejected) x 100.
    """
    total = pending = approved = rejected = cancelled = 0
    total_days = 0
    for r in requests:
        total += 1
        status = _status(r)
        if status == LeaveRequestStatus.PENDING.value:
            pending += 1
        elif status == LeaveRequestStatus.APPROVED.value:
            approved += 1
            total_days += _inclusive_days(r)
        elif status == LeaveRequestStatus.REJECTED.value:
            rejected += 1
        elif status == LeaveRequestStatus.CANCELLED.value:
            cancelled += 1

    return {
        "total": total,
        "pending": pending,
        "approved": approved,
        "rejected": rejected,
        "cancelled": cancelled,
        "total_days": total_days,
        "avg_days": average(total_days, approved),
        "approval_rate": percentage(approved, approved + rejected),
    }


def _start_date(record: Any) -> Optional[date]:
    start = _get(record, "start_date")
    if not start:
        return None
    try:
        return parse_date(start)
    except ValueError:
        return None


def filter_by_year(requests: Iterable[Any], year: Optional[int]) -> List[Any]:
    """Requests whose start date falls in `year`; all of them when `year` is None."""
    if year is None:
        return list(requests)
    return [r for r in requests if (_start_date(r) or date.min).year == year]


def summarize_leave_by_type(
    requests: Iterable[Any],
    leave_types: Iterable[Any],
    year: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Counters per leave type, busiest first, with each type's share of all requests."""
    requests = filter_by_year(requests, year)
    rows = []
    for leave_type in leave_types:
        type_id = _get(leave_type, "id")
        type_requests = [r for r in requests if _get(r, "leave_type_id") == type_id]
        summary = summarize_leave_requests(type_requests)
        rows.append({
            "leave_type_id": type_id,
            "type": _get(leave_type, "name"),
            "total": summary["total"],
            "approved": summary["approved"],
            "pending": summary["pending"],
            "rejected": summary["rejected"],
            "total_days": summary["total_days"],
            "percentage": percentage(summary["total"], len(requests)),
        })
    rows.sort(key=lambda row: row["total"], reverse=True)
    return rows


def summarize_leave_by_month(requests: Iterable[Any], year: Optional[int] = None) -> List[Dict[str, Any]]:
    """Twelve rows, January first, bucketed by the month of each request's start date."""
    rows = [
        {"month": month, "label": MONTH_LABELS[month - 1], "requests": 0, "approved": 0, "rejected": 0, "days": 0}
        for month in range(1, 13)
    ]
    for r in filter_by_year(requests, year):
        start = _start_date(r)
        if start is None:
            continue
        row = rows[start.month - 1]
        row["requests"] += 1
        status = _status(r)
        if status == LeaveRequestStatus.APPROVED.value:
            row["approved"] += 1
            row["days"] += _inclusive_days(r)
        elif status == LeaveRequestStatus.REJECTED.value:
            row["rejected"] += 1
    return rows


def _department_name(record: Any) -> str:
    department = _get(_get(record, "employee") or {}, "department")
    if isinstance(department, str):
        return department or UNKNOWN_DEPARTMENT
    return _get(department or {}, "name") or UNKNOWN_DEPARTMENT


def summarize_leave_by_department(
    requests: Iterable[Any],
    year: Optional[int] = None,
    limit: int = 10,
) -> List[Dict[str, Any]]:
    """Requests per employee department, busiest `limit` departments first."""
    departments: Dict[str, Dict[str, int]] = {}
    for r in filter_by_year(requests, year):
        stats = departments.setdefault(_department_name(r), {"total": 0, "approved": 0, "days": 0})
        stats["total"] += 1
        if _status(r) == LeaveRequestStatus.APPROVED.value:
            stats["approved"] += 1
            stats["days"] += _inclusive_days(r)

    rows = [
        {
            "name": name,
            "total": stats["total"],
            "approved": stats["approved"],
            "average_days": average(stats["days"], stats["approved"]),
        }
        for name, stats in departments.items()
    ]
    rows.sort(key=lambda row: row["total"], reverse=True)
    return rows[:limit]


def summarize_balances(balances: Iterable[Any]) -> Dict[str, Decimal]:
    totals = {"allocated": ZERO, "used": ZERO, "pending": ZERO, "remaining": ZERO}
    for b in balances:
        totals["allocated"] += safe_number(_get(b, "allocated_days"))
        totals["used"] += safe_number(_get(b, "used_days"))
        totals["pending"] += safe_number(_get(b, "pending_days"))
        totals["remaining"] += safe_number(_get(b, "remaining_days"))
    return totals


# ===========================================
# OVERTIME
# ===========================================

def summarize_overtime(records: Iterable[Any]) -> Dict[str, Any]:
    """Overtime counters; hours and amount are summed over approved records only."""
    total = pending = approved = rejected = cancelled = 0
    total_hours = ZERO
    total_amount = ZERO
    for r in records:
        total += 1
        status = _status(r)
        if status == OvertimeStatus.PENDING.value:
            pending += 1
        elif status == OvertimeStatus.APPROVED.value:
            approved += 1
            total_hours += safe_number(_get(r, "hours"))
            total_amount += safe_number(_get(r, "total_amount"))
        elif status == OvertimeStatus.REJECTED.value:
            rejected += 1
        elif status == OvertimeStatus.CANCELLED.value:
            cancelled += 1
    return {
        "total": total,
        "pending": pending,
        "approved": approved,
        "rejected": rejected,
        "cancelled": cancelled,
        "total_hours": total_hours,
        "total_amount": total_amount,
    }


# ===========================================
# ADJUSTMENTS
# ===========================================

def summarize_deductions(adjustments: Iterable[Any], total_items: Optional[int] = None) -> Dict[str, Any]:
    """
    Deduction counters.

    `total_items` is the backend's total across all pages; the page in hand
    supplies the status counts and the approved amount.
    """
    deduction_values = {t.value for t in DEDUCTION_TYPES}
    seen = pending = approved = 0
    total_amount = ZERO
    for a in adjustments:
        adjustment_type = getattr(_get(a, "type"), "value", _get(a, "type"))
        if adjustment_type and adjustment_type not in deduction_values:
            continue
        seen += 1
        status = _status(a)
        if status == AdjustmentStatus.PENDING.value:
            pending += 1
        elif status == AdjustmentStatus.APPROVED.value:
            approved += 1
            total_amount += safe_number(_get(a, "amount"))
    return {
        "total_items": total_items if total_items is not None else seen,
        "pending_count": pending,
        "approved_count": approved,
        "total_amount": total_amount,
    }


def summarize_allowances(allowances: Iterable[Any], total_items: Optional[int] = None) -> Dict[str, Any]:
    """Active allowance counters; taxable_amount covers active taxable allowances."""
    seen = active = 0
    total_amount = ZERO
    taxable_amount = ZERO
    for a in allowances:
        seen += 1
        if _status(a) != AllowanceStatus.ACTIVE.value:
            continue
        active += 1
        amount = safe_number(_get(a, "amount"))
        total_amount += amount
        if _get(a, "is_taxable"):
            taxable_amount += amount
    return {
        "total_items": total_items if total_items is not None else seen,
        "active_count": active,
        "total_amount": total_amount,
        "taxable_amount": taxable_amount,
    }


__all__ = [
    "safe_number",
    "percentage",
    "average",
    "summarize_payroll",
    "summarize_leave_requests",
    "filter_by_year",
    "summarize_leave_by_type",
    "summarize_leave_by_month",
    "summarize_leave_by_department",
    "summarize_balances",
    "summarize_overtime",
    "summarize_deductions",
    "summarize_allowances",
]
