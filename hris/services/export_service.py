"""
HRIS Console - Export Service

CSV and JSON dumps of data already fetched from the backend.

Exports are one-way downloads: every CSV cell is quoted, there is no
escaping contract beyond the csv module's, and nothing here reads the
files back.
"""

import csv
import io
import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence

from fastapi.encoders import jsonable_encoder

from hris.schemas.leave import EmployeeEntitlement, LeaveType

PLACEHOLDER = "-"

PAYROLL_EXPORT_HEADERS = [
    "Payroll Number",
    "Employee ID",
    "Employee Name",
    "Department",
    "Period",
    "Status",
    "Basic Salary",
    "Gross Salary",
    "Total Deductions",
    "PPh21",
    "BPJS Employee",
    "BPJS Company",
    "Net Salary",
]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def to_csv(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    """Render rows as CSV with every cell quoted."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_cell(value) for value in row])
    return output.getvalue()


def to_json(records: Any, indent: int = 2) -> str:
    return json.dumps(jsonable_encoder(records), indent=indent, ensure_ascii=False)


def export_filename(prefix: str, extension: str, today: Optional[date] = None) -> str:
    """e.g. leave_entitlements_2025-03-01.csv"""
    return f"{prefix}_{(today or date.today()).isoformat()}.{extension}"


# ===========================================
# LEAVE ENTITLEMENTS
# ===========================================

def entitlement_headers(leave_types: Sequence[LeaveType]) -> List[str]:
    headers = ["Employee ID", "Employee Name", "Department", "Company"]
    for column in ("Allocated", "Used", "Pending", "Remaining"):
        headers.extend(f"{t.name} {column}" for t in leave_types)
    return headers


def entitlement_rows(
    entitlements: Iterable[EmployeeEntitlement],
    leave_types: Sequence[LeaveType],
) -> List[List[Any]]:
    rows = []
    for ent in entitlements:
        by_type = {b.leave_type_id: b for b in ent.balances}
        row: List[Any] = [
            ent.employee.employee_id or "",
            ent.employee.name or "",
            ent.employee.department_name or PLACEHOLDER,
            ent.employee.company_name or PLACEHOLDER,
        ]
        for attr in ("allocated_days", "used_days", "pending_days", "remaining_days"):
            for t in leave_types:
                balance = by_type.get(t.id)
                row.append(getattr(balance, attr) if balance is not None else 0)
        rows.append(row)
    return rows


def export_entitlements_csv(
    entitlements: Iterable[EmployeeEntitlement],
    leave_types: Sequence[LeaveType],
) -> str:
    return to_csv(entitlement_headers(leave_types), entitlement_rows(entitlements, leave_types))


# ===========================================
# PAYROLL
# ===========================================

def _get(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def payroll_rows(payrolls: Iterable[Any]) -> List[List[Any]]:
    rows = []
    for p in payrolls:
        employee = _get(p, "employee") or {}
        department = _get(employee, "department") or {}
        rows.append([
            _get(p, "payroll_number"),
            _get(employee, "employee_id"),
            _get(employee, "name"),
            _get(department, "name") or PLACEHOLDER,
            _get(p, "period"),
            _get(p, "status"),
            _get(p, "basic_salary"),
            _get(p, "gross_salary"),
            _get(p, "total_deductions"),
            _get(p, "pph21"),
            _get(p, "bpjs_employee_total"),
            _get(p, "bpjs_company_total"),
            _get(p, "net_salary"),
        ])
    return rows


def export_payroll_csv(payrolls: Iterable[Any]) -> str:
    return to_csv(PAYROLL_EXPORT_HEADERS, payroll_rows(payrolls))
