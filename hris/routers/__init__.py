"""
HRIS Console - Routers Package

FastAPI route handlers.

Routers:
- calculators: Pure calculation previews (period, overtime, leave, loans)
- payroll: Payroll dashboard, period lookup, approval workflow, export
- leave: Leave requests, entitlements, bulk allocation
- overtime: Overtime requests and statistics
- adjustments: Payroll adjustments and allowance statistics
- announcements: Active announcements
"""

from hris.routers import (
    calculators,
    payroll,
    leave,
    overtime,
    adjustments,
    announcements,
)

__all__ = [
    "calculators",
    "payroll",
    "leave",
    "overtime",
    "adjustments",
    "announcements",
]
