"""
HRIS Console - Services Package

Backend access and console-side business logic.
"""

from hris.services.api_client import BackendClient, Page
from hris.services.employee_service import EmployeeService
from hris.services.payroll_service import PayrollService
from hris.services.adjustment_service import AdjustmentService, AllowanceService
from hris.services.announcement_service import AnnouncementService
from hris.services.bulk_operations import WorkQueue, BulkAllocationService

# Calculators
from hris.services.calculators.period_service import PeriodCalculator, PayrollSettingService
from hris.services.calculators.overtime_service import OvertimeCalculator, OvertimeService
from hris.services.calculators.leave_service import LeaveProrationCalculator, LeaveService
from hris.services.calculators.loan_service import LoanCalculator
