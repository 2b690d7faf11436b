"""
HRIS Console - API Tests

End-to-end tests of the HTTP surface, with the HRIS backend mocked.
"""

from datetime import date
from decimal import Decimal

import httpx
import pytest
import respx

from hris.config import settings


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "backend": settings.backend_api_url}


class TestCalculatorEndpoints:
    """Calculation previews never touch the backend."""

    @pytest.mark.asyncio
    async def test_resolve_period(self, client):
        response = await client.get("/api/v1/calculators/period", params={"period": "2025-03", "cutoff_day": 20})

        assert response.status_code == 200
        assert response.json() == {
            "period": "2025-03",
            "start_date": "2025-02-21",
            "end_date": "2025-03-20",
            "cutoff_day": 20,
            "total_days": 28,
        }

    @pytest.mark.asyncio
    async def test_invalid_period_error_envelope(self, client):
        response = await client.get("/api/v1/calculators/period", params={"period": "2025-13", "cutoff_day": 20})

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INVALID_PERIOD"
        assert body["error"]["field"] == "period"
        assert body["error"]["timestamp"].endswith("Z")

    @pytest.mark.asyncio
    async def test_invalid_cutoff_day(self, client):
        response = await client.get("/api/v1/calculators/period", params={"period": "2025-03", "cutoff_day": 32})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_CUTOFF_DAY"

    @pytest.mark.asyncio
    async def test_working_days(self, client):
        response = await client.post("/api/v1/calculators/working-days", json={
            "period": "2025-03",
            "cutoff_day": 20,
            "holidays": [
                {"date": "2025-03-03", "name": "Company Day"},
                {"date": "2025-03-10", "name": "Cancelled", "is_active": False},
            ],
        })

        body = response.json()
        assert response.status_code == 200
        assert body["period"]["start_date"] == "2025-02-21"
        assert body["total_days"] == 28
        assert body["working_days"] == 20
        assert body["holiday_count"] == 1
        assert body["actual_working_days"] == 19

    @pytest.mark.asyncio
    async def test_overtime_amount(self, client):
        response = await client.post("/api/v1/calculators/overtime", json={
            "basic_salary": 1730000,
            "hours": 2,
            "rate_multiplier": 1.5,
        })

        assert response.status_code == 200
        body = response.json()
        assert Decimal(str(body["hourly_rate"])) == 10000
        assert Decimal(str(body["total_amount"])) == 30000

    @pytest.mark.asyncio
    async def test_overtime_hours_out_of_range(self, client):
        response = await client.post("/api/v1/calculators/overtime", json={
            "basic_salary": 1730000,
            "hours": 0,
            "rate_multiplier": 1.5,
        })

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_OVERTIME_HOURS"

    @pytest.mark.asyncio
    async def test_request_validation_envelope(self, client):
        response = await client.post("/api/v1/calculators/overtime", json={"hours": 2})

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert any(e["field"].endswith("basic_salary") for e in error["details"]["errors"])

    @pytest.mark.asyncio
    async def test_overtime_hours(self, client):
        response = await client.post("/api/v1/calculators/overtime/hours", json={
            "start_time": "17:00",
            "end_time": "20:00",
        })

        assert Decimal(str(response.json()["hours"])) == 3

    @pytest.mark.asyncio
    async def test_leave_proration(self, client):
        response = await client.post("/api/v1/calculators/leave/proration", json={
            "join_date": "2024-01-15",
            "default_days": 12,
            "leave_type_code": "AL",
            "target_year": 2024,
            "today": "2024-12-31",
        })

        assert response.status_code == 200
        body = response.json()
        assert body["prorated_days"] == 9
        assert body["probation_end"] == "2024-04-15"
        assert body["policy"] == "probation"

    @pytest.mark.asyncio
    async def test_leave_proration_fractional_full_entitlement(self, client):
        response = await client.post("/api/v1/calculators/leave/proration", json={
            "default_days": 1.5,
            "leave_type_code": "SL",
            "target_year": 2024,
        })

        assert response.status_code == 200
        assert response.json()["prorated_days"] == 1.5
        assert response.json()["policy"] == "full"

    @pytest.mark.asyncio
    async def test_loan_schedule(self, client):
        response = await client.post("/api/v1/calculators/loan-schedule", json={
            "total_loan_amount": 5000000,
            "installment_amount": 1500000,
            "effective_date": "2025-03-01",
        })

        assert response.status_code == 200
        assert response.json()["total_installments"] == 4
        assert response.json()["end_date"] == "2025-07-01"

    @pytest.mark.asyncio
    async def test_workflow_actions(self, client):
        response = await client.get("/api/v1/calculators/workflows/payroll", params={"status": "submitted"})

        body = response.json()
        assert body["actions"] == {"submitted": ["approve", "reject"]}
        assert body["terminal"] == ["cancelled", "paid", "rejected"]

    @pytest.mark.asyncio
    async def test_unknown_workflow(self, client):
        response = await client.get("/api/v1/calculators/workflows/timesheet")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestPayrollEndpoints:

    @pytest.mark.asyncio
    async def test_summary(self, client, backend):
        backend.add_payroll(1, "draft", gross_salary="10000000")
        backend.add_payroll(2, "approved", gross_salary="5000000")

        with backend.activate():
            response = await client.get("/api/v1/payroll/summary", params={"period": "2025-03"})

        assert response.status_code == 200
        body = response.json()
        assert body["total_employees"] == 2
        assert body["approved_count"] == 1
        assert Decimal(str(body["total_gross"])) == 15000000

    @pytest.mark.asyncio
    async def test_company_period_uses_default_cutoff(self, client, backend):
        with backend.activate():
            response = await client.get("/api/v1/payroll/period", params={"company_id": 1, "period": "2025-03"})

        assert response.json()["cutoff_day"] == settings.default_payroll_cutoff_day

    @pytest.mark.asyncio
    async def test_company_period_uses_company_cutoff(self, client, backend):
        backend.company_settings[1] = {"payroll_cutoff_date": 25}

        with backend.activate():
            response = await client.get("/api/v1/payroll/period", params={"company_id": 1, "period": "2025-03"})

        assert response.json()["start_date"] == "2025-02-26"
        assert response.json()["end_date"] == "2025-03-25"

    @pytest.mark.asyncio
    async def test_approve_draft_rejected_locally(self, client, backend):
        backend.add_payroll(1, "draft")

        with backend.activate():
            response = await client.post("/api/v1/payroll/1/approve", json={})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"
        assert backend.actions == []

    @pytest.mark.asyncio
    async def test_backend_message_surfaced(self, client, backend):
        with backend.activate():
            response = await client.post("/api/v1/payroll/99/validate")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "BACKEND_API_ERROR"
        assert response.json()["error"]["message"] == "Payroll not found"

    @pytest.mark.asyncio
    async def test_validate(self, client, backend):
        backend.add_payroll(1, "draft")

        with backend.activate():
            response = await client.post("/api/v1/payroll/1/validate")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert backend.actions == ["1:validate"]

    @pytest.mark.asyncio
    async def test_export_csv(self, client, backend):
        backend.add_payroll(1, "paid", payroll_number="PAY-1", period="2025-03")

        with backend.activate():
            response = await client.get("/api/v1/payroll/export", params={"period": "2025-03"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "payroll_2025-03_" in response.headers["content-disposition"]
        assert response.text.splitlines()[1].startswith('"PAY-1"')


class TestLeaveEndpoints:

    @pytest.fixture
    def roster(self, backend):
        backend.add_employee(1, "EMP-001", "Ani", join_date="2024-01-15", department={"id": 3, "name": "Finance"})
        backend.add_employee(2, "EMP-002", "Budi")
        backend.add_leave_type(10, "AL", "Annual Leave", 12)
        backend.balances.append({
            "id": 1, "employee_id": 1, "leave_type_id": 10, "year": 2024,
            "allocated_days": 9, "used_days": 2, "pending_days": 0, "remaining_days": 7,
        })
        return backend

    @pytest.mark.asyncio
    async def test_entitlements(self, client, roster):
        with roster.activate():
            response = await client.get("/api/v1/leave/entitlements", params={"year": 2024})

        body = response.json()
        assert response.status_code == 200
        assert len(body) == 2
        assert Decimal(str(body[0]["balances"][0]["remaining_days"])) == 7
        assert Decimal(str(body[1]["balances"][0]["allocated_days"])) == 0

    @pytest.mark.asyncio
    async def test_entitlements_export(self, client, roster):
        with roster.activate():
            response = await client.get("/api/v1/leave/entitlements/export", params={"year": 2024})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "leave_entitlements_" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0].startswith('"Employee ID","Employee Name","Department","Company","Annual Leave Allocated"')
        assert lines[1] == '"EMP-001","Ani","Finance","-","9","2","0","7"'
        assert lines[2] == '"EMP-002","Budi","-","-","0","0","0","0"'

    @pytest.mark.asyncio
    async def test_allocation_preview(self, client, roster):
        with roster.activate():
            response = await client.get(
                "/api/v1/leave/allocation/preview",
                params={"year": 2024, "today": date(2024, 12, 31).isoformat()},
            )

        assert [row["allocated_days"] for row in response.json()] == [9, 12]
        assert roster.allocations == []

    @pytest.mark.asyncio
    async def test_bulk_allocation(self, client, roster, no_sleep):
        roster.fail_allocation(2, 10, status_code=429)

        with roster.activate():
            response = await client.post("/api/v1/leave/allocation/bulk", json={"year": 2024, "today": "2024-12-31"})

        assert response.status_code == 200
        assert response.json() == {
            "employees": 2,
            "total_operations": 2,
            "success": 1,
            "failed": 1,
            "errors": ["employee EMP-002 / AL: Allocation failed"],
        }
        assert roster.allocations == [{"employee_id": 1, "leave_type_id": 10, "year": 2024, "allocated_days": 9}]

    @pytest.mark.asyncio
    async def test_stats_for_year(self, client):
        requests = [
            {"id": 1, "leave_type_id": 10, "status": "approved", "start_date": "2025-03-10", "end_date": "2025-03-11",
             "employee": {"department": {"name": "Finance"}}},
            {"id": 2, "leave_type_id": 11, "status": "rejected", "start_date": "2025-03-12", "end_date": "2025-03-12",
             "employee": {"department": {"name": "Finance"}}},
            {"id": 3, "leave_type_id": 11, "status": "pending", "start_date": "2025-06-02", "end_date": "2025-06-02"},
            {"id": 4, "leave_type_id": 10, "status": "approved", "start_date": "2024-11-04", "end_date": "2024-11-08"},
        ]
        leave_types = [
            {"id": 10, "code": "AL", "name": "Annual Leave", "default_days": 12},
            {"id": 11, "code": "SL", "name": "Sick Leave", "default_days": 0},
        ]

        with respx.mock(base_url=settings.backend_api_url) as mock:
            mock.get("/leaves/types").mock(return_value=httpx.Response(200, json={"data": leave_types}))
            mock.get("/leaves").mock(return_value=httpx.Response(200, json={"data": requests}))
            response = await client.get("/api/v1/leave/stats", params={"year": 2025})

        assert response.status_code == 200
        body = response.json()
        assert body["summary"]["total"] == 3
        assert [row["type"] for row in body["by_type"]] == ["Sick Leave", "Annual Leave"]
        assert body["by_month"][2]["requests"] == 2
        assert body["by_month"][2]["days"] == 2
        assert body["by_month"][10]["requests"] == 0
        assert body["by_department"] == [
            {"name": "Finance", "total": 2, "approved": 1, "average_days": 2.0},
            {"name": "Unknown", "total": 1, "approved": 0, "average_days": 0.0},
        ]
