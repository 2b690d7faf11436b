"""
HRIS Console - Adjustment and Allowance Service Tests
"""

import json
from datetime import date
from decimal import Decimal

import httpx
import pytest
import respx

from hris.config import settings
from hris.services.adjustment_service import AdjustmentService, AllowanceService
from hris.utils.error_handling import (
    InvalidAmountException,
    InvalidTransitionException,
    ValidationException,
)


BACKEND = settings.backend_api_url


class TestAdjustmentService:

    @pytest.mark.asyncio
    async def test_create_loan_sends_schedule(self, backend_client):
        with respx.mock(base_url=BACKEND) as mock:
            route = mock.post("/payroll-adjustments").mock(return_value=httpx.Response(201, json={"data": {"id": 5}}))
            result = await AdjustmentService(backend_client).create({
                "employee_id": 7,
                "type": "loan",
                "total_loan_amount": 6000000,
                "installment_amount": 1000000,
                "effective_date": date(2025, 1, 15),
            })

        body = json.loads(route.calls.last.request.content)
        assert result == {"id": 5}
        assert body["total_installments"] == 6
        assert body["recurring_end_date"] == "2025-07-15"

    @pytest.mark.asyncio
    async def test_approve_processed_blocked(self, backend_client):
        with respx.mock(base_url=BACKEND, assert_all_called=False) as mock:
            mock.get("/payroll-adjustments/5").mock(
                return_value=httpx.Response(200, json={"data": {"id": 5, "status": "processed"}})
            )
            approve = mock.post("/payroll-adjustments/5/approve").mock(return_value=httpx.Response(200, json={}))
            with pytest.raises(InvalidTransitionException):
                await AdjustmentService(backend_client).approve(5)

        assert not approve.called

    @pytest.mark.asyncio
    async def test_reject_requires_reason(self, backend_client):
        with pytest.raises(ValidationException):
            await AdjustmentService(backend_client).reject(5, "")

    @pytest.mark.asyncio
    async def test_bulk_create_validates_locally(self, backend_client):
        service = AdjustmentService(backend_client)

        with pytest.raises(ValidationException) as exc_info:
            await service.bulk_create({"employee_ids": [], "amount": 100})
        assert exc_info.value.field == "employee_ids"

        with pytest.raises(InvalidAmountException):
            await service.bulk_create({"employee_ids": [1, 2], "amount": -100})

    @pytest.mark.asyncio
    async def test_summary_uses_page_total(self, backend_client):
        with respx.mock(base_url=BACKEND) as mock:
            mock.get("/payroll-adjustments").mock(return_value=httpx.Response(200, json={
                "data": [
                    {"type": "loan", "status": "pending", "amount": "500000"},
                    {"type": "penalty", "status": "approved", "amount": "25000"},
                ],
                "pagination": {"page": 1, "limit": 10, "total": 42, "total_pages": 5},
            }))
            summary = await AdjustmentService(backend_client).summary(pay_period="2025-03")

        assert summary["total_items"] == 42
        # Only approved deductions count towards the amount
        assert summary["total_amount"] == Decimal("25000")
        assert summary["pending_count"] == 1


class TestAllowanceService:

    @pytest.mark.asyncio
    async def test_create_requires_amount_or_percentage(self, backend_client):
        with pytest.raises(ValidationException) as exc_info:
            await AllowanceService(backend_client).create({"name": "Transport"})

        assert exc_info.value.field == "amount"

    @pytest.mark.asyncio
    async def test_create_requires_name(self, backend_client):
        with pytest.raises(ValidationException) as exc_info:
            await AllowanceService(backend_client).create({"amount": 100})

        assert exc_info.value.field == "name"
