"""
HRIS Console - Test Configuration

Pytest fixtures and a configurable mock of the HRIS backend.
"""

import json
from typing import Any, AsyncGenerator, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
import respx
from httpx import AsyncClient, ASGITransport
from respx import MockRouter

from hris.config import settings
from hris.dependencies import get_work_queue
from hris.services.api_client import BackendClient
from hris.services.bulk_operations import WorkQueue
from main import app


BACKEND = settings.backend_api_url


# ===========================================
# MOCK BACKEND
# ===========================================

class MockHRISBackend:
    """
    In-memory stand-in for the HRIS REST backend.

    Usage:
        backend = MockHRISBackend()
        backend.add_employee(1, "EMP-001", "Ani", join_date="2024-01-15")

        with backend.activate():
            # Code under test that calls the backend
            ...

        backend.allocations  # balances posted during the run
    """

    BASE_URL = BACKEND

    def __init__(self):
        self.employees: List[Dict[str, Any]] = []
        self.leave_types: List[Dict[str, Any]] = []
        self.balances: List[Dict[str, Any]] = []
        self.payrolls: Dict[int, Dict[str, Any]] = {}
        self.company_settings: Dict[int, Dict[str, Any]] = {}
        self.allocations: List[Dict[str, Any]] = []
        self.actions: List[str] = []

        # Per-(employee, leave type) failures for allocation calls
        self.failing_allocations: Dict[tuple, int] = {}

        self._router: Optional[MockRouter] = None

    # ===========================================
    # Data
    # ===========================================

    def add_employee(self, id: int, code: str, name: str, join_date: Optional[str] = None, **extra) -> Dict[str, Any]:
        employee = {"id": id, "employee_id": code, "name": name, "join_date": join_date, **extra}
        self.employees.append(employee)
        return employee

    def add_leave_type(self, id: int, code: str, name: str, default_days: Any) -> Dict[str, Any]:
        leave_type = {"id": id, "code": code, "name": name, "default_days": default_days, "is_active": True}
        self.leave_types.append(leave_type)
        return leave_type

    def add_payroll(self, id: int, status: str, **extra) -> Dict[str, Any]:
        payroll = {"id": id, "status": status, **extra}
        self.payrolls[id] = payroll
        return payroll

    def fail_allocation(self, employee_id: int, leave_type_id: int, status_code: int = 500):
        self.failing_allocations[(employee_id, leave_type_id)] = status_code

    # ===========================================
    # Router
    # ===========================================

    def activate(self) -> MockRouter:
        """Activate the mock backend and return the router."""
        self._router = respx.mock(base_url=self.BASE_URL, assert_all_called=False)
        self._setup_routes()
        return self._router

    def _setup_routes(self):
        router = self._router
        router.get("/employees").mock(side_effect=self._handle_employees)
        router.get("/leaves/types").mock(side_effect=lambda request: self._ok(self.leave_types))
        router.get("/leaves/balances/list").mock(side_effect=lambda request: self._ok(self.balances))
        router.post("/leaves/balances/allocate").mock(side_effect=self._handle_allocate)
        router.get(path__regex=r"/payroll-settings/company/(?P<company_id>\d+)$").mock(
            side_effect=self._handle_company_settings
        )
        router.get("/payroll").mock(side_effect=self._handle_payroll_list)
        router.get(path__regex=r"/payroll/(?P<payroll_id>\d+)$").mock(side_effect=self._handle_payroll_get)
        router.post(path__regex=r"/payroll/(?P<payroll_id>\d+)/(?P<action>\w+)$").mock(
            side_effect=self._handle_payroll_action
        )

    @staticmethod
    def _ok(data: Any, status_code: int = 200, **extra) -> httpx.Response:
        return httpx.Response(status_code, json={"success": True, "data": data, **extra})

    @staticmethod
    def _error(status_code: int, message: str) -> httpx.Response:
        return httpx.Response(status_code, json={"success": False, "error": {"message": message}})

    def _handle_employees(self, request: httpx.Request) -> httpx.Response:
        company_id = request.url.params.get("company_id")
        data = [e for e in self.employees if company_id is None or str(e.get("company_id")) == company_id]
        return self._ok(data, meta={"page": 1, "limit": 1000, "total": len(data), "totalPages": 1})

    def _handle_allocate(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        failure = self.failing_allocations.get((body["employee_id"], body["leave_type_id"]))
        if failure:
            return self._error(failure, "Allocation failed")
        self.allocations.append(body)
        return self._ok({"id": len(self.allocations), **body}, status_code=201)

    def _handle_company_settings(self, request: httpx.Request, company_id: str) -> httpx.Response:
        return self._ok(self.company_settings.get(int(company_id), {}))

    def _handle_payroll_list(self, request: httpx.Request) -> httpx.Response:
        data = list(self.payrolls.values())
        return self._ok(data, pagination={"page": 1, "limit": 1000, "total": len(data), "total_pages": 1})

    def _handle_payroll_get(self, request: httpx.Request, payroll_id: str) -> httpx.Response:
        payroll = self.payrolls.get(int(payroll_id))
        if payroll is None:
            return self._error(404, "Payroll not found")
        return self._ok(payroll)

    def _handle_payroll_action(self, request: httpx.Request, payroll_id: str, action: str) -> httpx.Response:
        self.actions.append(f"{payroll_id}:{action}")
        payroll = self.payrolls.get(int(payroll_id))
        if payroll is None:
            return self._error(404, "Payroll not found")
        return self._ok(payroll)


# ===========================================
# FIXTURES
# ===========================================

class NoSleep:
    """Records requested sleeps instead of waiting."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def backend() -> MockHRISBackend:
    return MockHRISBackend()


@pytest.fixture
def no_sleep() -> NoSleep:
    return NoSleep()


@pytest.fixture
def fast_queue(no_sleep: NoSleep) -> WorkQueue:
    return WorkQueue(concurrency=5, batch_delay=0.5, backoff=1.0, max_backoff=8.0, sleep=no_sleep)


@pytest.fixture
def backend_client() -> BackendClient:
    return BackendClient(base_url=BACKEND, token="test-token", timeout=5.0)


@pytest_asyncio.fixture(scope="function")
async def client(fast_queue: WorkQueue) -> AsyncGenerator[AsyncClient, None]:
    """ASGI test client; bulk jobs run without real delays."""
    app.dependency_overrides[get_work_queue] = lambda: fast_queue

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
