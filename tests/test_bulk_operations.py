"""
HRIS Console - Bulk Operations Tests

Tests for the bounded work queue and the bulk leave allocation job.
"""

import asyncio
from datetime import date

import pytest

from hris.config import settings
from hris.schemas.employee import Employee
from hris.schemas.leave import LeaveType
from hris.services.bulk_operations import BulkAllocationService, WorkQueue
from hris.services.calculators.leave_service import LeaveService
from hris.services.employee_service import EmployeeService
from hris.utils.error_handling import BackendAPIException, RateLimitException


def _succeed(value=None):
    async def operation():
        await asyncio.sleep(0)
        return value
    return operation


def _fail(exc_factory):
    async def operation():
        await asyncio.sleep(0)
        raise exc_factory()
    return operation


class TestWorkQueue:
    """Concurrency bound, batching and rate-limit backoff."""

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, no_sleep):
        queue = WorkQueue(concurrency=3, batch_delay=0, sleep=no_sleep)

        result = await queue.run([_succeed(i) for i in range(7)])

        assert result.success == 7
        assert sorted(result.results) == list(range(7))
        assert queue.max_in_flight == 3

    @pytest.mark.asyncio
    async def test_batch_delay_between_batches_only(self, no_sleep):
        queue = WorkQueue(concurrency=3, batch_delay=0.5, sleep=no_sleep)

        await queue.run([_succeed() for _ in range(7)])

        # Batches of 3, 3, 1: no wait after the last one
        assert no_sleep.calls == [0.5, 0.5]

    @pytest.mark.asyncio
    async def test_empty_run(self, no_sleep):
        result = await WorkQueue(concurrency=2, sleep=no_sleep).run([])

        assert result.total == 0
        assert no_sleep.calls == []

    @pytest.mark.parametrize("concurrency", [0, -1])
    def test_concurrency_must_be_positive(self, concurrency):
        with pytest.raises(ValueError):
            WorkQueue(concurrency=concurrency)

    def test_concurrency_defaults_to_setting(self):
        assert WorkQueue().concurrency == settings.bulk_concurrency
        assert WorkQueue(concurrency=1).concurrency == 1

    @pytest.mark.asyncio
    async def test_failures_counted_not_retried(self, no_sleep):
        calls = {"count": 0}

        async def flaky():
            calls["count"] += 1
            raise BackendAPIException("Allocation failed", backend_status=500)

        queue = WorkQueue(concurrency=2, batch_delay=0, sleep=no_sleep)
        result = await queue.run([flaky, _succeed("ok"), _succeed("ok")])

        assert calls["count"] == 1
        assert result.success == 2
        assert result.failed == 1
        assert result.errors == ["operation 1: Allocation failed"]

    @pytest.mark.asyncio
    async def test_error_labels(self, no_sleep):
        queue = WorkQueue(concurrency=1, batch_delay=0, sleep=no_sleep)
        result = await queue.run(
            [_fail(lambda: BackendAPIException("Duplicate", backend_status=409))],
            describe=lambda i: f"row {i}",
        )

        assert result.errors == ["row 0: Duplicate"]

    @pytest.mark.asyncio
    async def test_backoff_doubles_up_to_cap(self, no_sleep):
        queue = WorkQueue(concurrency=1, batch_delay=0.5, backoff=1.0, max_backoff=3.0, sleep=no_sleep)

        result = await queue.run([_fail(RateLimitException) for _ in range(5)])

        assert result.failed == 5
        assert no_sleep.calls == [1.0, 2.0, 3.0, 3.0]

    @pytest.mark.asyncio
    async def test_backoff_resets_after_clean_batch(self, no_sleep):
        queue = WorkQueue(concurrency=1, batch_delay=0.5, backoff=1.0, max_backoff=8.0, sleep=no_sleep)

        await queue.run([
            _fail(RateLimitException),
            _succeed(),
            _fail(RateLimitException),
            _succeed(),
        ])

        assert no_sleep.calls == [1.0, 0.5, 1.0]

    @pytest.mark.asyncio
    async def test_progress_reported_per_batch(self, no_sleep):
        progress = []
        queue = WorkQueue(concurrency=2, batch_delay=0, sleep=no_sleep)

        await queue.run([_succeed() for _ in range(5)], on_progress=lambda done, total: progress.append((done, total)))

        assert progress == [(2, 5), (4, 5), (5, 5)]


class TestBulkAllocation:
    """Roster-wide leave allocation against the mock backend."""

    @pytest.fixture
    def roster(self, backend):
        backend.add_employee(1, "EMP-001", "Ani", join_date="2024-01-15T00:00:00.000Z")
        backend.add_employee(2, "EMP-002", "Budi")
        backend.add_leave_type(10, "AL", "Annual Leave", 12)
        backend.add_leave_type(11, "SL", "Sick Leave", "14")
        return backend

    def _service(self, backend_client, queue):
        return BulkAllocationService(
            LeaveService(backend_client),
            EmployeeService(backend_client),
            queue=queue,
        )

    def test_preview_rows(self, backend_client, fast_queue):
        rows = self._service(backend_client, fast_queue).preview(
            [Employee(id=1, employee_id="EMP-001", join_date=date(2024, 1, 15))],
            [LeaveType(id=10, code="AL", default_days=12), LeaveType(id=11, code="SL", default_days=14)],
            2024,
            date(2024, 12, 31),
        )

        assert [(r.leave_type_code, r.allocated_days) for r in rows] == [("AL", 9), ("SL", 14)]

    @pytest.mark.asyncio
    async def test_build_preview(self, roster, backend_client, fast_queue):
        with roster.activate():
            rows = await self._service(backend_client, fast_queue).build_preview(2024, date(2024, 12, 31))

        assert len(rows) == 4
        assert [r.allocated_days for r in rows] == [9, 14, 12, 14]
        assert roster.allocations == []

    @pytest.mark.asyncio
    async def test_allocate_every_employee_and_type(self, roster, backend_client, fast_queue):
        with roster.activate():
            result = await self._service(backend_client, fast_queue).allocate(2024, date(2024, 12, 31))

        assert result.employees == 2
        assert result.total_operations == 4
        assert result.success == 4
        assert result.failed == 0
        assert {"employee_id": 1, "leave_type_id": 10, "year": 2024, "allocated_days": 9} in roster.allocations

    @pytest.mark.asyncio
    async def test_failed_allocation_reported(self, roster, backend_client, fast_queue):
        roster.fail_allocation(2, 11)

        with roster.activate():
            result = await self._service(backend_client, fast_queue).allocate(2024, date(2024, 12, 31))

        assert result.success == 3
        assert result.failed == 1
        assert result.errors == ["employee EMP-002 / SL: Allocation failed"]
        assert len(roster.allocations) == 3

    @pytest.mark.asyncio
    async def test_progress_callback(self, roster, backend_client, no_sleep):
        progress = []
        queue = WorkQueue(concurrency=3, batch_delay=0.5, sleep=no_sleep)

        with roster.activate():
            await self._service(backend_client, queue).allocate(
                2024, date(2024, 12, 31), on_progress=lambda done, total: progress.append(done)
            )

        assert progress == [3, 4]
        assert no_sleep.calls == [0.5]
