"""
HRIS Console - Bulk Operations Service

Bounded-concurrency work queue and the bulk leave allocation job built on it.

The queue keeps the backend from being flooded:
- at most `concurrency` operations run at the same time
- operations are dispatched in batches of `concurrency`, with
  `batch_delay` seconds between batches
- when an operation is rate limited (HTTP 429) the queue waits before
  dispatching more, doubling the wait up to `max_backoff`

A failed operation is counted and reported. It is never retried; the user
re-runs the job.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Sequence

from hris.config import settings
from hris.schemas.employee import Employee
from hris.schemas.leave import AllocationPreviewRow, BulkAllocationResult, LeaveType
from hris.services.calculators.leave_service import LeaveProrationCalculator, LeaveService
from hris.services.employee_service import EmployeeService
from hris.utils.error_handling import AppException, RateLimitException

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

# Cap on error messages carried back to the caller
MAX_REPORTED_ERRORS = 100


@dataclass
class QueueResult:
    total: int = 0
    success: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    results: List[Any] = field(default_factory=list)


class WorkQueue:
    """Runs async operations with bounded concurrency and rate-limit backoff."""

    def __init__(
        self,
        concurrency: Optional[int] = None,
        batch_delay: Optional[float] = None,
        backoff: Optional[float] = None,
        max_backoff: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.concurrency = settings.bulk_concurrency if concurrency is None else concurrency
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.batch_delay = settings.bulk_batch_delay_seconds if batch_delay is None else batch_delay
        self.backoff = settings.bulk_backoff_seconds if backoff is None else backoff
        self.max_backoff = settings.bulk_max_backoff_seconds if max_backoff is None else max_backoff
        self._sleep = sleep
        self._current_backoff = 0.0
        self.max_in_flight = 0

    def _next_backoff(self) -> float:
        if self._current_backoff <= 0:
            self._current_backoff = self.backoff
        else:
            self._current_backoff = min(self._current_backoff * 2, self.max_backoff)
        return self._current_backoff

    async def run(
        self,
        operations: Sequence[Callable[[], Awaitable[Any]]],
        on_progress: Optional[ProgressCallback] = None,
        describe: Optional[Callable[[int], str]] = None,
    ) -> QueueResult:
        """
        Run every operation once.

        Args:
            operations: Zero-argument coroutine factories
            on_progress: Called with (completed, total) after each batch
            describe: Label for operation `i` in error messages

        Returns:
            QueueResult with success/failed counts
        """
        result = QueueResult(total=len(operations))
        semaphore = asyncio.Semaphore(self.concurrency)
        in_flight = 0
        rate_limited = False

        async def _run_one(index: int) -> None:
            nonlocal in_flight, rate_limited
            async with semaphore:
                in_flight += 1
                self.max_in_flight = max(self.max_in_flight, in_flight)
                try:
                    value = await operations[index]()
                    result.success += 1
                    result.results.append(value)
                except AppException as e:
                    result.failed += 1
                    if isinstance(e, RateLimitException):
                        rate_limited = True
                    label = describe(index) if describe else f"operation {index + 1}"
                    if len(result.errors) < MAX_REPORTED_ERRORS:
                        result.errors.append(f"{label}: {e.message}")
                    logger.warning(f"Bulk {label} failed: {e.message}")
                finally:
                    in_flight -= 1

        completed = 0
        for start in range(0, len(operations), self.concurrency):
            batch = range(start, min(start + self.concurrency, len(operations)))
            await asyncio.gather(*(_run_one(i) for i in batch))
            completed += len(batch)

            if on_progress:
                on_progress(completed, result.total)

            if completed >= len(operations):
                break
            if rate_limited:
                wait = self._next_backoff()
                logger.info(f"Backend rate limit hit; backing off {wait:.1f}s")
                rate_limited = False
                await self._sleep(wait)
            else:
                self._current_backoff = 0.0
                if self.batch_delay > 0:
                    await self._sleep(self.batch_delay)

        logger.info(f"Bulk run finished: {result.success} succeeded, {result.failed} failed of {result.total}")
        return result


class BulkAllocationService:
    """Allocates leave balances for a whole roster in one job."""

    def __init__(
        self,
        leave_service: LeaveService,
        employee_service: EmployeeService,
        calculator: Optional[LeaveProrationCalculator] = None,
        queue: Optional[WorkQueue] = None,
    ):
        self.leave_service = leave_service
        self.employee_service = employee_service
        self.calculator = calculator or LeaveProrationCalculator()
        self.queue = queue or WorkQueue()

    def preview(
        self,
        employees: Iterable[Employee],
        leave_types: Iterable[LeaveType],
        year: int,
        today: date,
    ) -> List[AllocationPreviewRow]:
        """Prorated allocation for every (employee, leave type), without sending anything."""
        leave_types = list(leave_types)
        rows = []
        for employee in employees:
            for leave_type in leave_types:
                days = self.calculator.calculate(
                    employee.join_date,
                    leave_type.default_days,
                    leave_type.code,
                    year,
                    today,
                ).days
                rows.append(AllocationPreviewRow(
                    employee_id=employee.id,
                    employee_code=employee.employee_id,
                    employee_name=employee.name,
                    leave_type_id=leave_type.id,
                    leave_type_code=leave_type.code,
                    year=year,
                    allocated_days=days,
                ))
        return rows

    async def build_preview(
        self,
        year: int,
        today: date,
        company_id: Optional[int] = None,
    ) -> List[AllocationPreviewRow]:
        employees = await self.employee_service.list_all(company_id=company_id)
        leave_types = await self.leave_service.get_types()
        return self.preview(employees, leave_types, year, today)

    async def allocate(
        self,
        year: int,
        today: date,
        company_id: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BulkAllocationResult:
        """
        Allocate every leave type to every employee of the roster.

        One backend call per (employee, leave type). Failures are counted
        and reported, not retried.
        """
        employees = await self.employee_service.list_all(company_id=company_id)
        leave_types = await self.leave_service.get_types()
        rows = self.preview(employees, leave_types, year, today)

        logger.info(
            f"Bulk leave allocation for {year}: {len(employees)} employees x "
            f"{len(leave_types)} leave types = {len(rows)} operations"
        )

        def _operation(row: AllocationPreviewRow):
            return lambda: self.leave_service.allocate(
                employee_id=row.employee_id,
                leave_type_id=row.leave_type_id,
                year=row.year,
                allocated_days=row.allocated_days,
            )

        def _describe(index: int) -> str:
            row = rows[index]
            return f"employee {row.employee_code or row.employee_id} / {row.leave_type_code or row.leave_type_id}"

        outcome = await self.queue.run(
            [_operation(row) for row in rows],
            on_progress=on_progress,
            describe=_describe,
        )

        return BulkAllocationResult(
            employees=len(employees),
            total_operations=outcome.total,
            success=outcome.success,
            failed=outcome.failed,
            errors=outcome.errors,
        )
