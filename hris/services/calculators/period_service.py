"""
HRIS Console - Payroll Period Service

Resolves pay periods from a company's payroll cutoff day and counts the
working days that fall inside them.

Period rule (cutoff 20):
- March 2025 period = 21 Feb 2025 .. 20 Mar 2025
- end   = cutoff day of the selected month
- start = the day after the previous period's end

A cutoff past the end of a month clamps to that month's last day, on both
bounds, so consecutive periods never overlap or leave gaps.
"""

import calendar
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from dateutil.relativedelta import relativedelta

from hris.config import settings
from hris.services.api_client import BackendClient
from hris.utils.error_handling import (
    InvalidCutoffDayException,
    InvalidPeriodException,
)

logger = logging.getLogger(__name__)


PERIOD_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

MIN_CUTOFF_DAY = 1
MAX_CUTOFF_DAY = 31

# date.weekday(): Monday = 0 .. Sunday = 6
DEFAULT_WORKING_WEEKDAYS: Tuple[int, ...] = (0, 1, 2, 3, 4)


@dataclass(frozen=True)
class PayrollPeriod:
    """Inclusive date range of one pay period."""
    period_key: str
    start: date
    end: date
    cutoff_day: int

    @property
    def total_days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period_key,
            "start_date": self.start.isoformat(),
            "end_date": self.end.isoformat(),
            "cutoff_day": self.cutoff_day,
            "total_days": self.total_days,
        }


@dataclass(frozen=True)
class Holiday:
    """A company or national holiday as published by the backend."""
    date: date
    name: str = ""
    is_active: bool = True

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Holiday":
        return cls(
            date=parse_date(record["date"]),
            name=record.get("name", ""),
            is_active=bool(record.get("is_active", True)),
        )


@dataclass
class WorkingDaysSummary:
    """Working day counts over a date range."""
    start: date
    end: date
    total_days: int
    working_days: int
    holiday_count: int
    actual_working_days: int
    holidays: List[Holiday] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_date": self.start.isoformat(),
            "end_date": self.end.isoformat(),
            "total_days": self.total_days,
            "working_days": self.working_days,
            "holiday_count": self.holiday_count,
            "actual_working_days": self.actual_working_days,
            "holidays": [
                {"date": h.date.isoformat(), "name": h.name} for h in self.holidays
            ],
        }


def parse_date(value: Union[str, date, datetime]) -> date:
    """Accept a date, a datetime or an ISO string (with or without a time part)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).split("T")[0])


class PeriodCalculator:
    """
    Pay period arithmetic.

    Works on calendar dates only. There is no timezone handling and no
    timestamp subtraction anywhere in this class.
    """

    @staticmethod
    def parse_period_key(period_key: str) -> Tuple[int, int]:
        """Split a 'YYYY-MM' key into (year, month)."""
        match = PERIOD_KEY_PATTERN.match(str(period_key or "").strip())
        if not match:
            raise InvalidPeriodException(period_key)
        year, month = int(match.group(1)), int(match.group(2))
        if not 1 <= month <= 12 or year < 1:
            raise InvalidPeriodException(period_key, f"Invalid period: {period_key}. Month must be 01-12.")
        return year, month

    @staticmethod
    def validate_cutoff_day(cutoff_day: Any) -> int:
        if isinstance(cutoff_day, bool):
            raise InvalidCutoffDayException(cutoff_day)
        try:
            value = int(cutoff_day)
        except (TypeError, ValueError):
            raise InvalidCutoffDayException(cutoff_day)
        if value != cutoff_day or not MIN_CUTOFF_DAY <= value <= MAX_CUTOFF_DAY:
            raise InvalidCutoffDayException(cutoff_day)
        return value

    @staticmethod
    def clamp_day(year: int, month: int, day: int) -> date:
        """Day `day` of the month, or the month's last day when it is shorter."""
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, min(day, last_day))

    @classmethod
    def resolve(cls, period_key: str, cutoff_day: int) -> PayrollPeriod:
        """
        Resolve the inclusive pay period for a 'YYYY-MM' key.

        Args:
            period_key: Month the period closes in
            cutoff_day: Company payroll cutoff day (1-31)

        Returns:
            PayrollPeriod with start and end dates
        """
        year, month = cls.parse_period_key(period_key)
        cutoff = cls.validate_cutoff_day(cutoff_day)

        end = cls.clamp_day(year, month, cutoff)
        previous = date(year, month, 1) - relativedelta(months=1)
        start = cls.clamp_day(previous.year, previous.month, cutoff) + timedelta(days=1)

        return PayrollPeriod(
            period_key=f"{year:04d}-{month:02d}",
            start=start,
            end=end,
            cutoff_day=cutoff,
        )

    @classmethod
    def period_key_for(cls, day: date, cutoff_day: int) -> str:
        """Key of the period that contains `day`."""
        cutoff = cls.validate_cutoff_day(cutoff_day)
        if day <= cls.clamp_day(day.year, day.month, cutoff):
            return f"{day.year:04d}-{day.month:02d}"
        following = date(day.year, day.month, 1) + relativedelta(months=1)
        return f"{following.year:04d}-{following.month:02d}"

    @staticmethod
    def count_working_days(
        start: date,
        end: date,
        holidays: Iterable[Holiday] = (),
        working_weekdays: Sequence[int] = DEFAULT_WORKING_WEEKDAYS,
    ) -> WorkingDaysSummary:
        """
        Count working days between two dates (inclusive).

        Only active holidays inside the range are counted. A holiday that
        lands on a weekend still counts as a holiday but does not reduce
        the actual working days.
        """
        in_range = [h for h in holidays if h.is_active and start <= h.date <= end]
        holiday_dates = {h.date for h in in_range}

        total_days = 0
        working_days = 0
        actual_working_days = 0
        current = start
        while current <= end:
            total_days += 1
            if current.weekday() in working_weekdays:
                working_days += 1
                if current not in holiday_dates:
                    actual_working_days += 1
            current += timedelta(days=1)

        return WorkingDaysSummary(
            start=start,
            end=end,
            total_days=total_days,
            working_days=working_days,
            holiday_count=len(in_range),
            actual_working_days=actual_working_days,
            holidays=sorted(in_range, key=lambda h: h.date),
        )


# ===========================================
# MODULE-LEVEL HELPERS
# ===========================================

def resolve_period(period_key: str, cutoff_day: int) -> PayrollPeriod:
    """Resolve a 'YYYY-MM' key into its inclusive pay period."""
    return PeriodCalculator.resolve(period_key, cutoff_day)


def calculate_period_working_days(
    period_key: str,
    cutoff_day: int,
    holidays: Iterable[Holiday] = (),
    working_weekdays: Sequence[int] = DEFAULT_WORKING_WEEKDAYS,
) -> WorkingDaysSummary:
    """Working days inside the pay period closing in `period_key`."""
    period = PeriodCalculator.resolve(period_key, cutoff_day)
    return PeriodCalculator.count_working_days(period.start, period.end, holidays, working_weekdays)


def calculate_month_working_days(
    year: int,
    month: int,
    holidays: Iterable[Holiday] = (),
    working_weekdays: Sequence[int] = DEFAULT_WORKING_WEEKDAYS,
) -> WorkingDaysSummary:
    """Working days inside a calendar month."""
    PeriodCalculator.parse_period_key(f"{year:04d}-{month:02d}")
    start = date(year, month, 1)
    end = PeriodCalculator.clamp_day(year, month, 31)
    return PeriodCalculator.count_working_days(start, end, holidays, working_weekdays)


class PayrollSettingService:
    """
    Per-company payroll settings held by the backend.

    The cutoff day stored here feeds period resolution.
    """

    def __init__(self, client: BackendClient):
        self.client = client

    async def get_company_settings(self, company_id: int) -> Dict[str, Any]:
        return await self.client.get(f"/payroll-settings/company/{company_id}")

    async def init_company_settings(self, company_id: int) -> Dict[str, Any]:
        return await self.client.post(f"/payroll-settings/company/{company_id}/init")

    async def update_company_settings(self, company_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        if "payroll_cutoff_date" in data:
            PeriodCalculator.validate_cutoff_day(data["payroll_cutoff_date"])
        return await self.client.patch(f"/payroll-settings/company/{company_id}", json=data)

    async def reset_company_settings(self, company_id: int) -> Dict[str, Any]:
        return await self.client.post(f"/payroll-settings/company/{company_id}/reset")

    async def get_cutoff_day(self, company_id: int) -> int:
        """Company cutoff day, falling back to the configured default when unset."""
        data = await self.get_company_settings(company_id)
        cutoff = (data or {}).get("payroll_cutoff_date")
        if cutoff is None:
            logger.info(
                f"Company {company_id} has no payroll cutoff; using default {settings.default_payroll_cutoff_day}"
            )
            return settings.default_payroll_cutoff_day
        return PeriodCalculator.validate_cutoff_day(int(cutoff))

    async def resolve_company_period(self, company_id: int, period_key: str) -> PayrollPeriod:
        cutoff = await self.get_cutoff_day(company_id)
        return PeriodCalculator.resolve(period_key, cutoff)
