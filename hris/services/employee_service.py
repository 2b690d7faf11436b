"""
HRIS Console - Employee Service

Read access to employee records on the backend.
"""

import logging
from typing import List, Optional

from hris.config import settings
from hris.schemas.employee import Employee
from hris.services.api_client import BackendClient, Page

logger = logging.getLogger(__name__)


class EmployeeService:
    """Employees (`/employees`)."""

    def __init__(self, client: BackendClient):
        self.client = client

    async def list(self, **filters) -> Page:
        page = await self.client.get_page("/employees", params=filters)
        page.data = [Employee.model_validate(item) for item in page.data]
        return page

    async def get(self, employee_id: int) -> Employee:
        data = await self.client.get(f"/employees/{employee_id}")
        return Employee.model_validate(data)

    async def list_all(self, company_id: Optional[int] = None) -> List[Employee]:
        """
        Every employee in one request, up to the configured fetch limit.

        Used by bulk jobs, which need the whole roster rather than a page.
        """
        page = await self.list(limit=settings.employee_fetch_limit, company_id=company_id)
        if page.total > len(page.data):
            logger.warning(
                f"Employee roster truncated: fetched {len(page.data)} of {page.total} "
                f"(limit {settings.employee_fetch_limit})"
            )
        return page.data
