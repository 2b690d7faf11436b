"""
HRIS Console - Announcement Service

Company announcements (`/announcements`).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from hris.schemas.announcement import Announcement
from hris.services.api_client import BackendClient, Page

logger = logging.getLogger(__name__)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def is_active(announcement: Announcement, now: datetime) -> bool:
    """Published and not past its expiry."""
    if not announcement.is_published:
        return False
    if announcement.expires_at is None:
        return True
    return _aware(announcement.expires_at) > _aware(now)


def active_announcements(announcements: Iterable[Announcement], now: datetime) -> List[Announcement]:
    """
    Announcements to show right now.

    Pinned first, then newest first by publish (or creation) time.
    """
    epoch = datetime.min.replace(tzinfo=timezone.utc)

    def _published(a: Announcement) -> datetime:
        stamp = a.published_at or a.created_at
        return _aware(stamp) if stamp else epoch

    visible = [a for a in announcements if is_active(a, now)]
    visible.sort(key=_published, reverse=True)
    visible.sort(key=lambda a: not a.is_pinned)
    return visible


class AnnouncementService:

    def __init__(self, client: BackendClient):
        self.client = client

    async def list(self, **filters) -> Page:
        page = await self.client.get_page("/announcements", params=filters)
        page.data = [Announcement.model_validate(item) for item in page.data]
        return page

    async def get(self, announcement_id: int) -> Announcement:
        return Announcement.model_validate(await self.client.get(f"/announcements/{announcement_id}"))

    async def published(self, company_id: int) -> List[Announcement]:
        data = await self.client.get(f"/announcements/published/{company_id}") or []
        return [Announcement.model_validate(item) for item in data]

    async def active(self, company_id: int, now: Optional[datetime] = None) -> List[Announcement]:
        items = await self.published(company_id)
        return active_announcements(items, now or datetime.now(timezone.utc))

    async def create(self, data: Dict[str, Any]) -> Announcement:
        result = await self.client.post("/announcements", json=data)
        logger.info(f"Created announcement '{data.get('title')}'")
        return Announcement.model_validate(result)

    async def update(self, announcement_id: int, data: Dict[str, Any]) -> Announcement:
        return Announcement.model_validate(await self.client.put(f"/announcements/{announcement_id}", json=data))

    async def delete(self, announcement_id: int) -> None:
        await self.client.delete(f"/announcements/{announcement_id}")

    async def publish(self, announcement_id: int) -> Announcement:
        return Announcement.model_validate(await self.client.post(f"/announcements/{announcement_id}/publish"))

    async def unpublish(self, announcement_id: int) -> Announcement:
        return Announcement.model_validate(await self.client.post(f"/announcements/{announcement_id}/unpublish"))

    async def toggle_pin(self, announcement_id: int) -> Announcement:
        return Announcement.model_validate(await self.client.post(f"/announcements/{announcement_id}/toggle-pin"))
