"""
HRIS Console - Announcement Tests
"""

from datetime import datetime, timezone

import httpx
import pytest
import respx

from hris.config import settings
from hris.schemas.announcement import Announcement
from hris.services.announcement_service import active_announcements, is_active


BACKEND = settings.backend_api_url
NOW = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


class TestActiveFilter:

    def test_unpublished_hidden(self):
        assert not is_active(Announcement(id=1, is_published=False), NOW)

    def test_expiry(self):
        assert is_active(Announcement(id=1, is_published=True, expires_at="2025-03-11T00:00:00Z"), NOW)
        assert not is_active(Announcement(id=2, is_published=True, expires_at="2025-03-01T00:00:00Z"), NOW)

    def test_naive_timestamps_treated_as_utc(self):
        assert is_active(Announcement(id=1, is_published=True, expires_at="2025-03-10T10:00:00"), NOW)

    def test_blank_expiry_never_expires(self):
        assert is_active(Announcement(id=1, is_published=True, expires_at=""), NOW)

    def test_pinned_first_then_newest(self):
        items = [
            Announcement(id=1, is_published=True, published_at="2025-03-01T00:00:00Z"),
            Announcement(id=2, is_published=True, published_at="2025-03-05T00:00:00Z"),
            Announcement(id=3, is_published=True, is_pinned=True, published_at="2025-01-01T00:00:00Z"),
            Announcement(id=4, is_published=True, created_at="2025-03-08T00:00:00Z"),
            Announcement(id=5, is_published=False, is_pinned=True),
        ]

        assert [a.id for a in active_announcements(items, NOW)] == [3, 4, 2, 1]


class TestActiveEndpoint:

    @pytest.mark.asyncio
    async def test_active_for_company(self, client):
        with respx.mock(base_url=BACKEND) as mock:
            mock.get("/announcements/published/1").mock(return_value=httpx.Response(200, json={"data": [
                {"id": 1, "title": "Old", "is_published": True, "expires_at": "2000-01-01T00:00:00Z"},
                {"id": 2, "title": "Payday moved", "is_published": True, "published_at": "2025-03-01T00:00:00Z"},
            ]}))
            response = await client.get("/api/v1/announcements/active", params={"company_id": 1})

        assert response.status_code == 200
        assert [a["title"] for a in response.json()] == ["Payday moved"]
