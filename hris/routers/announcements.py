"""
HRIS Console - Announcements Router
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from hris.dependencies import get_announcement_service
from hris.schemas.announcement import Announcement
from hris.services.announcement_service import AnnouncementService


router = APIRouter()


@router.get(
    "/active",
    response_model=List[Announcement],
    summary="Active announcements of a company",
    description="Published and not expired; pinned first, then newest first.",
)
async def active_announcements(
    company_id: int = Query(...),
    service: AnnouncementService = Depends(get_announcement_service),
):
    return await service.active(company_id)
