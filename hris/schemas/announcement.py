"""
HRIS Console - Announcement Schemas
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from hris.schemas.common import BackendRecord


class AnnouncementCategory(str, Enum):
    GENERAL = "general"
    POLICY = "policy"
    EVENT = "event"
    HR = "hr"
    URGENT = "urgent"


class AnnouncementPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class AnnouncementVisibility(str, Enum):
    ALL = "all"
    DEPARTMENT = "department"
    ROLE = "role"


class Announcement(BackendRecord):
    id: int
    company_id: Optional[int] = None
    title: str = ""
    content: str = ""
    category: str = AnnouncementCategory.GENERAL.value
    priority: str = AnnouncementPriority.NORMAL.value
    is_pinned: bool = False
    is_published: bool = False
    published_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_validator("published_at", "expires_at", "created_at", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return None if v == "" else v


class AnnouncementCreate(BaseModel):
    company_id: Optional[int] = None
    target_company_ids: Optional[List[int]] = None
    is_global: bool = False
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    category: AnnouncementCategory = AnnouncementCategory.GENERAL
    priority: AnnouncementPriority = AnnouncementPriority.NORMAL
    visibility: AnnouncementVisibility = AnnouncementVisibility.ALL
    target_audience: Optional[str] = None
    target_ids: Optional[List[int]] = None
    is_pinned: bool = False
    is_published: bool = False
    expires_at: Optional[datetime] = None


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = None
    category: Optional[AnnouncementCategory] = None
    priority: Optional[AnnouncementPriority] = None
    visibility: Optional[AnnouncementVisibility] = None
    target_audience: Optional[str] = None
    target_ids: Optional[List[int]] = None
    is_pinned: Optional[bool] = None
    is_published: Optional[bool] = None
    expires_at: Optional[datetime] = None
