"""
HRIS Console - Common Schemas

Envelopes and base models shared by every resource.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BackendRecord(BaseModel):
    """
    Base for records fetched from the HRIS backend.

    Unknown fields are kept so a record can be passed back or exported
    without losing data the console does not model.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class NamedRef(BackendRecord):
    """Nested `{id, name}` reference (department, company, position)."""
    id: Optional[int] = None
    name: Optional[str] = None


class PaginationMeta(BaseModel):
    page: int = 1
    limit: int = 10
    total: int = 0
    total_pages: int = 1


class PaginatedResponse(BaseModel):
    data: List[Any] = Field(default_factory=list)
    pagination: PaginationMeta = Field(default_factory=PaginationMeta)


class ActionResponse(BaseModel):
    """Standard success envelope."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[Any] = None


class BulkIdsRequest(BaseModel):
    ids: List[int] = Field(..., min_length=1)


class BulkActionResult(BaseModel):
    """Outcome of a multi-record action. Failures are counted, not retried."""
    total: int = 0
    success: int = 0
    failed: int = 0
    errors: List[str] = Field(default_factory=list)


__all__ = [
    "BackendRecord",
    "NamedRef",
    "PaginationMeta",
    "PaginatedResponse",
    "ActionResponse",
    "BulkIdsRequest",
    "BulkActionResult",
]
