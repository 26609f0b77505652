"""Seal-violation report model."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ReportStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"


class SealReport(BaseModel):
    """A customer's claim that a container seal was broken on delivery."""
    id: Optional[int] = None
    customer_id: int
    order_id: Optional[int] = None
    description: str
    status: ReportStatus = ReportStatus.PENDING
    photo_requested: bool = False
    photo_received: bool = False
    reported_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
