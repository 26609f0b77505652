"""Customer record as stored by the persistence gateway."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CustomerCategory(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"


class Customer(BaseModel):
    """A customer keyed by phone, carrying the persisted conversation state."""
    id: Optional[int] = None
    phone: str
    first_name: str = ""
    paternal_surname: str = ""
    maternal_surname: str = ""
    conversation_state: str = "INICIO"
    door_color: Optional[str] = None
    facade_color: Optional[str] = None
    red_code: bool = False
    strikes: int = 0
    blocked: bool = False
    category: CustomerCategory = CustomerCategory.STANDARD
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_registered(self) -> bool:
        return bool(self.first_name)

    @property
    def is_premium(self) -> bool:
        return self.category == CustomerCategory.PREMIUM

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.paternal_surname, self.maternal_surname]
        return " ".join(p for p in parts if p)
