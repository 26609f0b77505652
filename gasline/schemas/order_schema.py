"""Order data models and the enumerations shared with order drafts."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ServiceVariant(str, Enum):
    """What is being delivered and how its quantity was expressed."""
    TANK_BY_VOLUME = "tank_by_volume"
    TANK_BY_MONEY = "tank_by_money"
    TANK_BY_PERCENTAGE = "tank_by_percentage"
    CYLINDER_RECHARGE = "cylinder_recharge"
    CYLINDER_EXCHANGE = "cylinder_exchange"

    @property
    def is_tank(self) -> bool:
        return self.value.startswith("tank_")

    @property
    def is_cylinder(self) -> bool:
        return self.value.startswith("cylinder_")


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"


class DeliveryWindow(str, Enum):
    """Delivery slots offered to premium customers."""
    MORNING = "morning"
    AFTERNOON = "afternoon"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PENDING_PICKUP = "pending_pickup"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


def initial_status_for(variant: ServiceVariant) -> OrderStatus:
    """Recharged cylinders have to be collected before anything is delivered."""
    if variant == ServiceVariant.CYLINDER_RECHARGE:
        return OrderStatus.PENDING_PICKUP
    return OrderStatus.PENDING


class Order(BaseModel):
    """A confirmed order. Only ``status`` changes after it is stored."""
    id: Optional[int] = None
    customer_id: int
    service_variant: ServiceVariant
    volume: Optional[float] = None
    amount: Optional[float] = None
    unit_price: Optional[float] = None
    payment_method: PaymentMethod
    address: str
    door_color: Optional[str] = None
    facade_color: Optional[str] = None
    red_code: bool = False
    cylinder_count: Optional[int] = None
    tracking_codes: list[str] = Field(default_factory=list)
    delivery_window: Optional[DeliveryWindow] = None
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
