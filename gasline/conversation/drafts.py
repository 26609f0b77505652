"""
Typed in-progress order drafts.

A draft lives only in the session until the customer confirms it. The
product part is one of four variants, each knowing how to derive volume
and amount from what the customer actually typed. The unit price is
captured once per draft so both directions of the conversion agree.

Usage:
    draft = OrderDraft(customer_id=7, kind=ProductKind.TANK)
    draft.product = TankByPercentDraft(capacity=300, percent=85, unit_price=12.5)
    draft.product.volume   # 255.0
    draft.product.amount   # 3187.5
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from gasline.schemas.order_schema import (
    DeliveryWindow,
    Order,
    PaymentMethod,
    ServiceVariant,
    initial_status_for,
)


class ProductKind(str, Enum):
    TANK = "tank"
    CYLINDER = "cylinder"


@dataclass
class TankByVolumeDraft:
    volume: float
    unit_price: float
    variant = ServiceVariant.TANK_BY_VOLUME

    @property
    def amount(self) -> float:
        return self.volume * self.unit_price

    @property
    def is_complete(self) -> bool:
        return True


@dataclass
class TankByMoneyDraft:
    amount: float
    unit_price: float
    variant = ServiceVariant.TANK_BY_MONEY

    @property
    def volume(self) -> float:
        return self.amount / self.unit_price

    @property
    def is_complete(self) -> bool:
        return True


@dataclass
class TankByPercentDraft:
    """Tank size is known first; the gauge reading arrives on the next turn."""
    capacity: float
    unit_price: float
    percent: Optional[float] = None
    variant = ServiceVariant.TANK_BY_PERCENTAGE

    @property
    def volume(self) -> Optional[float]:
        if self.percent is None:
            return None
        return self.capacity * self.percent / 100

    @property
    def amount(self) -> Optional[float]:
        volume = self.volume
        return None if volume is None else volume * self.unit_price

    @property
    def is_complete(self) -> bool:
        return self.percent is not None


@dataclass
class CylinderDraft:
    variant: ServiceVariant
    count: Optional[int] = None
    tracking_codes: list[str] = field(default_factory=list)

    @property
    def volume(self) -> None:
        return None

    @property
    def amount(self) -> None:
        return None

    @property
    def is_complete(self) -> bool:
        if self.count is None:
            return False
        if self.variant == ServiceVariant.CYLINDER_RECHARGE:
            return len(self.tracking_codes) == self.count
        return True


ProductDraft = Union[TankByVolumeDraft, TankByMoneyDraft, TankByPercentDraft, CylinderDraft]


def generate_tracking_codes(count: int, taken: frozenset[str] = frozenset()) -> list[str]:
    """Return ``count`` distinct tracking codes, none of them in ``taken``."""
    codes: list[str] = []
    while len(codes) < count:
        code = f"QR-{uuid.uuid4().hex[:8].upper()}"
        if code not in taken and code not in codes:
            codes.append(code)
    return codes


class IncompleteDraftError(ValueError):
    """Raised when a draft is turned into an order before every step ran."""


@dataclass
class OrderDraft:
    """Everything collected for one order so far."""
    customer_id: int
    kind: ProductKind
    product: Optional[ProductDraft] = None
    payment_method: Optional[PaymentMethod] = None
    address: Optional[str] = None
    facade_color: Optional[str] = None
    door_color: Optional[str] = None
    red_code: bool = False
    delivery_window: Optional[DeliveryWindow] = None

    @property
    def variant(self) -> Optional[ServiceVariant]:
        return self.product.variant if self.product else None

    def missing_fields(self) -> list[str]:
        missing = []
        if self.product is None or not self.product.is_complete:
            missing.append("product")
        if self.payment_method is None:
            missing.append("payment_method")
        if not self.address:
            missing.append("address")
        return missing

    def to_order(self) -> Order:
        """Build the order to persist. Raises IncompleteDraftError if unfinished."""
        missing = self.missing_fields()
        product = self.product
        if missing or product is None:
            raise IncompleteDraftError(f"Draft is missing: {', '.join(missing)}")
        is_cylinder = isinstance(product, CylinderDraft)
        return Order(
            customer_id=self.customer_id,
            service_variant=product.variant,
            volume=product.volume,
            amount=product.amount,
            unit_price=None if is_cylinder else product.unit_price,
            payment_method=self.payment_method,
            address=self.address,
            door_color=self.door_color,
            facade_color=self.facade_color,
            red_code=self.red_code,
            cylinder_count=product.count if is_cylinder else None,
            tracking_codes=list(product.tracking_codes) if is_cylinder else [],
            delivery_window=self.delivery_window,
            status=initial_status_for(product.variant),
        )
