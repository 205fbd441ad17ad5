"""Domain events passed between lifecycle services."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class DeliveryStatusChanged:
    """A delivery moved to ``status``; its order follows."""

    delivery_id: UUID
    order_id: UUID
    status: str
    rider_id: UUID | None = None
