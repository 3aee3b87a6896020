"""Order aggregate (CQRS) — the marketplace order as seen by settlement.

Orders are owned by order management; this context only reads their
destination and financials and writes three things back: the lifecycle status
(through ``change_status``), the ``package_id`` back-reference and the
``profits_distributed`` latch.

State Machine (monotonic):
    PENDING → CONFIRMED → PROCESSING → READY_FOR_SHIPPING → SHIPPED →
    OUT_FOR_DELIVERY → DELIVERED
    {PENDING, CONFIRMED, PROCESSING, READY_FOR_SHIPPING} → CANCELLED
    {SHIPPED, OUT_FOR_DELIVERY, DELIVERED} → RETURNED
    {RETURNED, CANCELLED} → REFUNDED
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from settlement.domain import settlement
from settlement.order.events import (
    OrderPlaced,
    OrderStatusChanged,
    PackageLinked,
    ProfitsDistributed,
    ProfitsReversed,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    READY_FOR_SHIPPING = "ready_for_shipping"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"
    REFUNDED = "refunded"


class CustomerRole(Enum):
    CUSTOMER = "customer"
    MARKETER = "marketer"
    WHOLESALER = "wholesaler"


_LIFECYCLE = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.READY_FOR_SHIPPING,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]

_EXIT_TRANSITIONS = {
    OrderStatus.CANCELLED: {
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.PROCESSING,
        OrderStatus.READY_FOR_SHIPPING,
    },
    OrderStatus.RETURNED: {
        OrderStatus.SHIPPED,
        OrderStatus.OUT_FOR_DELIVERY,
        OrderStatus.DELIVERED,
    },
    OrderStatus.REFUNDED: {
        OrderStatus.RETURNED,
        OrderStatus.CANCELLED,
    },
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Forward moves along the lifecycle, or an allowed exit into a terminal state."""
    if target in _EXIT_TRANSITIONS:
        return current in _EXIT_TRANSITIONS[target]
    if current in _LIFECYCLE and target in _LIFECYCLE:
        return _LIFECYCLE.index(target) > _LIFECYCLE.index(current)
    return False


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@settlement.value_object(part_of="Order")
class ShippingAddress:
    """Destination captured on the order."""

    full_name = String(max_length=200)
    phone = String(max_length=30)
    street = String(max_length=500)
    city = String(max_length=100)
    notes = String(max_length=1000)
    village_id = Integer()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@settlement.entity(part_of="Order")
class OrderItem:
    product_name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(default=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@settlement.aggregate
class Order:
    order_number = String(required=True, max_length=50)
    customer_id = Identifier(required=True)
    customer_role = String(
        max_length=20,
        choices=CustomerRole,
        default=CustomerRole.CUSTOMER.value,
    )
    status = String(
        max_length=30,
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    shipping_company_name = String(max_length=200)
    delivery_notes = String(max_length=1000)
    total = Float(default=0.0, min_value=0.0)
    commission = Float(default=0.0, min_value=0.0)
    marketer_profit = Float()
    package_id = Integer()
    profits_distributed = Boolean(default=False)
    profits_distributed_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number: str,
        customer_id: str,
        total: float,
        commission: float = 0.0,
        marketer_profit: float | None = None,
        customer_role: str = CustomerRole.CUSTOMER.value,
        shipping_address: dict | None = None,
        shipping_company_name: str | None = None,
        delivery_notes: str | None = None,
        items_data: list[dict] | None = None,
        status: str = OrderStatus.PENDING.value,
    ):
        """Record an order handed over by order management."""
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            customer_role=customer_role,
            status=status,
            shipping_address=ShippingAddress(**shipping_address) if shipping_address else None,
            shipping_company_name=shipping_company_name,
            delivery_notes=delivery_notes,
            total=total,
            commission=commission,
            marketer_profit=marketer_profit,
            created_at=now,
            updated_at=now,
        )
        for item_data in items_data or []:
            order.add_items(OrderItem(**item_data))
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=customer_id,
                total=total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def barcode(self) -> str:
        """Carrier barcode; the order number."""
        return self.order_number

    @property
    def village_id(self) -> int | None:
        return self.shipping_address.village_id if self.shipping_address else None

    @property
    def marketer_payout(self) -> float:
        """Amount owed to the buyer's wallet on delivery (zero for non-marketers)."""
        if self.customer_role != CustomerRole.MARKETER.value:
            return 0.0
        return self.marketer_profit if self.marketer_profit and self.marketer_profit > 0 else 0.0

    @property
    def platform_commission(self) -> float:
        return self.commission if self.commission and self.commission > 0 else 0.0

    def package_description(self) -> str:
        items = ", ".join(f"{item.product_name} x{item.quantity}" for item in (self.items or []))
        if not items:
            return f"Order {self.barcode}"
        return f"Order {self.barcode}: {items}"

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def change_status(self, new_status: str) -> None:
        """Move the order to ``new_status``; only forward moves and allowed exits are accepted."""
        current = OrderStatus(self.status)
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {new_status}"]}) from None

        if not can_transition(current, target):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

        if target == OrderStatus.READY_FOR_SHIPPING and not self.village_id:
            raise ValidationError({"shipping_address": ["A village is required before the order is ready for shipping"]})

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Package back-reference
    # -------------------------------------------------------------------
    def link_package(self, package_id: int) -> None:
        if self.package_id == package_id:
            return

        now = datetime.now(UTC)
        self.package_id = package_id
        self.updated_at = now
        self.raise_(
            PackageLinked(
                order_id=str(self.id),
                package_id=package_id,
                linked_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Profit latch
    # -------------------------------------------------------------------
    def mark_profits_distributed(self) -> None:
        if self.profits_distributed:
            raise ValidationError({"profits_distributed": ["Profits were already distributed for this order"]})

        now = datetime.now(UTC)
        self.profits_distributed = True
        self.profits_distributed_at = now
        self.updated_at = now
        self.raise_(
            ProfitsDistributed(
                order_id=str(self.id),
                marketer_profit=self.marketer_payout,
                commission=self.platform_commission,
                distributed_at=now,
            )
        )

    def clear_profits_distributed(self) -> None:
        if not self.profits_distributed:
            raise ValidationError({"profits_distributed": ["Profits have not been distributed for this order"]})

        now = datetime.now(UTC)
        self.profits_distributed = False
        self.profits_distributed_at = None
        self.updated_at = now
        self.raise_(
            ProfitsReversed(
                order_id=str(self.id),
                marketer_profit=self.marketer_payout,
                commission=self.platform_commission,
                reversed_at=now,
            )
        )
