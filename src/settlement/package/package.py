"""Package aggregate — the shipment registered for an order.

A package is persisted ``pending`` before any carrier call and is confirmed
only once the carrier acknowledges it. ``package_id`` is the carrier-facing
tracking number, allocated from the package sequence; it is distinct from
the storage identity.

State Machine:
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    PENDING | CONFIRMED | PROCESSING → CANCELLED
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from settlement.domain import settlement
from settlement.package.events import PackageConfirmed, PackageCreated, PackageSendFailed

UNKNOWN_RECIPIENT = "Not specified"
DEFAULT_PACKAGE_TYPE = "normal"


class PackageStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    PackageStatus.PENDING: {PackageStatus.CONFIRMED, PackageStatus.CANCELLED},
    PackageStatus.CONFIRMED: {PackageStatus.PROCESSING, PackageStatus.SHIPPED, PackageStatus.CANCELLED},
    PackageStatus.PROCESSING: {PackageStatus.SHIPPED, PackageStatus.CANCELLED},
    PackageStatus.SHIPPED: {PackageStatus.DELIVERED},
    PackageStatus.DELIVERED: set(),
    PackageStatus.CANCELLED: set(),
}


@settlement.aggregate
class Package:
    package_id = Integer(required=True, unique=True)
    order_id = Identifier(required=True, unique=True)
    shipping_company_id = Identifier(required=True)
    status = String(
        max_length=20,
        choices=PackageStatus,
        default=PackageStatus.PENDING.value,
    )

    # Destination snapshot
    to_name = String(max_length=200)
    to_phone = String(max_length=30)
    alter_phone = String(max_length=30)
    street = String(max_length=500)
    village_id = Integer(required=True)

    description = String(max_length=2000)
    package_type = String(max_length=50, default=DEFAULT_PACKAGE_TYPE)
    total_cost = Float(default=0.0)
    note = String(max_length=1000)
    barcode = String(required=True, max_length=100)

    # Set only after the carrier confirms
    external_package_id = String(max_length=100)
    delivery_cost = Float()
    qr_code = String(max_length=500)

    send_attempts = Integer(default=0)
    last_error = String(max_length=2000)
    created_at = DateTime()
    updated_at = DateTime()
    confirmed_at = DateTime()

    @classmethod
    def create(cls, package_id: int, order, shipping_company_id: str):
        """Snapshot the order's destination into a new pending package."""
        address = order.shipping_address
        now = datetime.now(UTC)
        package = cls(
            package_id=package_id,
            order_id=str(order.id),
            shipping_company_id=str(shipping_company_id),
            to_name=address.full_name or UNKNOWN_RECIPIENT,
            to_phone=address.phone or "",
            alter_phone=address.phone or "",
            street=address.street or "",
            village_id=address.village_id,
            description=order.package_description(),
            package_type=DEFAULT_PACKAGE_TYPE,
            total_cost=order.total or 0.0,
            note=order.delivery_notes or address.notes or f"Order {order.barcode}",
            barcode=order.barcode,
            created_at=now,
            updated_at=now,
        )
        package.raise_(
            PackageCreated(
                package_id=package_id,
                order_id=str(order.id),
                shipping_company_id=str(shipping_company_id),
                barcode=package.barcode,
                village_id=package.village_id,
                created_at=now,
            )
        )
        return package

    @property
    def has_valid_tracking_number(self) -> bool:
        return isinstance(self.package_id, int) and self.package_id > 0

    @property
    def is_confirmed(self) -> bool:
        return self.status not in (PackageStatus.PENDING.value, PackageStatus.CANCELLED.value)

    def _assert_can_transition(self, target: PackageStatus) -> None:
        current = PackageStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

    def confirm(self, external_package_id: str, delivery_cost: float | None = None, qr_code: str | None = None) -> None:
        self._assert_can_transition(PackageStatus.CONFIRMED)

        now = datetime.now(UTC)
        self.status = PackageStatus.CONFIRMED.value
        self.external_package_id = external_package_id
        self.delivery_cost = delivery_cost
        self.qr_code = qr_code
        self.last_error = None
        self.confirmed_at = now
        self.updated_at = now
        self.raise_(
            PackageConfirmed(
                package_id=self.package_id,
                order_id=str(self.order_id),
                external_package_id=external_package_id,
                delivery_cost=delivery_cost,
                confirmed_at=now,
            )
        )

    def record_send_failure(self, error: str, attempts: int, retryable: bool) -> None:
        """Keep the package pending and remember why the carrier did not take it."""
        now = datetime.now(UTC)
        self.send_attempts = (self.send_attempts or 0) + attempts
        self.last_error = error
        self.updated_at = now
        self.raise_(
            PackageSendFailed(
                package_id=self.package_id,
                order_id=str(self.order_id),
                error=error,
                attempts=attempts,
                retryable=retryable,
                failed_at=now,
            )
        )

    def record_send_attempts(self, attempts: int) -> None:
        self.send_attempts = (self.send_attempts or 0) + attempts

    def reassign_carrier(self, shipping_company_id: str) -> None:
        if self.status != PackageStatus.PENDING.value:
            raise ValidationError({"shipping_company_id": ["Only pending packages can change carrier"]})
        self.shipping_company_id = str(shipping_company_id)
        self.updated_at = datetime.now(UTC)

    def to_carrier_payload(self) -> dict[str, str]:
        """The carrier's package-creation body; every value is a string."""
        return {
            "to_name": self.to_name or UNKNOWN_RECIPIENT,
            "to_phone": self.to_phone or "",
            "alter_phone": self.alter_phone or "",
            "description": self.description or "",
            "package_type": self.package_type or DEFAULT_PACKAGE_TYPE,
            "village_id": str(self.village_id),
            "street": self.street or "",
            "total_cost": str(self.total_cost or 0),
            "note": self.note or "",
            "barcode": self.barcode,
            "qr_code2": self.barcode,
        }
