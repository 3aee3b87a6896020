"""Order domain events — facts about the order flags this context writes."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from settlement.domain import settlement


@settlement.event(part_of="Order")
class OrderPlaced:
    """An order entered the settlement pipeline."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    total = Float(required=True)
    placed_at = DateTime(required=True)


@settlement.event(part_of="Order")
class OrderStatusChanged:
    """The order moved along its lifecycle."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@settlement.event(part_of="Order")
class PackageLinked:
    """A package was created for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    package_id = Integer(required=True)
    linked_at = DateTime(required=True)


@settlement.event(part_of="Order")
class ProfitsDistributed:
    """Every settlement credit for the order was committed."""

    __version__ = 1

    order_id = Identifier(required=True)
    marketer_profit = Float()
    commission = Float()
    distributed_at = DateTime(required=True)


@settlement.event(part_of="Order")
class ProfitsReversed:
    """Settlement credits for the order were debited back."""

    __version__ = 1

    order_id = Identifier(required=True)
    marketer_profit = Float()
    commission = Float()
    reversed_at = DateTime(required=True)
