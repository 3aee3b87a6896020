"""Domain events for the Package aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from settlement.domain import settlement


@settlement.event(part_of="Package")
class PackageCreated:
    __version__ = 1

    package_id = Integer(required=True)
    order_id = Identifier(required=True)
    shipping_company_id = Identifier(required=True)
    barcode = String(required=True)
    village_id = Integer(required=True)
    created_at = DateTime(required=True)


@settlement.event(part_of="Package")
class PackageConfirmed:
    __version__ = 1

    package_id = Integer(required=True)
    order_id = Identifier(required=True)
    external_package_id = String(required=True)
    delivery_cost = Float()
    confirmed_at = DateTime(required=True)


@settlement.event(part_of="Package")
class PackageSendFailed:
    __version__ = 1

    package_id = Integer(required=True)
    order_id = Identifier(required=True)
    error = String(required=True, max_length=2000)
    attempts = Integer(required=True)
    retryable = Boolean(default=False)
    failed_at = DateTime(required=True)
