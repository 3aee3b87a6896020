"""Package creation from an order.

Per order: NotStarted → LocalPackageCreated → CarrierConfirmed | CarrierPending.

The local package always exists before the carrier is contacted. A carrier
failure leaves it pending, to be picked up by ``resend_package``; it never
undoes the order's own status change.
"""

from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from settlement.carrier.port import GatewaySuccess, GatewayTransportError
from settlement.directory.lookup import active_shipping_companies, find_active_company
from settlement.directory.shipping_company import ShippingCompany
from settlement.locks import order_locks
from settlement.order.order import Order, OrderStatus
from settlement.package.dispatch import send_with_retry
from settlement.package.package import Package
from settlement.package.repository import create_or_get_package
from settlement.package.resolver import resolve_shipping

logger = structlog.get_logger(__name__)

AWAITING_RESEND = "Package was created but has not been accepted by the shipping company yet"


@dataclass(frozen=True)
class PackageCreationResult:
    tracking_number: int | None
    carrier_accepted: bool
    error: str | None = None
    retryable: bool = False
    already_existed: bool = False
    sent_to_carrier: bool = False


def push_to_carrier(package: Package, company: ShippingCompany) -> PackageCreationResult:
    """Send a pending package to its carrier and record the outcome on the package."""
    if not company.has_api_credentials:
        logger.info(
            "Shipping company has no API configured, package kept locally",
            order_id=str(package.order_id),
            package_id=package.package_id,
            company=company.name,
        )
        return PackageCreationResult(tracking_number=package.package_id, carrier_accepted=True)

    outcome = send_with_retry(company.api_endpoint, company.api_token, package.to_carrier_payload())
    result = outcome.result
    repo = current_domain.repository_for(Package)

    if isinstance(result, GatewaySuccess):
        package.record_send_attempts(outcome.attempts)
        package.confirm(
            external_package_id=result.tracking_id,
            delivery_cost=result.delivery_cost,
            qr_code=result.qr_code,
        )
        repo.add(package)
        logger.info(
            "Package accepted by shipping company",
            order_id=str(package.order_id),
            package_id=package.package_id,
            external_package_id=result.tracking_id,
            company=company.name,
            attempts=outcome.attempts,
        )
        return PackageCreationResult(
            tracking_number=package.package_id,
            carrier_accepted=True,
            sent_to_carrier=True,
        )

    retryable = isinstance(result, GatewayTransportError) and result.retryable
    package.record_send_failure(result.error, outcome.attempts, retryable)
    repo.add(package)
    logger.warning(
        "Shipping company did not accept package",
        order_id=str(package.order_id),
        package_id=package.package_id,
        company=company.name,
        attempts=outcome.attempts,
        error=result.error,
        retryable=retryable,
    )
    return PackageCreationResult(
        tracking_number=package.package_id,
        carrier_accepted=False,
        error=result.error,
        retryable=retryable,
        sent_to_carrier=True,
    )


def _existing_package_result(package: Package) -> PackageCreationResult:
    if package.is_confirmed:
        return PackageCreationResult(
            tracking_number=package.package_id,
            carrier_accepted=True,
            already_existed=True,
        )

    company = find_active_company(package.shipping_company_id)
    if company is not None and not company.has_api_credentials:
        return PackageCreationResult(
            tracking_number=package.package_id,
            carrier_accepted=True,
            already_existed=True,
        )

    return PackageCreationResult(
        tracking_number=package.package_id,
        carrier_accepted=False,
        error=package.last_error or AWAITING_RESEND,
        retryable=True,
        already_existed=True,
    )


def create_package_from_order(order_id: str) -> PackageCreationResult:
    """Materialize the order's package and register it with the carrier.

    Safe to call repeatedly: an existing package is returned as is, without
    resolving shipping again or contacting the carrier (use ``resend_package``
    for that).
    """
    with order_locks.hold(order_id):
        order = current_domain.repository_for(Order).get(order_id)

        existing = current_domain.repository_for(Package).find_by_order_id(str(order.id))
        if existing is not None and existing.has_valid_tracking_number:
            logger.info(
                "Package already exists for order",
                order_id=str(order.id),
                package_id=existing.package_id,
                status=existing.status,
            )
            return _existing_package_result(existing)

        resolution = resolve_shipping(order)
        package, existed = create_or_get_package(order, str(resolution.company.id))
        if existed:
            return _existing_package_result(package)
        return push_to_carrier(package, resolution.company)


def should_create_package(order: Order) -> bool:
    """True when the order is ready for shipping and nothing has been created for it yet."""
    if order.status != OrderStatus.READY_FOR_SHIPPING.value:
        return False
    if not order.village_id:
        return False
    if current_domain.repository_for(Package).find_by_order_id(str(order.id)) is not None:
        return False
    return bool(active_shipping_companies())
