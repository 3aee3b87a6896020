"""Package repository — at most one package per order."""

import structlog
from protean.utils.globals import current_domain

from settlement.domain import settlement
from settlement.order.order import Order
from settlement.package.package import Package, PackageStatus
from settlement.package.sequence import next_package_id

logger = structlog.get_logger(__name__)


@settlement.repository(part_of=Package)
class PackageRepository:
    def find_by_order_id(self, order_id: str) -> Package | None:
        results = self._dao.query.filter(order_id=str(order_id)).all().items
        return results[0] if results else None

    def find_by_package_id(self, package_id: int) -> Package | None:
        results = self._dao.query.filter(package_id=package_id).all().items
        return results[0] if results else None

    def find_pending(self) -> list[Package]:
        return self._dao.query.filter(status=PackageStatus.PENDING.value).order_by("package_id").all().items

    def purge(self, package: Package) -> None:
        self._dao.delete(package)


def create_or_get_package(order: Order, shipping_company_id: str) -> tuple[Package, bool]:
    """Return the order's package, creating it when missing.

    The flag is True when the package already existed. A stored package
    without a valid tracking number is deleted and replaced.
    """
    repo = current_domain.repository_for(Package)

    existing = repo.find_by_order_id(str(order.id))
    if existing is not None:
        if existing.has_valid_tracking_number:
            logger.info(
                "Package already exists for order",
                order_id=str(order.id),
                package_id=existing.package_id,
                status=existing.status,
            )
            return existing, True

        logger.warning(
            "Purging package without a valid tracking number",
            order_id=str(order.id),
            package_record=str(existing.id),
        )
        repo.purge(existing)

    package = Package.create(
        package_id=next_package_id(),
        order=order,
        shipping_company_id=shipping_company_id,
    )
    repo.add(package)

    order.link_package(package.package_id)
    current_domain.repository_for(Order).add(order)

    logger.info(
        "Package created",
        order_id=str(order.id),
        package_id=package.package_id,
        barcode=package.barcode,
        shipping_company_id=str(shipping_company_id),
    )
    return package, False
