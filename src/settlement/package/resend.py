"""Resending pending packages to their carrier."""

from dataclasses import dataclass, field

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from settlement.directory.lookup import find_active_company
from settlement.errors import PackageNotFound
from settlement.locks import order_locks
from settlement.order.order import Order
from settlement.package.creation import PackageCreationResult, push_to_carrier
from settlement.package.package import Package
from settlement.package.resolver import resolve_shipping_company

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ResendOutcome:
    order_id: str
    tracking_number: int | None
    carrier_accepted: bool
    error: str | None = None


@dataclass
class ResendSweepResult:
    outcomes: list[ResendOutcome] = field(default_factory=list)
    skipped: int = 0

    @property
    def confirmed(self) -> list[ResendOutcome]:
        return [o for o in self.outcomes if o.carrier_accepted]

    @property
    def failed(self) -> list[ResendOutcome]:
        return [o for o in self.outcomes if not o.carrier_accepted]


def resend_package(order_id: str) -> PackageCreationResult:
    """Push the order's stored package to its carrier again.

    The package keeps its tracking number. When its recorded carrier is no
    longer active or has no API credentials, the carrier is resolved again.
    """
    with order_locks.hold(order_id):
        repo = current_domain.repository_for(Package)
        package = repo.find_by_order_id(str(order_id))
        if package is None:
            raise PackageNotFound({"package": [f"No package exists for order {order_id}"]})

        if package.is_confirmed:
            return PackageCreationResult(
                tracking_number=package.package_id,
                carrier_accepted=True,
                already_existed=True,
            )

        company = find_active_company(package.shipping_company_id)
        if company is None or not company.has_api_credentials:
            order = current_domain.repository_for(Order).get(order_id)
            resolved = resolve_shipping_company(order)
            if company is None or resolved.id != company.id:
                logger.info(
                    "Package reassigned to another shipping company",
                    order_id=str(order_id),
                    package_id=package.package_id,
                    company=resolved.name,
                )
                package.reassign_carrier(str(resolved.id))
                repo.add(package)
            company = resolved

        logger.info("Resending package", order_id=str(order_id), package_id=package.package_id, company=company.name)
        return push_to_carrier(package, company)


def resend_pending_packages() -> ResendSweepResult:
    """Resend every pending package whose carrier has an API configured."""
    sweep = ResendSweepResult()
    pending = current_domain.repository_for(Package).find_pending()

    for package in pending:
        company = find_active_company(package.shipping_company_id)
        if company is None or not company.has_api_credentials:
            sweep.skipped += 1
            continue

        order_id = str(package.order_id)
        try:
            result = resend_package(order_id)
        except ValidationError as exc:
            logger.error("Resend failed", order_id=order_id, package_id=package.package_id, error=str(exc.messages))
            sweep.outcomes.append(
                ResendOutcome(
                    order_id=order_id,
                    tracking_number=package.package_id,
                    carrier_accepted=False,
                    error=str(exc.messages),
                )
            )
            continue

        sweep.outcomes.append(
            ResendOutcome(
                order_id=order_id,
                tracking_number=result.tracking_number,
                carrier_accepted=result.carrier_accepted,
                error=result.error,
            )
        )

    logger.info(
        "Pending package sweep finished",
        resent=len(sweep.outcomes),
        confirmed=len(sweep.confirmed),
        skipped=sweep.skipped,
    )
    return sweep
