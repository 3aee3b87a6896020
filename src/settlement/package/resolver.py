"""Shipping resolution — which carrier takes an order, and is its destination valid.

Carrier precedence: the company named on the order, then the default from
shipping settings, then the first active company. Failures here are fatal
and never retried.
"""

from dataclasses import dataclass

import structlog

from settlement.directory.lookup import (
    active_shipping_companies,
    default_shipping_company_id,
    find_active_company,
    find_active_company_by_name,
    find_village,
)
from settlement.directory.shipping_company import ShippingCompany
from settlement.directory.village import Village
from settlement.errors import InvalidDestination, NoCarrierAvailable
from settlement.order.order import Order

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ShippingResolution:
    company: ShippingCompany
    village: Village


def resolve_shipping_company(order: Order) -> ShippingCompany:
    if order.shipping_company_name:
        company = find_active_company_by_name(order.shipping_company_name)
        if company is not None:
            return company
        logger.warning(
            "Requested shipping company not found among active companies",
            order_id=str(order.id),
            shipping_company_name=order.shipping_company_name,
        )

    default_id = default_shipping_company_id()
    if default_id:
        company = find_active_company(default_id)
        if company is not None:
            logger.debug("Using default shipping company", order_id=str(order.id), company=company.name)
            return company
        logger.warning(
            "Default shipping company is missing or inactive",
            order_id=str(order.id),
            shipping_company_id=str(default_id),
        )

    companies = active_shipping_companies()
    if companies:
        logger.info("Using first active shipping company", order_id=str(order.id), company=companies[0].name)
        return companies[0]

    logger.error("No active shipping company configured", order_id=str(order.id))
    raise NoCarrierAvailable({"shipping_company": ["No active shipping company is configured"]})


def resolve_destination(order: Order) -> Village:
    address = order.shipping_address
    if address is None:
        raise InvalidDestination({"shipping_address": ["Order has no shipping address"]})
    if not address.village_id:
        raise InvalidDestination({"shipping_address": ["Shipping address has no village"]})

    village = find_village(address.village_id)
    if village is None or not village.is_active:
        logger.error(
            "Village not found or inactive",
            order_id=str(order.id),
            village_id=address.village_id,
        )
        raise InvalidDestination({"village_id": [f"Village {address.village_id} is unknown or inactive"]})
    return village


def resolve_shipping(order: Order) -> ShippingResolution:
    company = resolve_shipping_company(order)
    village = resolve_destination(order)

    if not company.serves_city(village.city):
        logger.warning(
            "Shipping company does not list the destination city",
            order_id=str(order.id),
            company=company.name,
            city=village.city,
        )

    return ShippingResolution(company=company, village=village)
