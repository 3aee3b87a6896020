"""Read helpers over the carrier, village and settings directories."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from settlement.directory.settings import DEFAULT_SETTINGS_KEY, ShippingSettings
from settlement.directory.shipping_company import ShippingCompany
from settlement.directory.village import Village


def active_shipping_companies() -> list[ShippingCompany]:
    repo = current_domain.repository_for(ShippingCompany)
    return repo._dao.query.filter(is_active=True).order_by("name").all().items


def find_active_company_by_name(name: str) -> ShippingCompany | None:
    repo = current_domain.repository_for(ShippingCompany)
    results = repo._dao.query.filter(name=name, is_active=True).all().items
    return results[0] if results else None


def find_active_company(company_id: str) -> ShippingCompany | None:
    try:
        company = current_domain.repository_for(ShippingCompany).get(company_id)
    except ObjectNotFoundError:
        return None
    return company if company.is_active else None


def find_village(village_id: int) -> Village | None:
    repo = current_domain.repository_for(Village)
    results = repo._dao.query.filter(village_id=village_id).all().items
    return results[0] if results else None


def default_shipping_company_id() -> str | None:
    try:
        settings = current_domain.repository_for(ShippingSettings).get(DEFAULT_SETTINGS_KEY)
    except ObjectNotFoundError:
        return None
    return settings.default_shipping_company_id
