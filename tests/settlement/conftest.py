import json
from unittest.mock import patch

import pytest
from protean.integrations.pytest import DomainFixture
from protean.utils.globals import current_domain

from settlement.carrier import reset_gateway, set_gateway
from settlement.carrier.fake_adapter import FakeCarrierGateway
from settlement.config import reset_settings
from settlement.directory.settings import ShippingSettings
from settlement.directory.shipping_company import ShippingCompany
from settlement.directory.village import Village
from settlement.notifier import reset_notifier, set_notifier
from settlement.notifier.fake_adapter import FakeNotificationSink
from settlement.order.order import Order

PLATFORM_ACCOUNT = "platform-admin"

DEFAULT_ITEMS = [{"product_name": "Olive Oil", "quantity": 2, "unit_price": 50.0}]


@pytest.fixture(scope="session")
def settlement_bed():
    from settlement.domain import settlement

    bed = DomainFixture(settlement)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _env(monkeypatch):
    monkeypatch.setenv("PLATFORM_ACCOUNT_ID", PLATFORM_ACCOUNT)
    monkeypatch.setenv("CARRIER_GATEWAY", "fake")
    monkeypatch.delenv("CARRIER_MAX_ATTEMPTS", raising=False)
    monkeypatch.delenv("CARRIER_BACKOFF_SECONDS", raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def _ctx(settlement_bed, _env):
    with settlement_bed.domain_context():
        yield
        for _, provider in current_domain.providers.items():
            provider._data_reset()


@pytest.fixture(autouse=True)
def sleep():
    """Backoff sleeps are recorded, never slept."""
    with patch("settlement.package.dispatch.time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture(autouse=True)
def gateway():
    fake = FakeCarrierGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()


@pytest.fixture(autouse=True)
def notifier():
    fake = FakeNotificationSink()
    set_notifier(fake)
    yield fake
    reset_notifier()


@pytest.fixture()
def make_company():
    def _make(name="Fast Couriers", api=True, is_active=True, cities=None, default=False):
        company = ShippingCompany(
            name=name,
            is_active=is_active,
            api_endpoint="https://carrier.example.com/api/packages" if api else None,
            api_token="secret-token" if api else None,
            shipping_cities=json.dumps(cities) if cities else None,
        )
        current_domain.repository_for(ShippingCompany).add(company)
        if default:
            current_domain.repository_for(ShippingSettings).add(
                ShippingSettings(default_shipping_company_id=str(company.id))
            )
        return company

    return _make


@pytest.fixture()
def make_village():
    def _make(village_id=101, name="Al-Bireh", city="Ramallah", is_active=True):
        village = Village(village_id=village_id, name=name, city=city, is_active=is_active)
        current_domain.repository_for(Village).add(village)
        return village

    return _make


@pytest.fixture()
def make_order():
    def _make(
        order_number="ORD-1001",
        status="processing",
        total=200.0,
        commission=20.0,
        marketer_profit=30.0,
        customer_role="marketer",
        customer_id="marketer-1",
        village_id=101,
        shipping_company_name=None,
        delivery_notes=None,
        with_address=True,
        items_data=None,
    ):
        address = None
        if with_address:
            address = {
                "full_name": "Lina Haddad",
                "phone": "0599000000",
                "street": "Main Street 5",
                "city": "Ramallah",
                "notes": "Second floor",
                "village_id": village_id,
            }
        order = Order.create(
            order_number=order_number,
            customer_id=customer_id,
            customer_role=customer_role,
            total=total,
            commission=commission,
            marketer_profit=marketer_profit,
            shipping_address=address,
            shipping_company_name=shipping_company_name,
            delivery_notes=delivery_notes,
            items_data=items_data if items_data is not None else DEFAULT_ITEMS,
            status=status,
        )
        current_domain.repository_for(Order).add(order)
        return order

    return _make


@pytest.fixture()
def shippable(make_company, make_village):
    """An active carrier with an API and an active destination village."""
    make_village()
    return make_company()
