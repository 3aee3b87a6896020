"""Tests for creating a package from an order and registering it with the carrier."""

import pytest
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from settlement.carrier.port import GatewayRejected, GatewaySuccess, GatewayTransportError
from settlement.directory.lookup import find_village
from settlement.directory.shipping_company import ShippingCompany
from settlement.directory.village import Village
from settlement.errors import InvalidDestination, NoCarrierAvailable
from settlement.order.order import Order
from settlement.package.creation import create_package_from_order, should_create_package
from settlement.package.package import Package

UNAVAILABLE = GatewayTransportError(message="Shipping service is temporarily unavailable", status_code=503, retryable=True)


def _package_for(order):
    return current_domain.repository_for(Package).find_by_order_id(str(order.id))


class TestCarrierAccepts:
    def test_package_confirmed_with_carrier_fields(self, make_order, shippable, gateway):
        gateway.configure(GatewaySuccess(tracking_id="EXT-77", delivery_cost=20.0, qr_code="QR-77"))
        order = make_order(status="ready_for_shipping")

        result = create_package_from_order(str(order.id))

        assert result.carrier_accepted is True
        assert result.sent_to_carrier is True
        assert result.tracking_number == 1
        package = _package_for(order)
        assert package.status == "confirmed"
        assert package.external_package_id == "EXT-77"
        assert package.delivery_cost == 20.0
        assert package.qr_code == "QR-77"
        assert package.send_attempts == 1

    def test_carrier_receives_stored_payload(self, make_order, shippable, gateway):
        order = make_order(status="ready_for_shipping")
        create_package_from_order(str(order.id))
        call = gateway.calls[0]
        assert call["endpoint"] == shippable.api_endpoint
        assert call["token"] == shippable.api_token
        assert call["payload"]["barcode"] == "ORD-1001"
        assert call["payload"]["village_id"] == "101"


class TestLocalOnlyCarrier:
    def test_no_api_means_success_without_call(self, make_order, make_company, make_village, gateway):
        make_village()
        make_company(api=False)
        order = make_order(status="ready_for_shipping")

        result = create_package_from_order(str(order.id))

        assert result.carrier_accepted is True
        assert result.sent_to_carrier is False
        assert gateway.calls == []
        assert _package_for(order).status == "pending"

    def test_repeat_call_for_local_package_is_accepted(self, make_order, make_company, make_village, gateway):
        make_village()
        make_company(api=False)
        order = make_order(status="ready_for_shipping")
        create_package_from_order(str(order.id))

        result = create_package_from_order(str(order.id))
        assert result.carrier_accepted is True
        assert result.already_existed is True


class TestCarrierFails:
    def test_unavailable_carrier_leaves_package_pending(self, make_order, shippable, gateway):
        gateway.configure(default=UNAVAILABLE)
        order = make_order(status="ready_for_shipping")

        result = create_package_from_order(str(order.id))

        assert result.carrier_accepted is False
        assert result.retryable is True
        assert result.tracking_number == 1
        assert "temporarily unavailable" in result.error
        assert len(gateway.calls) == 3
        package = _package_for(order)
        assert package.status == "pending"
        assert package.send_attempts == 3
        assert package.last_error == result.error

    def test_rejection_is_not_retried(self, make_order, shippable, gateway):
        gateway.configure(default=GatewayRejected(code=422, messages=("to_phone: The phone is invalid",)))
        order = make_order(status="ready_for_shipping")

        result = create_package_from_order(str(order.id))

        assert result.carrier_accepted is False
        assert result.retryable is False
        assert result.error == "to_phone: The phone is invalid"
        assert len(gateway.calls) == 1

    def test_order_status_is_untouched_by_carrier_failure(self, make_order, shippable, gateway):
        gateway.configure(default=UNAVAILABLE)
        order = make_order(status="ready_for_shipping")
        create_package_from_order(str(order.id))
        assert current_domain.repository_for(Order).get(order.id).status == "ready_for_shipping"


class TestIdempotency:
    def test_confirmed_package_short_circuits(self, make_order, shippable, gateway):
        order = make_order(status="ready_for_shipping")
        first = create_package_from_order(str(order.id))
        second = create_package_from_order(str(order.id))

        assert second.tracking_number == first.tracking_number
        assert second.carrier_accepted is True
        assert second.already_existed is True
        assert len(gateway.calls) == 1

    def test_pending_package_is_not_resent(self, make_order, shippable, gateway):
        gateway.configure(default=UNAVAILABLE)
        order = make_order(status="ready_for_shipping")
        create_package_from_order(str(order.id))

        result = create_package_from_order(str(order.id))

        assert result.carrier_accepted is False
        assert result.already_existed is True
        assert result.retryable is True
        assert len(gateway.calls) == 3

    def test_existing_package_survives_deactivated_village(self, make_order, shippable, gateway):
        order = make_order(status="ready_for_shipping")
        first = create_package_from_order(str(order.id))

        village = find_village(101)
        village.is_active = False
        current_domain.repository_for(Village).add(village)

        second = create_package_from_order(str(order.id))

        assert second.tracking_number == first.tracking_number
        assert second.carrier_accepted is True
        assert second.already_existed is True
        assert len(gateway.calls) == 1

    def test_existing_package_survives_carrier_deactivation(self, make_order, shippable, gateway):
        gateway.configure(default=UNAVAILABLE)
        order = make_order(status="ready_for_shipping")
        create_package_from_order(str(order.id))

        shippable.is_active = False
        current_domain.repository_for(ShippingCompany).add(shippable)

        result = create_package_from_order(str(order.id))

        assert result.tracking_number == 1
        assert result.carrier_accepted is False
        assert result.already_existed is True
        assert result.retryable is True
        assert len(gateway.calls) == 3

    def test_at_most_one_package_per_order(self, make_order, shippable):
        order = make_order(status="ready_for_shipping")
        for _ in range(3):
            create_package_from_order(str(order.id))
        packages = current_domain.repository_for(Package)._dao.query.filter(order_id=str(order.id)).all().items
        assert len(packages) == 1


class TestFatalErrors:
    def test_no_carrier(self, make_order, make_village):
        make_village()
        order = make_order(status="ready_for_shipping")
        with pytest.raises(NoCarrierAvailable):
            create_package_from_order(str(order.id))
        assert _package_for(order) is None

    def test_invalid_village(self, make_order, make_company, gateway):
        make_company()
        order = make_order(status="ready_for_shipping", village_id=555)
        with pytest.raises(InvalidDestination):
            create_package_from_order(str(order.id))
        assert gateway.calls == []
        assert _package_for(order) is None

    def test_unknown_order(self, shippable):
        with pytest.raises(ObjectNotFoundError):
            create_package_from_order("missing-order")


class TestShouldCreatePackage:
    def test_ready_order_without_package(self, make_order, shippable):
        assert should_create_package(make_order(status="ready_for_shipping")) is True

    def test_not_ready(self, make_order, shippable):
        assert should_create_package(make_order(status="processing")) is False

    def test_without_village(self, make_order, shippable):
        assert should_create_package(make_order(status="ready_for_shipping", village_id=None)) is False

    def test_package_already_exists(self, make_order, shippable):
        order = make_order(status="ready_for_shipping")
        create_package_from_order(str(order.id))
        assert should_create_package(order) is False

    def test_no_carrier_configured(self, make_order, make_village):
        make_village()
        assert should_create_package(make_order(status="ready_for_shipping")) is False
