"""BDD tests for distributing and reversing order profits."""

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

from settlement.order.order import Order
from settlement.profits.distribution import distribute_order_profits
from settlement.wallet import ledger

scenarios("features/profit_settlement.feature")

PLATFORM_ACCOUNT = "platform-admin"


@pytest.fixture()
def settlement_error():
    """Container for a captured settlement failure."""
    return {"exc": None}


@given("the platform wallet rejects credits")
def platform_rejects_credits(monkeypatch):
    real_credit = ledger.credit

    def failing_credit(user_id, *args, **kwargs):
        if user_id == PLATFORM_ACCOUNT:
            raise ValidationError({"wallet": ["Ledger unavailable"]})
        return real_credit(user_id, *args, **kwargs)

    monkeypatch.setattr("settlement.profits.distribution.ledger.credit", failing_credit)


@when("profits are distributed for the order", target_fixture="distribution")
def distribute(order, settlement_error):
    try:
        return distribute_order_profits(str(order.id))
    except ValidationError as exc:
        settlement_error["exc"] = exc
        return None


@then(parsers.cfparse('the settlement was skipped as "{reason}"'))
def settlement_skipped(distribution, reason):
    assert distribution.distributed is False
    assert distribution.reason == reason


@then("the settlement fails")
def settlement_fails(settlement_error):
    assert settlement_error["exc"] is not None


@then("the order profits are marked distributed")
def profits_marked(order):
    assert current_domain.repository_for(Order).get(str(order.id)).profits_distributed is True


@then("the order profits are not marked distributed")
def profits_not_marked(order):
    assert current_domain.repository_for(Order).get(str(order.id)).profits_distributed is False
