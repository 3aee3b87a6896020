"""Shared BDD fixtures and step definitions for settlement scenarios."""

from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then, when

from settlement.order.order import Order
from settlement.order.workflow import change_order_status
from settlement.wallet import ledger


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('an active village {village_id:d} in "{city}"'))
def active_village(make_village, village_id, city):
    make_village(village_id=village_id, city=city)


@given(
    parsers.cfparse(
        'a marketer order "{order_number}" in "{status}" status with profit {profit:g} and commission {commission:g}'
    ),
    target_fixture="order",
)
def marketer_order(make_order, order_number, status, profit, commission):
    return make_order(
        order_number=order_number,
        status=status,
        marketer_profit=profit,
        commission=commission,
    )


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the order status changes to "{status}"'), target_fixture="outcome")
def change_status(order, status):
    return change_order_status(str(order.id), status)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert current_domain.repository_for(Order).get(str(order.id)).status == status


@then(parsers.cfparse('wallet "{user_id}" has balance {balance:g}'))
def wallet_balance(user_id, balance):
    assert ledger.find_wallet(user_id).balance == balance
