"""Tests for out-of-band settlement of delivered orders."""

from unittest.mock import patch

from protean.exceptions import ValidationError

from settlement.profits.batch import distribute_pending_profits, pending_settlements
from settlement.profits.distribution import distribute_order_profits


class TestPendingSettlements:
    def test_lists_delivered_unsettled_orders(self, make_order):
        delivered = make_order(order_number="ORD-1", status="delivered")
        settled = make_order(order_number="ORD-2", status="delivered")
        make_order(order_number="ORD-3", status="shipped")
        distribute_order_profits(str(settled.id))

        assert [str(o.id) for o in pending_settlements()] == [str(delivered.id)]


class TestDistributePending:
    def test_distributes_all_pending(self, make_order):
        first = make_order(order_number="ORD-1", status="delivered")
        second = make_order(order_number="ORD-2", status="delivered")

        batch = distribute_pending_profits()

        assert sorted(batch.succeeded) == sorted([str(first.id), str(second.id)])
        assert batch.failed == []
        assert pending_settlements() == []

    def test_explicit_ids_report_skips(self, make_order):
        delivered = make_order(order_number="ORD-1", status="delivered")
        shipped = make_order(order_number="ORD-2", status="shipped")

        batch = distribute_pending_profits([str(delivered.id), str(shipped.id)])

        assert batch.succeeded == [str(delivered.id)]
        assert batch.skipped == [{"order_id": str(shipped.id), "reason": "order_not_delivered"}]
        assert batch.processed == 2

    def test_failures_do_not_stop_the_batch(self, make_order):
        failing = make_order(order_number="ORD-1", status="delivered", customer_id="marketer-fail")
        healthy = make_order(order_number="ORD-2", status="delivered", customer_id="marketer-ok")
        from settlement.wallet import ledger

        real_credit = ledger.credit

        def failing_credit(user_id, *args, **kwargs):
            if user_id == "marketer-fail":
                raise ValidationError({"wallet": ["Ledger unavailable"]})
            return real_credit(user_id, *args, **kwargs)

        with patch("settlement.profits.distribution.ledger.credit", side_effect=failing_credit):
            batch = distribute_pending_profits([str(failing.id), str(healthy.id)])

        assert batch.succeeded == [str(healthy.id)]
        assert [f["order_id"] for f in batch.failed] == [str(failing.id)]

    def test_unknown_order_is_reported_as_failure(self):
        batch = distribute_pending_profits(["missing-order"])
        assert batch.failed[0]["order_id"] == "missing-order"
