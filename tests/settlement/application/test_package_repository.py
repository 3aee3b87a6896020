"""Tests for package materialization and tracking-number allocation."""

import threading

from protean.utils.globals import current_domain

from settlement.domain import settlement
from settlement.order.order import Order
from settlement.package.package import Package
from settlement.package.repository import create_or_get_package
from settlement.package.sequence import Counter, next_package_id


class TestSequence:
    def test_starts_at_one_and_increments(self):
        assert next_package_id() == 1
        assert next_package_id() == 2
        assert current_domain.repository_for(Counter).get("package_id").sequence == 2

    def test_concurrent_allocations_are_distinct(self):
        allocated = []
        lock = threading.Lock()

        def allocate():
            with settlement.domain_context():
                value = next_package_id()
            with lock:
                allocated.append(value)

        threads = [threading.Thread(target=allocate) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(allocated) == list(range(1, 21))


class TestCreateOrGet:
    def test_creates_pending_package_and_links_order(self, make_order, shippable):
        order = make_order()
        package, existed = create_or_get_package(order, str(shippable.id))

        assert existed is False
        assert package.package_id == 1
        assert package.status == "pending"
        assert package.shipping_company_id == str(shippable.id)

        stored_order = current_domain.repository_for(Order).get(order.id)
        assert stored_order.package_id == package.package_id

    def test_existing_package_is_returned_unchanged(self, make_order, shippable):
        order = make_order()
        first, _ = create_or_get_package(order, str(shippable.id))
        second, existed = create_or_get_package(order, str(shippable.id))

        assert existed is True
        assert second.id == first.id
        assert second.package_id == first.package_id
        assert len(current_domain.repository_for(Package)._dao.query.all().items) == 1

    def test_corrupt_package_is_replaced_by_exactly_one(self, make_order, shippable):
        order = make_order()
        package, _ = create_or_get_package(order, str(shippable.id))
        repo = current_domain.repository_for(Package)
        package.package_id = 0
        repo.add(package)

        replacement, existed = create_or_get_package(order, str(shippable.id))

        assert existed is False
        assert replacement.id != package.id
        assert replacement.has_valid_tracking_number
        packages = repo._dao.query.filter(order_id=str(order.id)).all().items
        assert len(packages) == 1
        assert current_domain.repository_for(Order).get(order.id).package_id == replacement.package_id

    def test_distinct_orders_get_distinct_tracking_numbers(self, make_order, shippable):
        numbers = [
            create_or_get_package(make_order(order_number=f"ORD-{i}"), str(shippable.id))[0].package_id
            for i in range(5)
        ]
        assert numbers == [1, 2, 3, 4, 5]

    def test_find_by_order_id(self, make_order, shippable):
        order = make_order()
        package, _ = create_or_get_package(order, str(shippable.id))
        repo = current_domain.repository_for(Package)
        assert repo.find_by_order_id(str(order.id)).id == package.id
        assert repo.find_by_order_id("missing") is None
        assert repo.find_by_package_id(package.package_id).id == package.id
