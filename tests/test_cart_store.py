import gc
import threading
from decimal import Decimal

import pytest

from storefront.errors import NotFound, ValidationError
from storefront.extensions import db
from storefront.model import CartItem, Receipt
from storefront.services.cart_service import MAX_QUANTITY, CartStore, ScopeLocks
from storefront.services.checkout_service import checkout_cart


def _quantities(scope="default"):
    return [(i.product_id, i.quantity) for i in CartItem.query.filter_by(cart_scope=scope).order_by(CartItem.id)]


class TestAddItem:
    @pytest.mark.parametrize("qty", [1, 2, 50, 99])
    def test_accepts_quantities_in_range(self, store, qty):
        item, created = store.add_item(1, qty)
        assert created is True
        assert item.product_id == 1
        assert item.quantity == qty

    @pytest.mark.parametrize("qty", [0, -1, 100, 1000])
    def test_rejects_quantities_out_of_range(self, store, qty):
        with pytest.raises(ValidationError):
            store.add_item(1, qty)
        assert _quantities() == []

    @pytest.mark.parametrize("qty", [1.5, "3", None, True])
    def test_rejects_non_integer_quantities(self, store, qty):
        with pytest.raises(ValidationError):
            store.add_item(1, qty)

    def test_unknown_product(self, store):
        with pytest.raises(NotFound):
            store.add_item(9999, 1)
        assert _quantities() == []

    def test_repeat_add_merges_into_one_item(self, store):
        first, _ = store.add_item(2, 2)
        second, created = store.add_item(2, 3)
        assert created is False
        assert second.id == first.id
        assert _quantities() == [(2, 5)]

    def test_merge_up_to_the_limit(self, store):
        store.add_item(2, 98)
        item, _ = store.add_item(2, 1)
        assert item.quantity == MAX_QUANTITY

    def test_merge_over_limit_leaves_item_unchanged(self, store):
        store.add_item(2, 60)
        with pytest.raises(ValidationError):
            store.add_item(2, 40)
        assert _quantities() == [(2, 60)]


class TestUpdateRemove:
    def test_update_overwrites_quantity(self, store):
        item, _ = store.add_item(1, 4)
        updated = store.update_quantity(item.id, 7)
        assert updated.quantity == 7
        assert _quantities() == [(1, 7)]

    @pytest.mark.parametrize("qty", [0, 100])
    def test_update_out_of_range(self, store, qty):
        item, _ = store.add_item(1, 4)
        with pytest.raises(ValidationError):
            store.update_quantity(item.id, qty)
        assert _quantities() == [(1, 4)]

    def test_update_unknown_item(self, store):
        store.add_item(1, 4)
        with pytest.raises(NotFound):
            store.update_quantity(12345, 2)
        assert _quantities() == [(1, 4)]

    def test_remove(self, store):
        a, _ = store.add_item(1, 1)
        store.add_item(3, 1)
        store.remove_item(a.id)
        assert _quantities() == [(3, 1)]

    def test_remove_unknown_item(self, store):
        with pytest.raises(NotFound):
            store.remove_item(42)

    def test_clear_is_idempotent(self, store):
        store.add_item(1, 1)
        store.add_item(2, 1)
        assert store.clear() == 2
        assert store.clear() == 0
        assert store.list()["items"] == []


class TestList:
    def test_total_is_rounded_sum_of_subtotals(self, store, make_product):
        a = make_product("A", 10.50)
        b = make_product("B", 20.25)
        c = make_product("C", 5.75)
        for p in (a, b, c):
            store.add_item(p.id, 1)

        view = store.list()
        assert [i["subtotal"] for i in view["items"]] == [Decimal("10.50"), Decimal("20.25"), Decimal("5.75")]
        assert view["total"] == Decimal("36.50")

    def test_lines_join_product_data_in_insertion_order(self, store):
        store.add_item(3, 2)
        store.add_item(1, 1)
        items = store.list()["items"]
        assert [i["product_id"] for i in items] == [3, 1]
        assert items[0]["name"] == "Laptop Stand"
        assert items[0]["price"] == Decimal("49.99")
        assert items[0]["subtotal"] == Decimal("99.98")
        assert items[0]["image"].startswith("https://")

    def test_total_uses_quantity_times_price(self, store):
        store.add_item(1, 3)   # 79.99
        store.add_item(10, 2)  # 12.99
        assert store.list()["total"] == Decimal("265.95")

    def test_empty_cart(self, store):
        assert store.list() == {"items": [], "total": Decimal("0.00")}


class TestScopes:
    def test_scopes_are_isolated(self, ctx):
        alice, bob = CartStore("alice"), CartStore("bob")
        alice.add_item(1, 1)
        bob.add_item(1, 2)
        assert [i["quantity"] for i in alice.list()["items"]] == [1]
        assert [i["quantity"] for i in bob.list()["items"]] == [2]

        alice.clear()
        assert alice.list()["items"] == []
        assert len(bob.list()["items"]) == 1

    def test_item_from_another_scope_is_not_found(self, ctx):
        item, _ = CartStore("alice").add_item(1, 1)
        with pytest.raises(NotFound):
            CartStore("bob").update_quantity(item.id, 3)
        with pytest.raises(NotFound):
            CartStore("bob").remove_item(item.id)

    def test_scope_is_required(self, ctx):
        with pytest.raises(ValidationError):
            CartStore("")


class TestConcurrency:
    def test_concurrent_adds_do_not_lose_updates(self, app):
        workers = 8
        barrier = threading.Barrier(workers)
        errors = []

        def worker():
            with app.app_context():
                try:
                    barrier.wait()
                    CartStore("default").add_item(4, 1)
                except Exception as e:  # surfaced below
                    errors.append(e)
                finally:
                    db.session.remove()

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        with app.app_context():
            assert _quantities() == [(4, workers)]

    @pytest.mark.parametrize("round_", range(5))
    def test_add_racing_checkout_is_never_lost(self, app, round_):
        with app.app_context():
            CartStore("default").add_item(1, 1)

        barrier = threading.Barrier(2)
        errors = []
        receipts = []

        def shopper():
            with app.app_context():
                try:
                    barrier.wait()
                    receipts.append(checkout_cart(CartStore("default"), "Ann", "ann@example.com").receipt_id)
                except Exception as e:  # surfaced below
                    errors.append(e)
                finally:
                    db.session.remove()

        def second_tab():
            with app.app_context():
                try:
                    barrier.wait()
                    CartStore("default").add_item(5, 1)
                except Exception as e:  # surfaced below
                    errors.append(e)
                finally:
                    db.session.remove()

        threads = [threading.Thread(target=shopper), threading.Thread(target=second_tab)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        with app.app_context():
            receipt = Receipt.query.filter_by(receipt_id=receipts[0]).one()
            in_receipt = [line["product_id"] for line in receipt.items_json].count(5)
            in_cart = [pid for pid, _ in _quantities()].count(5)
            assert in_receipt + in_cart == 1


class TestScopeLocks:
    def test_stores_of_one_scope_share_a_lock(self):
        locks = ScopeLocks()
        assert locks.for_scope("a") is locks.for_scope("a")
        assert locks.for_scope("a") is not locks.for_scope("b")

    def test_lock_is_dropped_with_its_last_store(self, ctx):
        locks = ScopeLocks()
        store = CartStore("visitor", locks=locks)
        assert len(locks) == 1
        del store
        gc.collect()
        assert len(locks) == 0

    def test_lock_is_reentrant(self, store):
        with store.locked():
            with store.locked():
                store.add_item(1, 1)
        assert _quantities() == [(1, 1)]
