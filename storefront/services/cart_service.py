import threading
import weakref
from contextlib import contextmanager

from flask import current_app

from ..errors import NotFound, ValidationError
from ..extensions import db
from ..model import CartItem, Product
from ..utils.decorators import storage_guard
from ..utils.money import D, round_money, money_sum

MIN_QUANTITY = 1
MAX_QUANTITY = 99


class ScopeLock:
    """Re-entrant lock for one cart scope."""

    def __init__(self, scope: str):
        self.scope = scope
        self._lock = threading.RLock()

    def __enter__(self):
        self._lock.acquire()
        return self

    def __exit__(self, *exc):
        self._lock.release()


class ScopeLocks:
    """One lock per cart scope, alive only while some CartStore holds it.

    Scopes come from a client header, so entries must not outlive the
    stores using them.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = weakref.WeakValueDictionary()

    def __len__(self):
        with self._guard:
            return len(self._locks)

    def for_scope(self, scope: str) -> ScopeLock:
        with self._guard:
            lock = self._locks.get(scope)
            if lock is None:
                lock = self._locks[scope] = ScopeLock(scope)
            return lock


def validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("quantity must be an integer")
    if not MIN_QUANTITY <= quantity <= MAX_QUANTITY:
        raise ValidationError(f"quantity must be between {MIN_QUANTITY} and {MAX_QUANTITY}")
    return quantity


class CartStore:
    """Cart items of one scope, joined against the product catalog.

    Mutations hold the scope's lock for the whole read-merge-write sequence
    and commit before returning. ``list`` is a single joined SELECT and does
    not lock.
    """

    def __init__(self, scope: str, locks: ScopeLocks | None = None):
        if not scope:
            raise ValidationError("cart scope is required")
        self.scope = scope
        if locks is None:
            locks = current_app.extensions["cart_locks"]
        self._lock = locks.for_scope(scope)

    @contextmanager
    def locked(self):
        with self._lock:
            # drop cached rows so we read what other sessions committed
            db.session.expire_all()
            yield self

    def _get_item(self, item_id) -> CartItem:
        item = CartItem.query.filter_by(id=item_id, cart_scope=self.scope).first()
        if item is None:
            raise NotFound("cart item not found")
        return item

    @storage_guard
    def add_item(self, product_id, quantity):
        """Add ``quantity`` of a product, merging into an existing line.

        Returns ``(item, created)``. A merge that would exceed the maximum
        quantity is rejected and leaves the existing line untouched.
        """
        validate_quantity(quantity)
        with self.locked():
            product = db.session.get(Product, product_id)
            if product is None:
                raise NotFound("product not found")

            item = CartItem.query.filter_by(cart_scope=self.scope, product_id=product.id).first()
            if item:
                new_qty = item.quantity + quantity
                if new_qty > MAX_QUANTITY:
                    raise ValidationError(
                        f"quantity must be between {MIN_QUANTITY} and {MAX_QUANTITY}",
                        data={"current_quantity": item.quantity},
                    )
                item.quantity = new_qty
                created = False
            else:
                item = CartItem(cart_scope=self.scope, product_id=product.id, quantity=quantity)
                db.session.add(item)
                created = True

            db.session.commit()
            current_app.logger.debug(
                "cart %s: product %s now x%d", self.scope, product.id, item.quantity)
            return item, created

    @storage_guard
    def update_quantity(self, item_id, quantity) -> CartItem:
        validate_quantity(quantity)
        with self.locked():
            item = self._get_item(item_id)
            item.quantity = quantity
            db.session.commit()
            current_app.logger.debug("cart %s: item %s set to x%d", self.scope, item_id, quantity)
            return item

    @storage_guard
    def remove_item(self, item_id):
        with self.locked():
            item = self._get_item(item_id)
            db.session.delete(item)
            db.session.commit()
            current_app.logger.debug("cart %s: item %s removed", self.scope, item_id)

    @storage_guard
    def clear(self) -> int:
        with self.locked():
            n = CartItem.query.filter_by(cart_scope=self.scope).delete(synchronize_session=False)
            db.session.commit()
            current_app.logger.debug("cart %s: cleared %d items", self.scope, n)
            return n

    @storage_guard
    def list(self):
        """Return ``{"items": [...], "total": Decimal}`` in insertion order."""
        rows = (
            db.session.query(CartItem.id, CartItem.product_id, CartItem.quantity,
                             Product.name, Product.price, Product.image)
            .join(Product, CartItem.product_id == Product.id)
            .filter(CartItem.cart_scope == self.scope)
            .order_by(CartItem.id.asc())
            .all()
        )
        items = []
        for item_id, product_id, qty, name, price, image in rows:
            unit = D(price)
            items.append({
                "id": item_id,
                "product_id": product_id,
                "quantity": qty,
                "name": name,
                "price": unit,
                "image": image,
                "subtotal": unit * qty,
            })
        return {"items": items, "total": money_sum(i["subtotal"] for i in items)}


def cart_as_api(view):
    return {
        "items": [
            {**line, "price": float(round_money(line["price"])), "subtotal": float(round_money(line["subtotal"]))}
            for line in view["items"]
        ],
        "total": float(view["total"]),
    }
