# storefront/cart/routes.py
from __future__ import annotations
from flask import request

from ..errors import ValidationError
from ..services.cart_service import CartStore, cart_as_api
from ..utils.api import ok
from ..utils.net import CART_HEADER, get_cart_scope, get_field, parse_int
from . import bp


def _store() -> CartStore:
    return CartStore(get_cart_scope())


def _with_cart_header(resp, store: CartStore):
    resp.headers[CART_HEADER] = store.scope
    return resp


def _quantity_from(data):
    qty = get_field(data, "quantity", "qty")
    if qty is None:
        raise ValidationError("quantity is required")
    return parse_int(qty, "quantity")


# ---- endpoints -------------------------------------------------------------

@bp.get("")
def get_cart():
    store = _store()
    return _with_cart_header(ok("cart", cart_as_api(store.list())), store)


@bp.post("")
def add_item():
    """
    Body: { "product_id" | "productId": int, "quantity" | "qty": int }
    Header: X-Cart-Id: <scope>   (optional)
    """
    store = _store()
    data = request.get_json(silent=True) or {}
    product_id = get_field(data, "product_id", "productId")
    if product_id is None:
        raise ValidationError("product_id is required")
    product_id = parse_int(product_id, "product_id")
    qty = _quantity_from(data)

    item, created = store.add_item(product_id, qty)
    if created:
        resp = ok("item added to cart", item.as_api(), status=201)
    else:
        resp = ok("cart updated", item.as_api(), status=200)
    return _with_cart_header(resp, store)


@bp.put("/<int:item_id>")
@bp.patch("/<int:item_id>")
def update_item(item_id: int):
    """Body: { "quantity": int } — replaces the quantity, does not add."""
    store = _store()
    data = request.get_json(silent=True) or {}
    item = store.update_quantity(item_id, _quantity_from(data))
    return _with_cart_header(ok("cart updated", item.as_api()), store)


@bp.delete("/<int:item_id>")
def remove_item(item_id: int):
    store = _store()
    store.remove_item(item_id)
    return _with_cart_header(ok("item removed from cart", {"id": item_id}), store)


# ---- clear all items (empty the cart, keep the same scope) -----------------
@bp.delete("")
def clear_cart():
    store = _store()
    removed = store.clear()
    return _with_cart_header(ok("all items removed", {"removed": removed}), store)
