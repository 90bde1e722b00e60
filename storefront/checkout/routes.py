# storefront/checkout/routes.py
from flask import request

from ..services.cart_service import CartStore
from ..services.checkout_service import checkout_cart
from ..utils.api import ok
from ..utils.net import CART_HEADER, get_cart_scope, get_field
from . import bp


@bp.post("")
def checkout():
    """
    Body: { "customer_name" | "customerName": str, "customer_email" | "customerEmail": str }

    Items and totals come from the server-side cart for the X-Cart-Id scope;
    any "cartItems" the client sends are ignored.
    """
    store = CartStore(get_cart_scope())
    data = request.get_json(silent=True) or {}
    receipt = checkout_cart(
        store,
        get_field(data, "customer_name", "customerName"),
        get_field(data, "customer_email", "customerEmail"),
    )
    resp = ok("checkout completed", receipt.as_api(), status=201)
    resp.headers[CART_HEADER] = store.scope
    resp.headers["X-Receipt-Id"] = receipt.receipt_id
    return resp
