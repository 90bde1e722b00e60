# storefront/receipt/routes.py

from flask import request

from ..services.receipt_service import get_receipt, list_receipts
from ..utils.api import ok
from ..utils.net import parse_int
from . import bp


@bp.get("")
def list_all():
    """
    Query params:
      - page, per_page
      - cart_scope=...
    """
    page = parse_int(request.args.get("page", 1), "page")
    per = parse_int(request.args.get("per_page", 20), "per_page")
    paged = list_receipts(page=page, per_page=per, cart_scope=request.args.get("cart_scope"))

    return ok("receipts", {
        "page": paged.page, "per_page": paged.per_page, "total": paged.total,
        "items": [r.as_api(with_items=False) for r in paged.items],
    })


@bp.get("/<receipt_id>")
def get_one(receipt_id: str):
    return ok("receipt", get_receipt(receipt_id).as_api())
