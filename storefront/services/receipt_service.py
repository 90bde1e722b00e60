from ..errors import NotFound
from ..model import Receipt
from ..utils.decorators import storage_guard

MAX_PER_PAGE = 100


@storage_guard
def list_receipts(page=1, per_page=20, cart_scope=None):
    q = Receipt.query
    if cart_scope:
        q = q.filter(Receipt.cart_scope == cart_scope)
    page = max(int(page), 1)
    per_page = min(max(int(per_page), 1), MAX_PER_PAGE)
    q = q.order_by(Receipt.created_at.desc(), Receipt.id.desc())
    return q.paginate(page=page, per_page=per_page, error_out=False)


@storage_guard
def get_receipt(receipt_id: str) -> Receipt:
    r = Receipt.query.filter_by(receipt_id=receipt_id).first()
    if r is None:
        raise NotFound("receipt not found")
    return r
