import re
import uuid
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import StorageFailure, ValidationError
from ..extensions import db
from ..model import Receipt
from ..utils.money import D, money_sum, to_float

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

RECEIPT_PREFIX = "REC-"


def new_receipt_id() -> str:
    return RECEIPT_PREFIX + uuid.uuid4().hex[:16].upper()


def _validate_customer(customer_name, customer_email):
    name = (customer_name or "").strip() if isinstance(customer_name, str) else ""
    email = (customer_email or "").strip() if isinstance(customer_email, str) else ""
    if not name or not email:
        raise ValidationError("customer name and email are required")
    if not EMAIL_RE.match(email):
        raise ValidationError("invalid email format")
    return name, email


def _snapshot_lines(snapshot):
    lines = []
    for entry in snapshot:
        try:
            subtotal = D(entry["subtotal"]) if entry["subtotal"] is not None else None
        except (KeyError, TypeError, InvalidOperation):
            raise ValidationError("every cart item needs a numeric subtotal")
        if subtotal is None or not subtotal.is_finite():
            raise ValidationError("every cart item needs a numeric subtotal")
        lines.append({**entry, "subtotal": subtotal})
    return lines


def _line_as_json(line):
    out = dict(line)
    out["subtotal"] = to_float(line["subtotal"])
    if isinstance(out.get("price"), Decimal):
        out["price"] = to_float(out["price"])
    return out


def checkout(store, snapshot, customer_name, customer_email) -> Receipt:
    """Turn a cart snapshot into a receipt and empty the cart.

    The total is summed from the snapshot's own subtotals. Nothing is written
    unless validation passes. A failed receipt write is logged and the
    checkout still completes; the cart is cleared either way.
    """
    if not snapshot:
        raise ValidationError("cart is empty")
    name, email = _validate_customer(customer_name, customer_email)
    lines = _snapshot_lines(snapshot)

    receipt_id = new_receipt_id()
    with store.locked():
        receipt = Receipt(
            receipt_id=receipt_id,
            cart_scope=store.scope,
            customer_name=name,
            customer_email=email,
            items_json=[_line_as_json(l) for l in lines],
            total=money_sum(l["subtotal"] for l in lines),
            status="completed",
            created_at=datetime.now(timezone.utc),
        )
        saved = True
        try:
            db.session.add(receipt)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            saved = False
            current_app.logger.exception("receipt %s was not saved", receipt_id)

        try:
            store.clear()
        except StorageFailure as e:
            # the receipt may already be on record
            current_app.logger.error(
                "cart %s not cleared after checkout %s (receipt saved: %s)", store.scope, receipt_id, saved)
            e.data = {**(e.data or {}), "receipt_id": receipt_id, "receipt_saved": saved}
            raise

    current_app.logger.info(
        "checkout %s completed for cart %s: total %s", receipt_id, store.scope, receipt.total)
    return receipt


def checkout_cart(store, customer_name, customer_email) -> Receipt:
    """Check out whatever the server holds for the store's scope."""
    with store.locked():
        view = store.list()
        return checkout(store, view["items"], customer_name, customer_email)
