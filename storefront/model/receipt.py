# storefront/model/receipt.py
from datetime import timezone

from ..extensions import db
from ..utils.money import D


def _utc_iso(dt):
    # SQLite hands DateTime columns back naive; they were written as UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


class Receipt(db.Model):
    __tablename__ = "receipts"

    id = db.Column(db.Integer, primary_key=True)
    receipt_id = db.Column(db.String(32), unique=True, nullable=False, index=True)
    cart_scope = db.Column(db.String(64), index=True)
    customer_name = db.Column(db.String(255), nullable=False)
    customer_email = db.Column(db.String(255), nullable=False)
    items_json = db.Column(db.JSON)  # cart lines with subtotals at checkout time
    total = db.Column(db.Numeric(12, 2), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="completed")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    def as_api(self, with_items=True):
        data = {
            "receipt_id": self.receipt_id,
            "cart_scope": self.cart_scope,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "total": float(D(self.total)),
            "timestamp": _utc_iso(self.created_at) if self.created_at else None,
            "status": self.status,
        }
        if with_items:
            data["items"] = self.items_json or []
        return data
