# storefront/model/cart.py
from __future__ import annotations
from sqlalchemy.sql import func
from ..extensions import db


class CartItem(db.Model):
    __tablename__ = "cart_item"
    __table_args__ = (
        db.UniqueConstraint("cart_scope", "product_id", name="uq_cart_item_scope_product"),
    )

    id = db.Column(db.Integer, primary_key=True)
    cart_scope = db.Column(db.String(64), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("product.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    product = db.relationship("Product", lazy="joined")

    def as_api(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "quantity": self.quantity,
        }
