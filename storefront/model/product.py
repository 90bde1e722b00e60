# storefront/model/product.py
from sqlalchemy.sql import func

from ..extensions import db
from ..utils.money import D, round_money


class Product(db.Model):
    __tablename__ = "product"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    price = db.Column(db.Float, nullable=False, default=0.0)
    description = db.Column(db.Text)
    image = db.Column(db.String(1024))

    created_at = db.Column(db.DateTime, server_default=func.now())

    def price_dec(self):
        return round_money(D(self.price))

    def as_api(self):
        return {
            "id": self.id,
            "name": self.name,
            "price": float(self.price_dec()),
            "description": self.description,
            "image": self.image,
        }
