# storefront/services/catalog.py
from flask import current_app

from ..errors import NotFound
from ..extensions import db
from ..model import Product
from ..utils.decorators import storage_guard

# (name, price, description, image)
DEFAULT_PRODUCTS = [
    ("Wireless Headphones", 79.99, "Premium noise-cancelling wireless headphones",
     "https://via.placeholder.com/150?text=Headphones"),
    ("Smart Watch", 199.99, "Fitness tracking smartwatch with heart rate monitor",
     "https://via.placeholder.com/150?text=Smart+Watch"),
    ("Laptop Stand", 49.99, "Ergonomic aluminum laptop stand",
     "https://via.placeholder.com/150?text=Laptop+Stand"),
    ("USB-C Hub", 39.99, "Multi-port USB-C hub with HDMI and SD card reader",
     "https://via.placeholder.com/150?text=USB+Hub"),
    ("Mechanical Keyboard", 129.99, "RGB backlit mechanical keyboard with blue switches",
     "https://via.placeholder.com/150?text=Keyboard"),
    ("Wireless Mouse", 29.99, "Ergonomic wireless mouse with adjustable DPI",
     "https://via.placeholder.com/150?text=Mouse"),
    ("Webcam HD", 69.99, "1080p HD webcam with built-in microphone",
     "https://via.placeholder.com/150?text=Webcam"),
    ("Phone Case", 19.99, "Durable protective phone case",
     "https://via.placeholder.com/150?text=Phone+Case"),
    ("Screen Protector", 14.99, "Tempered glass screen protector",
     "https://via.placeholder.com/150?text=Screen+Protector"),
    ("Charging Cable", 12.99, "Fast charging USB-C cable 6ft",
     "https://via.placeholder.com/150?text=Cable"),
]


@storage_guard
def seed_products(products=None) -> int:
    """Insert the supplier's products if the catalog is empty.

    Returns how many rows were written; 0 when the catalog already has data.
    """
    if db.session.query(Product.id).first() is not None:
        return 0
    rows = DEFAULT_PRODUCTS if products is None else products
    for name, price, description, image in rows:
        db.session.add(Product(name=name, price=price, description=description, image=image))
    db.session.commit()
    current_app.logger.info("catalog seeded with %d products", len(rows))
    return len(rows)


@storage_guard
def list_products():
    return Product.query.order_by(Product.id.asc()).all()


@storage_guard
def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFound("product not found")
    return product
