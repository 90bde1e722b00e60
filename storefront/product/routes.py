from ..services.catalog import get_product, list_products
from ..utils.api import ok
from . import bp


@bp.get("")
def list_all():
    products = list_products()
    return ok("products", {"items": [p.as_api() for p in products], "total": len(products)})


@bp.get("/<int:product_id>")
def get_one(product_id: int):
    return ok("product", get_product(product_id).as_api())
