from .cart import CartItem
from .product import Product
from .receipt import Receipt
