import pytest

from storefront import create_app
from storefront.config import TestConfig
from storefront.extensions import db
from storefront.model import Product
from storefront.services.cart_service import CartStore


@pytest.fixture
def app(tmp_path):
    """App on a throwaway SQLite file, seeded with the demo catalog."""
    app = create_app(TestConfig, SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'storefront.db'}")
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def store(ctx):
    return CartStore("default")


@pytest.fixture
def make_product(ctx):
    def _make(name="Thing", price=1.0, description="", image=None):
        p = Product(name=name, price=price, description=description, image=image)
        db.session.add(p)
        db.session.commit()
        return p
    return _make
