import logging

from flask import Flask, jsonify

from .config import Config
from .extensions import db, cors, migrate


def create_app(config_object=Config, **overrides):
    app = Flask(__name__, instance_relative_config=True)

    app.config.from_object(config_object)
    app.config.update(overrides)
    config_object.init_app(app)

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # Init extensions
    db.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
                  expose_headers=["X-Cart-Id", "X-Receipt-Id"])
    migrate.init_app(app, db)

    from .services.cart_service import ScopeLocks
    app.extensions["cart_locks"] = ScopeLocks()

    from .errors import register_error_handlers
    register_error_handlers(app)

    from .cli import register_cli
    register_cli(app)

    # Register blueprints
    from .product import bp as product_bp; app.register_blueprint(product_bp)
    from .cart import bp as cart_bp; app.register_blueprint(cart_bp)
    from .checkout import bp as checkout_bp; app.register_blueprint(checkout_bp)
    from .receipt import bp as receipt_bp; app.register_blueprint(receipt_bp)

    @app.get("/")
    def health():
        return jsonify(ok=True, msg="API running")

    with app.app_context():
        from . import model  # noqa: F401
        db.create_all()
        if app.config["SEED_PRODUCTS"]:
            from .services.catalog import seed_products
            seed_products()

    return app
