from flask import Blueprint

bp = Blueprint("receipt", __name__, url_prefix="/api/receipts")

from . import routes  # noqa: E402,F401
