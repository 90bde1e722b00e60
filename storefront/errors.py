# storefront/errors.py
from flask import jsonify
from werkzeug.exceptions import HTTPException

from .utils.api import api_error


class StorefrontError(Exception):
    status_code = 500
    message = "internal error"

    def __init__(self, message=None, status_code=None, data=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        if status_code is not None:
            self.status_code = status_code
        self.data = data


class ValidationError(StorefrontError):
    """Malformed or out-of-range input. Reported, never retried."""
    status_code = 400
    message = "invalid request"


class NotFound(StorefrontError):
    status_code = 404
    message = "not found"


class StorageFailure(StorefrontError):
    """The database could not be read or written."""
    status_code = 500
    message = "internal storage error"


def register_error_handlers(app):
    @app.errorhandler(StorefrontError)
    def handle_storefront_error(e):
        r = jsonify(api_error(e.message, e.data))
        r.status_code = e.status_code
        return r

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        r = jsonify(api_error(e.description or e.name))
        r.status_code = e.code or 500
        return r
