# ------- storefront/utils/decorators.py -------
from functools import wraps

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import StorageFailure
from ..extensions import db


def storage_guard(fn):
    """Roll back and re-raise database errors as StorageFailure."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error("storage failure in %s: %s", fn.__name__, e)
            raise StorageFailure() from e
    return wrapper
