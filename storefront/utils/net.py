# storefront/utils/net.py
import re

from flask import current_app, request

from ..errors import ValidationError

CART_HEADER = "X-Cart-Id"
MAX_SCOPE_LEN = 64
_INT_RE = re.compile(r"-?\d+", re.ASCII)


def get_cart_scope():
    # honor a client-held cart id, otherwise the single implicit cart
    scope = (request.headers.get(CART_HEADER) or "").strip()
    if not scope:
        return current_app.config["DEFAULT_CART_SCOPE"]
    if len(scope) > MAX_SCOPE_LEN:
        raise ValidationError(f"{CART_HEADER} must be at most {MAX_SCOPE_LEN} characters")
    return scope


def get_field(data, *names, default=None):
    """First present key among ``names`` (snake_case or the client's camelCase)."""
    for n in names:
        if n in data:
            return data[n]
    return default


def parse_int(v, field):
    if isinstance(v, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(v, int):
        return v
    if isinstance(v, float) and v.is_integer():
        return int(v)
    if isinstance(v, str) and _INT_RE.fullmatch(v.strip()):
        return int(v.strip())
    raise ValidationError(f"{field} must be an integer")
