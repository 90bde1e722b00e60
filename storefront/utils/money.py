# storefront/utils/money.py

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

Money = Decimal
CENT = Decimal("0.01")


def D(x) -> Money:
    if isinstance(x, Decimal):
        return x
    if isinstance(x, bool):
        raise InvalidOperation(f"not a money amount: {x!r}")
    return Decimal(str(x if x is not None else "0"))


def round_money(x: Money) -> Money:
    return D(x).quantize(CENT, rounding=ROUND_HALF_UP)


def money_sum(values) -> Money:
    """Sum amounts exactly, then round once to cents."""
    return round_money(sum((D(v) for v in values), Decimal("0")))


def to_float(x) -> float:
    return float(round_money(x))
