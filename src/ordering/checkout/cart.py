"""Cart payload parsing and the charge total."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ordering.checkout.errors import InvalidRequest

CENT = Decimal("0.01")


@dataclass(frozen=True)
class CartLine:
    """A cart line as the client sent it.

    The price is the client's snapshot and is not re-read from the catalog,
    so a tampered payload can under-charge.
    """

    product_id: str
    price: Decimal


def parse_cart(payload) -> list[CartLine]:
    """Parse the client cart ``[{_id, price, ...}]``; keys other than those two are ignored."""
    if not isinstance(payload, list) or not payload:
        raise InvalidRequest("Missing nonce or cart")

    lines = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise InvalidRequest(f"Cart line {index} is not an object")

        product_id = item.get("_id")
        if not product_id or not isinstance(product_id, str):
            raise InvalidRequest(f"Cart line {index} has no product id")

        lines.append(CartLine(product_id=product_id, price=_parse_price(item.get("price"), index)))
    return lines


def _parse_price(value, index: int) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        raise InvalidRequest(f"Cart line {index} has an invalid price")
    try:
        # str() first so binary floats keep their displayed value
        price = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise InvalidRequest(f"Cart line {index} has an invalid price") from exc

    if not price.is_finite() or price < 0:
        raise InvalidRequest(f"Cart line {index} has an invalid price")
    return price


def cart_total(lines: list[CartLine]) -> Decimal:
    """Sum of line prices rounded half-up to the cent."""
    total = sum((line.price for line in lines), Decimal("0"))
    try:
        return total.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        # More digits than the decimal context can hold at cent precision
        raise InvalidRequest("Cart total is out of range") from exc
