# backend/utils/cart.py
"""Session-backed shopping cart.

The cart lives inside the Starlette session as plain JSON::

    {"items": {"<product id>": {"product_id": 1, "name": "...",
                                "price": "9.99", "quantity": 2}},
     "total_qty": 2, "total_price": "19.98"}

Prices are kept as decimal strings so the session stays JSON serializable.
Totals are recomputed from the items after every mutation.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Iterator, Optional

from schemas.cart import CartLine, CartTotals, CartView

CART_KEY = "cart"
CENTS = Decimal("0.01")


def _empty_cart() -> dict:
    return {"items": {}, "total_qty": 0, "total_price": "0.00"}


def _to_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value)).quantize(CENTS)
    except InvalidOperation:
        return Decimal("0.00")


def parse_quantity(raw: Any) -> Optional[int]:
    """Parse a quantity coming from a form field or a JSON body.

    Returns a positive int, or None when the value is missing, not a whole
    number, or not greater than zero.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            return None
        value = int(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        digits = text[1:] if text[:1] in "+-" else text
        if not digits.isdigit() or not digits.isascii():
            return None
        value = int(text)
    else:
        return None
    return value if value > 0 else None


class SessionCart:
    """Cart operations over the dict stored in the session.

    Every mutation assigns the cart back to the top-level session key; the
    session only notices top-level writes and would otherwise drop the change.
    """

    def __init__(self, data: dict, session: Optional[dict] = None):
        self._data = data
        self._session = session

    @property
    def data(self) -> dict:
        return self._data

    @property
    def is_empty(self) -> bool:
        return self._data["total_qty"] == 0

    def __contains__(self, product_id) -> bool:
        return str(product_id) in self._data["items"]

    def __len__(self) -> int:
        return len(self._data["items"])

    def add_item(self, product, quantity: Any = 1) -> CartTotals:
        # Adding always puts at least one unit in the cart
        qty = parse_quantity(quantity) or 1
        key = str(product.id)
        items = self._data["items"]
        if key in items:
            items[key]["quantity"] += qty
        else:
            items[key] = {
                "product_id": product.id,
                "name": product.name,
                "price": str(_to_decimal(product.price)),
                "quantity": qty,
            }
        return self._recompute()

    def update_item(self, product_id, quantity: Any) -> CartTotals:
        key = str(product_id)
        items = self._data["items"]
        if key not in items:
            return self.totals()
        qty = parse_quantity(quantity)
        if qty is None:
            del items[key]
        else:
            items[key]["quantity"] = qty
        return self._recompute()

    def remove_item(self, product_id) -> CartTotals:
        self._data["items"].pop(str(product_id), None)
        return self._recompute()

    def clear(self) -> CartTotals:
        self._data.clear()
        self._data.update(_empty_cart())
        self._save()
        return self.totals()

    def lines(self) -> Iterator[CartLine]:
        for item in self._data["items"].values():
            price = _to_decimal(item["price"])
            yield CartLine(
                product_id=item["product_id"],
                name=item["name"],
                price=price,
                quantity=item["quantity"],
                line_total=(price * item["quantity"]).quantize(CENTS),
            )

    def totals(self) -> CartTotals:
        return CartTotals(
            total_qty=self._data["total_qty"],
            total_price=_to_decimal(self._data["total_price"]),
        )

    def view(self) -> CartView:
        return CartView(items=list(self.lines()), totals=self.totals())

    def _recompute(self) -> CartTotals:
        total_qty = 0
        total_price = Decimal("0.00")
        for item in self._data["items"].values():
            total_qty += item["quantity"]
            total_price += _to_decimal(item["price"]) * item["quantity"]
        self._data["total_qty"] = total_qty
        self._data["total_price"] = str(total_price.quantize(CENTS))
        self._save()
        return self.totals()

    def _save(self) -> None:
        if self._session is not None:
            self._session[CART_KEY] = self._data


def ensure_cart(session: dict) -> SessionCart:
    """Return the session's cart, creating an empty one on first access."""
    data = session.get(CART_KEY)
    if not isinstance(data, dict) or "items" not in data:
        data = _empty_cart()
        session[CART_KEY] = data
    return SessionCart(data, session)


def peek_cart(session: dict) -> SessionCart:
    """Read-only view for templates; does not write an empty cart into the session."""
    data = session.get(CART_KEY)
    if not isinstance(data, dict) or "items" not in data:
        data = _empty_cart()
    return SessionCart(data)
