# backend/services/orders.py
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.order import Order, OrderItem
from utils.audit import add_log
from utils.cart import SessionCart
from utils.errors import PersistenceError

logger = logging.getLogger(__name__)


def checkout(db: Session, user_id: int, cart: SessionCart, ip: Optional[str] = None) -> Optional[int]:
    """
    Turns the cart into one order plus its line items.

    The order, its items and the ORDER_CREATE audit row are written in a
    single transaction; on failure it is rolled back, PersistenceError is
    raised and the cart is left as it was.
    Returns the new order id, or None when the cart is empty.
    """
    if cart.is_empty:
        return None

    lines = list(cart.lines())
    totals = cart.totals()

    try:
        order = Order(user_id=user_id, total=totals.total_price)
        db.add(order)
        db.flush() # assigns order.id

        for line in lines:
            db.add(OrderItem(
                order_id=order.id,
                product_id=line.product_id,
                quantity=line.quantity,
                price=line.price,
            ))
            db.flush()

        order_id = order.id
        add_log(db, user_id=user_id, action="ORDER_CREATE", resource="orders", status="SUCCESS",
                ip=ip, meta={"order_id": order_id, "items": len(lines), "total": str(totals.total_price)})
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Checkout failed for user %s", user_id)
        raise PersistenceError() from exc

    cart.clear()
    logger.info("Order %s created for user %s (%s items, total %s)",
                order_id, user_id, len(lines), totals.total_price)
    return order_id


def list_orders(db: Session, user_id: int) -> List[Order]:
    try:
        return (
            db.query(Order)
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("Could not load order history for user %s", user_id)
        raise PersistenceError() from exc
