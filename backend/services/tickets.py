# backend/services/tickets.py
import logging
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.order import Order, OrderItem
from models.product import Product
from schemas.order import TicketItemOut, TicketView
from utils.errors import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
DELETED_PRODUCT_NAME = "Producto eliminado"


def get_ticket(db: Session, order_id: int, user_id: int) -> TicketView:
    """Loads an order owned by ``user_id`` with its items, or raises NotFoundError."""
    try:
        # Ownership is part of the lookup, another user's order is simply not found
        order = (
            db.query(Order)
            .filter(Order.id == order_id, Order.user_id == user_id)
            .first()
        )
        if order is None:
            raise NotFoundError()

        rows = (
            db.query(OrderItem, Product.name)
            .outerjoin(Product, OrderItem.product_id == Product.id)
            .filter(OrderItem.order_id == order.id)
            .order_by(OrderItem.id)
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("Could not load ticket for order %s", order_id)
        raise PersistenceError() from exc

    items = []
    for item, product_name in rows:
        price = Decimal(item.price).quantize(CENTS)
        items.append(TicketItemOut(
            product_id=item.product_id,
            name=product_name or DELETED_PRODUCT_NAME,
            quantity=item.quantity,
            price=price,
            line_total=(price * item.quantity).quantize(CENTS),
        ))

    return TicketView(
        id=order.id,
        user_id=order.user_id,
        total=Decimal(order.total).quantize(CENTS),
        created_at=order.created_at,
        items=items,
    )
