# backend/routes/cart.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from schemas.user import SessionUser
from services.catalog import get_product
from services.orders import checkout as create_order
from utils.audit import client_ip
from utils.cart import ensure_cart
from utils.errors import PersistenceError
from utils.session_auth import require_login
from utils.templating import flash, render

router = APIRouter(prefix="/cart", tags=["Cart"])
logger = logging.getLogger(__name__)


def _parse_id(raw: str) -> Optional[int]:
    # Non-numeric ids are treated as "no such product"
    return int(raw) if raw.isascii() and raw.isdigit() else None


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


def _wants_json(request: Request) -> bool:
    return request.headers.get("x-requested-with") == "XMLHttpRequest"


async def _read_quantity(request: Request):
    # Plain forms post urlencoded data, cart.js posts JSON
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            return None
        return body.get("quantity") if isinstance(body, dict) else None
    form = await request.form()
    return form.get("quantity")


@router.get("")
def view_cart(request: Request):
    cart = ensure_cart(request.session)
    return render(request, "cart.html", {"cart": cart.view()})


@router.post("/add/{product_id}")
def add_to_cart(
    product_id: str,
    request: Request,
    quantity: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    cart = ensure_cart(request.session)

    pid = _parse_id(product_id)
    if pid is None:
        return _redirect("/")

    try:
        product = get_product(db, pid)
    except SQLAlchemyError as exc:
        logger.exception("Product lookup failed for id %s", pid)
        raise PersistenceError() from exc
    if not product:
        return _redirect("/")

    cart.add_item(product, quantity)
    return _redirect("/cart")


# Absolute quantity set; zero or garbage removes the line
@router.post("/update/{product_id}")
async def update_cart_item(product_id: str, request: Request):
    cart = ensure_cart(request.session)
    quantity = await _read_quantity(request)

    pid = _parse_id(product_id)
    totals = cart.update_item(pid, quantity) if pid is not None else cart.totals()

    if _wants_json(request):
        return JSONResponse(totals.model_dump(mode="json", by_alias=True))
    return _redirect("/cart")


@router.post("/remove/{product_id}")
def remove_cart_item(product_id: str, request: Request):
    cart = ensure_cart(request.session)
    pid = _parse_id(product_id)
    if pid is not None:
        cart.remove_item(pid)
    return _redirect("/cart")


@router.post("/checkout")
def checkout(
    request: Request,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(require_login),
):
    cart = ensure_cart(request.session)
    if cart.is_empty:
        return _redirect("/cart")

    try:
        order_id = create_order(db, current_user.id, cart, ip=client_ip(request))
    except PersistenceError as e:
        # Cart is untouched, the user can retry
        flash(request, e.message)
        return _redirect("/cart")

    return _redirect(f"/orders/{order_id}/ticket")
