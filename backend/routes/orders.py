# backend/routes/orders.py
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse, StreamingResponse
from sqlalchemy.orm import Session

from database import get_db
from schemas.order import OrderSummaryOut
from schemas.user import SessionUser
from services.orders import list_orders
from services.tickets import get_ticket
from utils.audit import client_ip, write_log
from utils.pdf import stream_ticket_pdf
from utils.session_auth import require_login
from utils.templating import render

router = APIRouter(prefix="/orders", tags=["Orders"])


def _parse_order_id(raw: str) -> Optional[int]:
    return int(raw) if raw.isascii() and raw.isdigit() else None


def _to_history():
    return RedirectResponse("/orders/history", status_code=status.HTTP_303_SEE_OTHER)


# Caller's past orders, newest first
@router.get("/history")
def order_history(
    request: Request,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(require_login),
):
    orders = [OrderSummaryOut.model_validate(o) for o in list_orders(db, current_user.id)]
    return render(request, "history.html", {"orders": orders})


@router.get("/{order_id}/ticket")
def ticket(
    order_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(require_login),
):
    oid = _parse_order_id(order_id)
    if oid is None:
        return _to_history()

    # NotFoundError for foreign or missing orders is rendered by the app handler
    view = get_ticket(db, oid, current_user.id)
    return render(request, "ticket.html", {"order": view, "user": current_user})


@router.get("/{order_id}/ticket/pdf")
def ticket_pdf(
    order_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(require_login),
):
    oid = _parse_order_id(order_id)
    if oid is None:
        return _to_history()

    view = get_ticket(db, oid, current_user.id)
    write_log(db, user_id=current_user.id, action="TICKET_PDF", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": view.id})

    return StreamingResponse(
        stream_ticket_pdf(view, current_user),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="ticket_{view.id}.pdf"'},
    )
