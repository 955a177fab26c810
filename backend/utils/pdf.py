# backend/utils/pdf.py
from io import BytesIO
from typing import Iterator

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from schemas.order import TicketView
from schemas.user import SessionUser

FONT_NAME = "Helvetica"  # standard font, covers Latin-1

MARGIN = 50  # points, left/top/bottom
CHUNK_SIZE = 64 * 1024


def format_money(value) -> str:
    return f"${value:.2f}"


def ticket_item_line(item) -> str:
    """'<name> - Cant: <qty> x $<unit> = $<line total>'"""
    return f"{item.name} - Cant: {item.quantity} x {format_money(item.price)} = {format_money(item.line_total)}"


def build_ticket_pdf(ticket: TicketView, customer: SessionUser) -> bytes:
    """Draws the purchase ticket into an in-memory buffer."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4, pageCompression=0)
    c.setTitle(f"Ticket {ticket.id}")
    width, height = A4

    y = height - MARGIN

    def line(text, size=12, align="left", gap=6 * mm):
        nonlocal y
        if y < MARGIN:
            c.showPage()
            y = height - MARGIN
        c.setFont(FONT_NAME, size)
        if align == "center":
            c.drawCentredString(width / 2, y, text)
        else:
            c.drawString(MARGIN, y, text)
        y -= gap

    def move_down():
        nonlocal y
        y -= 4 * mm

    line("Ticket de compra", size=20, align="center", gap=10 * mm)
    move_down()
    line(f"Cliente: {customer.name}")
    line(f"Correo: {customer.email}")
    line(f"Fecha: {ticket.created_at:%Y-%m-%d %H:%M:%S}")
    move_down()

    line(f"Número de orden: {ticket.id}")
    line(f"Total: {format_money(ticket.total)}")
    move_down()

    line("Detalle de productos:", size=14, gap=8 * mm)
    move_down()

    for item in ticket.items:
        line(ticket_item_line(item))

    c.showPage()
    c.save()
    return buffer.getvalue()


def stream_ticket_pdf(ticket: TicketView, customer: SessionUser) -> Iterator[bytes]:
    """Yields the PDF in chunks for a StreamingResponse."""
    data = build_ticket_pdf(ticket, customer)
    for start in range(0, len(data), CHUNK_SIZE):
        yield data[start:start + CHUNK_SIZE]
