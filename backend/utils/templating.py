# backend/utils/templating.py
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from utils.cart import peek_cart
from utils.session_auth import current_user

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
FLASH_KEY = "flash"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["money"] = lambda value: f"{value:.2f}"


def flash(request: Request, message: str) -> None:
    """Stores a one-shot message shown on the next rendered page."""
    request.session[FLASH_KEY] = message


def render(request: Request, name: str, context: dict | None = None, status_code: int = 200):
    # Every page shows the logged-in user and the cart badge
    ctx = {
        "current_user": current_user(request),
        "cart_totals": peek_cart(request.session).totals(),
        "flash": request.session.pop(FLASH_KEY, None),
    }
    ctx.update(context or {})
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)
