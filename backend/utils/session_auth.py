# backend/utils/session_auth.py
from typing import Optional

from fastapi import Request
from pydantic import ValidationError as PydanticValidationError

from schemas.user import SessionUser
from utils.errors import LoginRequired

USER_KEY = "user"


def login_user(request: Request, user: SessionUser) -> None:
    request.session[USER_KEY] = user.model_dump()


def logout_user(request: Request) -> None:
    # Drops identity and cart together
    request.session.clear()


def current_user(request: Request) -> Optional[SessionUser]:
    raw = request.session.get(USER_KEY)
    if not raw:
        return None
    try:
        return SessionUser.model_validate(raw)
    except PydanticValidationError:
        # Stale or tampered payload: treat as anonymous
        request.session.pop(USER_KEY, None)
        return None


# Dependency guarding checkout, history and ticket routes
def require_login(request: Request) -> SessionUser:
    user = current_user(request)
    if user is None:
        raise LoginRequired()
    return user
