# backend/routes/auth.py
from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from database import get_db
from schemas.user import UserFormData
from services.accounts import authenticate, register_user
from utils.audit import client_ip, write_log
from utils.errors import DuplicateEmailError, InvalidCredentialsError, ValidationError
from utils.session_auth import current_user, login_user, logout_user
from utils.templating import render

router = APIRouter(tags=["Auth"])


@router.get("/register")
def register_form(request: Request):
    return render(request, "register.html", {"error": None, "form": UserFormData()})


# Create an account, then send the user to the login page
@router.post("/register")
def register(
    request: Request,
    name: str = Form("", alias="nombre"),
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        user = register_user(db, name, email, password)
    except (ValidationError, DuplicateEmailError) as e:
        if isinstance(e, DuplicateEmailError):
            write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
                      ip=client_ip(request), meta={"email": email, "reason": "Email exists"})
        return render(
            request,
            "register.html",
            {"error": e.message, "form": UserFormData(name=name, email=email)},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    write_log(db, user_id=user.id, action="REGISTER", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"email": user.email})
    return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/login")
def login_form(request: Request):
    return render(request, "login.html", {"error": None, "form": UserFormData()})


# Authenticate and bind the identity to the session
@router.post("/login")
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        user = authenticate(db, email, password)
    except (ValidationError, InvalidCredentialsError) as e:
        code = status.HTTP_400_BAD_REQUEST
        if isinstance(e, InvalidCredentialsError):
            code = status.HTTP_401_UNAUTHORIZED
            write_log(db, user_id=None, action="LOGIN", resource="auth", status="FAIL",
                      ip=client_ip(request), meta={"email": email})
        return render(
            request,
            "login.html",
            {"error": e.message, "form": UserFormData(email=email)},
            status_code=code,
        )

    login_user(request, user)
    write_log(db, user_id=user.id, action="LOGIN", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"email": user.email})
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/logout")
def logout(request: Request, db: Session = Depends(get_db)):
    user = current_user(request)
    logout_user(request)
    if user:
        write_log(db, user_id=user.id, action="LOGOUT", resource="auth", status="SUCCESS",
                  ip=client_ip(request))
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
