# backend/main.py
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

load_dotenv()

from config import settings
from database import init_db
from utils.errors import LoginRequired, NotFoundError, PersistenceError
from utils.templating import render

# Router imports
from routes.shop import router as shop_router
from routes.auth import router as auth_router
from routes.cart import router as cart_router
from routes.orders import router as orders_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialisation
init_db()

app = FastAPI(title=settings.APP_TITLE, version="1.0.0")

# Signed cookie session: identity and cart live here
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    session_cookie=settings.SESSION_COOKIE,
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
)

STATIC_DIR = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return render(request, "error.html", {"message": exc.message}, status_code=status.HTTP_404_NOT_FOUND)


# Backing-store failures never reach the user as a traceback
@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error("Persistence error on %s %s: %s", request.method, request.url.path, exc.__cause__)
    return render(request, "error.html", {"message": exc.message},
                  status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


# Router registration
app.include_router(shop_router)
app.include_router(auth_router)
app.include_router(cart_router)
app.include_router(orders_router)
