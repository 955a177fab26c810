import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from schemas.product import ProductOut
from services.catalog import list_products
from utils.errors import PersistenceError
from utils.templating import render

router = APIRouter(tags=["Shop"])
logger = logging.getLogger(__name__)


# Front page: the whole catalog
@router.get("/")
def index(request: Request, db: Session = Depends(get_db)):
    try:
        products = [ProductOut.model_validate(p) for p in list_products(db)]
    except SQLAlchemyError as exc:
        logger.exception("Could not load products")
        raise PersistenceError("Error cargando productos.") from exc
    return render(request, "index.html", {"products": products})
