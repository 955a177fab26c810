# backend/services/catalog.py
from typing import List, Optional

from sqlalchemy.orm import Session

from models.product import Product


def list_products(db: Session) -> List[Product]:
    return db.query(Product).order_by(Product.id).all()


def get_product(db: Session, product_id: int) -> Optional[Product]:
    return db.query(Product).filter(Product.id == product_id).first()
