# backend/models/product.py
from sqlalchemy import Column, Integer, String, Numeric, CheckConstraint
from database import Base

# Catalog entry shown in the shop. Read-only for the storefront;
# rows come from populate_db.py or direct database administration.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column("nombre", String, nullable=False, index=True)
    price = Column("precio", Numeric(10, 2), CheckConstraint("precio >= 0"), nullable=False)
