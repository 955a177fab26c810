# backend/schemas/product.py
from decimal import Decimal
from pydantic import BaseModel, ConfigDict


class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Product as listed on the shop front page
class ProductOut(ORMBase):
    id: int
    name: str
    price: Decimal
