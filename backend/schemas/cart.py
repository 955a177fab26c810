from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import List

# One line of the session cart, with its derived subtotal
class CartLine(BaseModel):
    product_id: int
    name: str
    price: Decimal
    quantity: int
    line_total: Decimal

# Derived cart totals
class CartTotals(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_qty: int = Field(serialization_alias="totalQty")
    total_price: Decimal = Field(serialization_alias="totalPrice")

    # cart.js formats the price with toFixed(), so it must be a JSON number
    @field_serializer("total_price")
    def _price_as_number(self, value: Decimal) -> float:
        return float(value)

# Full cart snapshot handed to the cart template
class CartView(BaseModel):
    items: List[CartLine]
    totals: CartTotals
