from decimal import Decimal
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


# One line of a ticket, priced at purchase time
class TicketItemOut(BaseModel):
    product_id: Optional[int] = None
    name: str
    quantity: int
    price: Decimal
    line_total: Decimal


# Row of the order history page
class OrderSummaryOut(BaseModel):
    id: int
    total: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


# Everything the HTML and PDF tickets show
class TicketView(BaseModel):
    id: int
    user_id: int
    total: Decimal
    created_at: datetime
    items: List[TicketItemOut]
