from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from catalog.models.sale import PaymentMethod, Sale


class SaleCreate(BaseModel):
    """Schema for recording a new sale."""
    product_id: str = Field(..., min_length=1, description="ID of the product sold")
    size: str = Field(..., min_length=1, description="Size sold")
    quantity: int = Field(default=1, ge=1, description="Units sold")
    payment_method: PaymentMethod = PaymentMethod.CASH
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    notes: Optional[str] = None
    sale_date: date = Field(default_factory=date.today)


class SaleListResponse(BaseModel):
    """Schema for the sales history."""
    items: list[Sale]
    total: int


class SalesSummary(BaseModel):
    """Totals shown on the admin sales view."""
    total_revenue: float
    units_sold: int
    transactions: int
