import enum
from datetime import date
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentMethod(str, enum.Enum):
    """Enum for accepted payment methods."""
    CASH = "cash"
    TRANSFER = "transfer"


class Sale(BaseModel):
    """
    Sale stored in the ``sales`` collection.

    Sales are immutable once recorded; they can only be deleted, which
    gives the sold quantity back to the product's inventory.

    Attributes:
        id: Document identifier
        product_id: Identifier of the sold product
        product_name: Product name at sale time
        size: Size sold
        quantity: Units sold (positive)
        unit_price: Product price at sale time
        total_price: unit_price * quantity, frozen at sale time
        payment_method: How the customer paid
        customer_name, customer_phone, customer_email: Optional contact data
        notes: Free-text notes
        sale_date: Date of the sale
        created_at: Creation timestamp
    """
    COLLECTION: ClassVar[str] = "sales"

    id: str
    product_id: str
    product_name: str
    size: str
    quantity: int = Field(..., ge=1)
    unit_price: float
    total_price: float
    payment_method: PaymentMethod
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    notes: Optional[str] = None
    sale_date: date
    created_at: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    def __repr__(self):
        return f"<Sale(id={self.id}, product_id={self.product_id}, size='{self.size}', quantity={self.quantity})>"
