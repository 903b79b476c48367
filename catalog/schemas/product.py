from pydantic import BaseModel, Field, model_validator
from typing import Optional

from catalog.models.product import Category, Gender, PlayerType, Season


class ProductBase(BaseModel):
    """Base schema for Product with common attributes."""
    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    category: Category = Field(..., description="Product category")
    subcategory: str = Field(..., min_length=1, description="Subcategory, e.g. 'shirt'")
    brand: Optional[str] = None
    color: str = Field(..., min_length=1)
    material: Optional[str] = None
    season: Season = Season.ALL_SEASON
    gender: Gender
    team: Optional[str] = None
    country: Optional[str] = None
    player_type: Optional[PlayerType] = None
    price: float = Field(..., ge=0, description="Unit price (must be non-negative)")
    description: Optional[str] = None


class ProductCreate(ProductBase):
    """
    Schema for creating a new product.

    A product needs at least one image, at least one size and stock for at
    least one of its sizes.
    """
    images: list[str] = Field(..., description="Ordered image payloads")
    sizes: list[str] = Field(..., description="Available sizes")
    inventory: dict[str, int] = Field(default_factory=dict, description="Stock per size")

    @model_validator(mode="after")
    def check_catalog_rules(self):
        if not self.images:
            raise ValueError("At least one image is required")
        if not self.sizes:
            raise ValueError("At least one size must be selected")
        _check_inventory(self.sizes, self.inventory)
        if sum(self.inventory.values()) <= 0:
            raise ValueError("Stock is required for at least one size")
        return self


class ProductUpdate(BaseModel):
    """Schema for updating an existing product. All fields are optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[Category] = None
    subcategory: Optional[str] = Field(None, min_length=1)
    brand: Optional[str] = None
    color: Optional[str] = Field(None, min_length=1)
    material: Optional[str] = None
    season: Optional[Season] = None
    gender: Optional[Gender] = None
    team: Optional[str] = None
    country: Optional[str] = None
    player_type: Optional[PlayerType] = None
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    images: Optional[list[str]] = None
    sizes: Optional[list[str]] = None
    inventory: Optional[dict[str, int]] = None

    @model_validator(mode="after")
    def check_inventory(self):
        if self.images is not None and not self.images:
            raise ValueError("At least one image is required")
        if self.sizes is not None and not self.sizes:
            raise ValueError("At least one size must be selected")
        if self.sizes is not None and self.inventory is not None:
            _check_inventory(self.sizes, self.inventory)
        elif self.inventory is not None:
            _check_non_negative(self.inventory)
        return self


class InventoryAdjustment(BaseModel):
    """Schema for incrementing or decrementing stock of one size."""
    amount: int = Field(..., ge=0, description="Units to add or remove")


class InventoryQuantity(BaseModel):
    """Schema for setting the stock of one size directly."""
    quantity: int = Field(..., ge=0, description="New stock level")


class StockResponse(BaseModel):
    product_id: str
    size: str
    available: int


def _check_non_negative(inventory: dict[str, int]) -> None:
    negative = [size for size, stock in inventory.items() if stock < 0]
    if negative:
        raise ValueError(f"Stock cannot be negative for sizes: {', '.join(negative)}")


def _check_inventory(sizes: list[str], inventory: dict[str, int]) -> None:
    _check_non_negative(inventory)
    unknown = [size for size in inventory if size not in sizes]
    if unknown:
        raise ValueError(f"Inventory has sizes that are not offered: {', '.join(unknown)}")
