import enum
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field


class Category(str, enum.Enum):
    """Enum for product categories."""
    FOOTBALL = "football"
    CASUAL = "casual"
    FORMAL = "formal"
    SPORTSWEAR = "sportswear"
    ACCESSORIES = "accessories"


class Season(str, enum.Enum):
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"
    ALL_SEASON = "all-season"


class Gender(str, enum.Enum):
    MEN = "men"
    WOMEN = "women"
    UNISEX = "unisex"
    KIDS = "kids"


class PlayerType(str, enum.Enum):
    """Football shirt cut: supporter version or match version."""
    FAN = "fan"
    PLAYER = "player"


class Product(BaseModel):
    """
    Product stored in the ``products`` collection.

    Attributes:
        id: Document identifier (24-character hex string)
        name: Product name
        category: Top-level category
        subcategory: Free-text subcategory (e.g. 'shirt', 'trousers')
        brand, color, material, season, gender: Descriptive attributes
        team, country, player_type: Football-only attributes
        price: Unit price (non-negative)
        images: Ordered list of image payloads
        sizes: Sizes the product is offered in
        inventory: Stock per size; the single source of truth for stock
        created_at: Creation timestamp, immutable after insert
    """
    COLLECTION: ClassVar[str] = "products"

    id: str
    name: str
    category: Category
    subcategory: str = ""
    brand: Optional[str] = None
    color: str = ""
    material: Optional[str] = None
    season: Season = Season.ALL_SEASON
    gender: Gender = Gender.UNISEX
    team: Optional[str] = None
    country: Optional[str] = None
    player_type: Optional[PlayerType] = None
    price: float = Field(0, ge=0)
    description: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    inventory: dict[str, int] = Field(default_factory=dict)
    created_at: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    def stock_for(self, size: str) -> int:
        return self.inventory.get(size, 0)

    @property
    def total_stock(self) -> int:
        return sum(self.inventory.values())

    @property
    def has_stock(self) -> bool:
        return self.total_stock > 0

    @property
    def sizes_in_stock(self) -> list[str]:
        """Sizes with stock, in the order the product lists them."""
        return [size for size in self.sizes if self.stock_for(size) > 0]

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.total_stock})>"
