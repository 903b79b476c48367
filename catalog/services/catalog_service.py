import logging
from typing import List, Optional

from pydantic import BaseModel, ValidationError

from catalog.models.product import Product
from catalog.services.document_service import DocumentRepository
from catalog.utils.cache import CacheService, cache_service

logger = logging.getLogger(__name__)


class CatalogFilter(BaseModel):
    """Filters of the public catalog. Empty values match everything."""
    search: str = ""
    category: str = ""
    subcategory: str = ""
    brand: str = ""
    color: str = ""
    gender: str = ""
    size: str = ""
    in_stock_only: bool = False


class CatalogFacets(BaseModel):
    """Distinct values offered by the catalog filter dropdowns."""
    categories: list[str]
    subcategories: list[str]
    brands: list[str]
    colors: list[str]
    genders: list[str]
    sizes: list[str]


class CatalogService:
    """
    In-memory browsing over the full product set.

    The catalog is small enough to be fetched whole; the complete product
    list is cached in Redis and every filter runs in memory.
    """

    CACHE_PREFIX = "catalog"
    CACHE_KEY = "products"

    def __init__(self, repository: DocumentRepository, cache: Optional[CacheService] = None):
        self.repository = repository
        self.cache = cache or cache_service

    def all_products(self) -> List[Product]:
        """Get every product, from cache when possible."""
        documents = self.cache.get(self.CACHE_PREFIX, self.CACHE_KEY)
        if documents is None:
            documents = self.repository.list(Product.COLLECTION, {"order": "created_at.desc"})
            self.cache.set(self.CACHE_PREFIX, self.CACHE_KEY, documents)

        products = []
        for document in documents:
            try:
                products.append(Product.model_validate(document))
            except ValidationError as e:
                # Documents written through the generic proxy are not validated
                logger.warning(f"Skipping malformed product {document.get('id')}: {e.error_count()} errors")
        return products

    def invalidate(self) -> None:
        """Drop the cached product set after any product write."""
        self.cache.delete(self.CACHE_PREFIX, self.CACHE_KEY)

    def search(self, filters: CatalogFilter, products: Optional[List[Product]] = None) -> List[Product]:
        """
        Filter products in memory.

        The search term matches case-insensitively anywhere in the name,
        brand, color or subcategory. Other filters are exact matches, except
        size which must be one of the product's sizes.
        """
        if products is None:
            products = self.all_products()
        return [product for product in products if _matches(product, filters)]

    @staticmethod
    def facets(products: List[Product]) -> CatalogFacets:
        return CatalogFacets(
            categories=sorted({p.category.value for p in products}),
            subcategories=sorted({p.subcategory for p in products if p.subcategory}),
            brands=sorted({p.brand for p in products if p.brand}),
            colors=sorted({p.color for p in products if p.color}),
            genders=sorted({p.gender.value for p in products}),
            sizes=sorted({size for p in products for size in p.sizes}),
        )


def _matches(product: Product, filters: CatalogFilter) -> bool:
    term = filters.search.strip().lower()
    if term:
        haystacks = (product.name, product.brand or "", product.color, product.subcategory)
        if not any(term in text.lower() for text in haystacks):
            return False

    exact = (
        (filters.category, product.category.value),
        (filters.subcategory, product.subcategory),
        (filters.brand, product.brand or ""),
        (filters.color, product.color),
        (filters.gender, product.gender.value),
    )
    if any(wanted and wanted != actual for wanted, actual in exact):
        return False

    if filters.size and filters.size not in product.sizes:
        return False
    if filters.in_stock_only and not product.has_stock:
        return False
    return True
