from fastapi import APIRouter, Depends
from pydantic import BaseModel
from pymongo.database import Database

from catalog.database import get_database
from catalog.models.product import Product
from catalog.services.catalog_service import CatalogFacets, CatalogFilter, CatalogService
from catalog.services.document_service import DocumentRepository

router = APIRouter(prefix="/catalog", tags=["Catalog"])


class CatalogResponse(BaseModel):
    """Schema for the public catalog page."""
    items: list[Product]
    shown: int
    total: int
    facets: CatalogFacets


@router.get(
    "/",
    response_model=CatalogResponse,
    summary="Browse the catalog",
    description="Search and filter the whole catalog. Facets are computed over all products."
)
@router.get("", response_model=CatalogResponse, include_in_schema=False)
def browse_catalog(
    filters: CatalogFilter = Depends(),
    db: Database = Depends(get_database)
):
    """
    Browse products.

    - **search**: matches name, brand, color or subcategory (case-insensitive)
    - **category**, **subcategory**, **brand**, **color**, **gender**: exact match
    - **size**: products offered in that size
    - **in_stock_only**: hide products without stock
    """
    service = CatalogService(DocumentRepository(db))
    products = service.all_products()
    items = service.search(filters, products)

    return CatalogResponse(
        items=items,
        shown=len(items),
        total=len(products),
        facets=service.facets(products)
    )
