from fastapi import APIRouter, Depends, HTTPException, Request, status
from pymongo.database import Database

from catalog.database import get_database
from catalog.models.product import Product
from catalog.services.catalog_service import CatalogService
from catalog.services.document_service import DocumentRepository
from catalog.services.exceptions import ProductNotFoundError
from catalog.services.inventory_service import InventoryLedger, offers_size
from catalog.services.product_service import ProductService
from catalog.schemas.product import (
    InventoryAdjustment,
    InventoryQuantity,
    ProductCreate,
    ProductUpdate,
    StockResponse,
)

router = APIRouter(prefix="/products", tags=["Products"])


def _product_not_found(product_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Product with ID {product_id} not found"
    )


@router.post(
    "/",
    response_model=Product,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a product with its images, sizes and initial stock per size."
)
@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_product(
    product_data: ProductCreate,
    db: Database = Depends(get_database)
):
    """
    Create a new product.

    - **images**: at least one image payload (required)
    - **sizes**: at least one size (required)
    - **inventory**: stock per size, only for offered sizes, at least one unit in total
    """
    service = ProductService(DocumentRepository(db))
    return service.create(product_data)


@router.get(
    "/",
    response_model=list[Product],
    summary="List products",
    description="List products, filtered with `field[op]=value` parameters plus `order` and `limit`."
)
@router.get("", response_model=list[Product], include_in_schema=False)
def list_products(request: Request, db: Database = Depends(get_database)):
    """List products matching the query-string filters."""
    service = ProductService(DocumentRepository(db))
    return service.get_all(dict(request.query_params))


@router.get(
    "/{product_id}",
    response_model=Product,
    summary="Get product by ID"
)
def get_product(product_id: str, db: Database = Depends(get_database)):
    """Get a product by ID."""
    service = ProductService(DocumentRepository(db))
    product = service.get_by_id(product_id)

    if not product:
        raise _product_not_found(product_id)

    return product


@router.patch(
    "/{product_id}",
    response_model=Product,
    summary="Update a product",
    description="Update product details. Only provided fields will be updated."
)
def update_product(
    product_id: str,
    product_data: ProductUpdate,
    db: Database = Depends(get_database)
):
    """
    Update a product.

    Partial updates are supported - only include fields you want to change.
    The identifier and creation time can't be changed.
    """
    service = ProductService(DocumentRepository(db))
    try:
        return service.update(product_id, product_data)
    except ProductNotFoundError:
        raise _product_not_found(product_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )


@router.delete(
    "/{product_id}",
    response_model=Product,
    summary="Delete a product",
    description="Delete a product by ID and return it."
)
def delete_product(product_id: str, db: Database = Depends(get_database)):
    """Delete a product. Its sales history is kept."""
    service = ProductService(DocumentRepository(db))
    try:
        return service.delete(product_id)
    except ProductNotFoundError:
        raise _product_not_found(product_id)


@router.get(
    "/{product_id}/inventory/{size}",
    response_model=StockResponse,
    summary="Get available stock for a size"
)
def get_stock(product_id: str, size: str, db: Database = Depends(get_database)):
    """Available units; 0 for unknown sizes."""
    repository = DocumentRepository(db)
    product = repository.find_one(Product.COLLECTION, product_id)
    if product is None:
        raise _product_not_found(product_id)
    ledger = InventoryLedger(repository)
    return StockResponse(
        product_id=product_id,
        size=size,
        available=ledger.get_available_stock(product_id, size, product=product)
    )


def _adjust(db: Database, product_id: str, size: str, apply) -> StockResponse:
    repository = DocumentRepository(db)
    product = repository.find_one(Product.COLLECTION, product_id)
    if product is None:
        raise _product_not_found(product_id)
    if not offers_size(product, size):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Product {product_id} is not offered in size {size}"
        )

    ledger = InventoryLedger(repository)
    if not apply(ledger, product):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Inventory could not be updated. Please try again."
        )

    CatalogService(repository).invalidate()
    return StockResponse(
        product_id=product_id,
        size=size,
        available=ledger.get_available_stock(product_id, size, product=product)
    )


@router.post(
    "/{product_id}/inventory/{size}/increment",
    response_model=StockResponse,
    summary="Add stock for a size"
)
def increment_stock(
    product_id: str,
    size: str,
    adjustment: InventoryAdjustment,
    db: Database = Depends(get_database)
):
    """Add units to the stock of a size."""
    return _adjust(
        db, product_id, size,
        lambda ledger, product: ledger.increment(product_id, size, adjustment.amount, product=product)
    )


@router.post(
    "/{product_id}/inventory/{size}/decrement",
    response_model=StockResponse,
    summary="Remove stock for a size",
    description="Remove units from the stock of a size. Stock never goes below zero."
)
def decrement_stock(
    product_id: str,
    size: str,
    adjustment: InventoryAdjustment,
    db: Database = Depends(get_database)
):
    """Remove units from the stock of a size, flooring at zero."""
    return _adjust(
        db, product_id, size,
        lambda ledger, product: ledger.decrement(product_id, size, adjustment.amount, product=product)
    )


@router.put(
    "/{product_id}/inventory/{size}",
    response_model=StockResponse,
    summary="Set stock for a size"
)
def set_stock(
    product_id: str,
    size: str,
    body: InventoryQuantity,
    db: Database = Depends(get_database)
):
    """Overwrite the stock of a size."""
    return _adjust(
        db, product_id, size,
        lambda ledger, product: ledger.set_quantity(product_id, size, body.quantity, product=product)
    )
