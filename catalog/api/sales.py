from fastapi import APIRouter, Depends, HTTPException, Request, status
from pymongo.database import Database

from catalog.database import get_database
from catalog.models.sale import Sale
from catalog.services.catalog_service import CatalogService
from catalog.services.document_service import DocumentRepository
from catalog.services.exceptions import (
    InconsistentStateError,
    InsufficientStockError,
    ProductNotFoundError,
    SaleNotFoundError,
)
from catalog.services.sales_service import SalesRecorder
from catalog.schemas.sale import SaleCreate, SaleListResponse, SalesSummary

router = APIRouter(prefix="/sales", tags=["Sales"])


def _inconsistent(e: InconsistentStateError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "message": str(e),
            "sale_id": e.sale.id,
            "product_id": e.product_id,
            "size": e.size,
            "pending_adjustment": e.pending_adjustment,
        }
    )


@router.post(
    "/",
    response_model=Sale,
    status_code=status.HTTP_201_CREATED,
    summary="Record a sale",
    description="""
    Record a sale and take the sold units out of stock.

    **Consistency:**
    The sale insert and the stock decrement are two separate writes.
    - Not enough stock: 400, nothing is written
    - Sale saved but stock not decremented: 500 with the sale id and the
      pending stock adjustment
    """
)
@router.post("", response_model=Sale, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def record_sale(
    sale_data: SaleCreate,
    db: Database = Depends(get_database)
):
    """
    Record a sale.

    - **product_id**: ID of the product sold (required)
    - **size**: size sold (required)
    - **quantity**: units sold, default is 1
    - **payment_method**: `cash` or `transfer`
    """
    repository = DocumentRepository(db)
    recorder = SalesRecorder(repository)

    try:
        sale = recorder.record_sale(sale_data)
    except ProductNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except InsufficientStockError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except InconsistentStateError as e:
        CatalogService(repository).invalidate()
        raise _inconsistent(e)

    CatalogService(repository).invalidate()
    return sale


@router.get(
    "/",
    response_model=SaleListResponse,
    summary="List sales",
    description="Sales history, newest first. Accepts `field[op]=value` filters, `order` and `limit`."
)
@router.get("", response_model=SaleListResponse, include_in_schema=False)
def list_sales(request: Request, db: Database = Depends(get_database)):
    """Get the sales history."""
    recorder = SalesRecorder(DocumentRepository(db))
    sales = recorder.list_sales(dict(request.query_params))
    return SaleListResponse(items=sales, total=len(sales))


@router.get(
    "/summary",
    response_model=SalesSummary,
    summary="Sales totals"
)
def sales_summary(db: Database = Depends(get_database)):
    """Total revenue, units sold and number of transactions."""
    recorder = SalesRecorder(DocumentRepository(db))
    return recorder.summary()


@router.get(
    "/{sale_id}",
    response_model=Sale,
    summary="Get sale by ID"
)
def get_sale(sale_id: str, db: Database = Depends(get_database)):
    """Get a sale by ID."""
    recorder = SalesRecorder(DocumentRepository(db))
    sale = recorder.get_sale(sale_id)

    if not sale:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Sale with ID {sale_id} not found"
        )

    return sale


@router.delete(
    "/{sale_id}",
    response_model=Sale,
    summary="Delete a sale",
    description="Delete a sale and give the sold units back to stock."
)
def delete_sale(sale_id: str, db: Database = Depends(get_database)):
    """Delete a sale and restore its stock."""
    repository = DocumentRepository(db)
    recorder = SalesRecorder(repository)

    try:
        sale = recorder.delete_sale(sale_id)
    except SaleNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except InconsistentStateError as e:
        CatalogService(repository).invalidate()
        raise _inconsistent(e)

    CatalogService(repository).invalidate()
    return sale
