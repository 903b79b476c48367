import logging
from typing import Any, List, Mapping, Optional

from catalog.models.product import Product
from catalog.models.sale import Sale
from catalog.schemas.sale import SaleCreate, SalesSummary
from catalog.services.document_service import DocumentRepository
from catalog.services.exceptions import (
    InconsistentStateError,
    InsufficientStockError,
    ProductNotFoundError,
    SaleNotFoundError,
)
from catalog.services.inventory_service import InventoryLedger, offers_size

logger = logging.getLogger(__name__)


class SalesRecorder:
    """
    Records sales and keeps product inventory in step with them.

    CONSISTENCY MODEL:
    ==================
    Recording a sale is two independent writes to the document store:

    1. Insert the sale document
    2. Decrement the product's stock for the sold size

    Deleting a sale runs the mirror sequence (delete, then increment).
    There is no transaction around the pair. If the second step fails the
    first one is kept, an error is logged and ``InconsistentStateError`` is
    raised with the persisted sale and the pending stock adjustment so the
    caller can surface it. Nothing is retried or compensated automatically.

    The stock check in ``record_sale`` reads before it writes, so two
    concurrent sales of the last unit can both pass it.
    """

    def __init__(self, repository: DocumentRepository, ledger: Optional[InventoryLedger] = None):
        self.repository = repository
        self.ledger = ledger or InventoryLedger(repository)

    def record_sale(self, sale_data: SaleCreate) -> Sale:
        """
        Record a sale and take the sold units out of stock.

        Args:
            sale_data: Product, size, quantity and customer details

        Returns:
            The recorded sale

        Raises:
            ProductNotFoundError: If the product doesn't exist
            InsufficientStockError: If the size has fewer units than requested
            InconsistentStateError: If the sale was saved but stock was not decremented
        """
        product_id = sale_data.product_id
        quantity = sale_data.quantity

        product = self.repository.find_one(Product.COLLECTION, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        available = 0
        if offers_size(product, sale_data.size):
            available = self.ledger.get_available_stock(product_id, sale_data.size, product=product)
        if available < quantity:
            raise InsufficientStockError(available, quantity, sale_data.size)

        unit_price = float(product.get("price", 0))
        sale_doc = sale_data.model_dump(mode="json")
        sale_doc.update(
            product_name=product.get("name", ""),
            unit_price=unit_price,
            total_price=unit_price * quantity,
        )

        sale = Sale.model_validate(self.repository.insert(Sale.COLLECTION, sale_doc))
        logger.info(f"Sale {sale.id} recorded: {quantity} x product {product_id} size {sale.size}")

        if not self.ledger.decrement(product_id, sale.size, quantity, product=product):
            logger.error(
                f"Sale {sale.id} recorded but stock of product {product_id} "
                f"size {sale.size} was not decremented by {quantity}"
            )
            raise InconsistentStateError(
                f"Sale {sale.id} was recorded but inventory was not updated",
                sale=sale,
                product_id=product_id,
                size=sale.size,
                pending_adjustment=-quantity,
            )

        return sale

    def delete_sale(self, sale_id: str) -> Sale:
        """
        Delete a sale and give its units back to stock.

        Raises:
            SaleNotFoundError: If the sale doesn't exist
            InconsistentStateError: If the sale was deleted but stock was not restored
        """
        existing = self.repository.find_one(Sale.COLLECTION, sale_id)
        if existing is None:
            raise SaleNotFoundError(sale_id)

        sale = Sale.model_validate(self.repository.delete_by_id(Sale.COLLECTION, sale_id))
        logger.info(f"Sale {sale.id} deleted")

        if not self.ledger.increment(sale.product_id, sale.size, sale.quantity):
            logger.error(
                f"Sale {sale.id} deleted but stock of product {sale.product_id} "
                f"size {sale.size} was not restored by {sale.quantity}"
            )
            raise InconsistentStateError(
                f"Sale {sale.id} was deleted but inventory was not restored",
                sale=sale,
                product_id=sale.product_id,
                size=sale.size,
                pending_adjustment=sale.quantity,
            )

        return sale

    def get_sale(self, sale_id: str) -> Optional[Sale]:
        """Get a sale by ID."""
        document = self.repository.find_one(Sale.COLLECTION, sale_id)
        return Sale.model_validate(document) if document else None

    def list_sales(self, params: Optional[Mapping[str, Any]] = None) -> List[Sale]:
        """List sales, newest sale date first unless an order is given."""
        params = dict(params or {})
        params.setdefault("order", "sale_date.desc")
        return [Sale.model_validate(doc) for doc in self.repository.list(Sale.COLLECTION, params)]

    def summary(self, sales: Optional[List[Sale]] = None) -> SalesSummary:
        """Revenue, units and transaction count over the given (or all) sales."""
        if sales is None:
            sales = self.list_sales()
        return SalesSummary(
            total_revenue=sum(sale.total_price for sale in sales),
            units_sold=sum(sale.quantity for sale in sales),
            transactions=len(sales),
        )
