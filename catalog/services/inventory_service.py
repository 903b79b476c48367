import logging
from typing import Optional

from catalog.models.product import Product
from catalog.services.document_service import Document, DocumentRepository
from catalog.services.exceptions import DocumentNotFoundError, StoreFailureError

logger = logging.getLogger(__name__)


class InventoryLedger:
    """
    Per-size stock counters kept in a product's ``inventory`` map.

    Every mutation is a read-modify-write of the whole map followed by an
    update of the product document. There is no locking and no version
    check: two concurrent mutations of the same product can both read the
    same stock and the last write wins.

    Callers that already hold the product document pass it as ``product``
    to skip the read; a successful write updates that document's
    ``inventory`` in place.

    Only sizes listed in the product's ``sizes`` can be written. A mutation
    for any other size is refused and reported as False.

    OVER-DECREMENT POLICY:
    ======================
    ``decrement`` floors stock at zero instead of failing when asked to
    remove more units than are available. Callers that must not oversell
    (the sales recorder) check ``get_available_stock`` first. Every clamp
    is logged as a warning so that a masked oversell leaves a trace.
    """

    COLLECTION = Product.COLLECTION

    def __init__(self, repository: DocumentRepository):
        self.repository = repository

    def increment(self, product_id: str, size: str, amount: int, product: Optional[Document] = None) -> bool:
        """
        Add stock for a size.

        Args:
            product_id: Product to adjust
            size: Size to adjust, one of the product's sizes
            amount: Units to add (non-negative)
            product: Already loaded product document, if any

        Returns:
            True if the new stock was saved, False if the product was not
            found, does not offer the size, or the store failed
        """
        _check_amount(amount)
        product = self._load_for_write(product_id, size, product, "increment")
        if product is None:
            return False

        current = _stock(product, size)
        return self._save(product, size, current + amount, "increment")

    def decrement(self, product_id: str, size: str, amount: int, product: Optional[Document] = None) -> bool:
        """
        Remove stock for a size, flooring at zero.

        Returns:
            True if the new stock was saved, False if the product was not
            found, does not offer the size, or the store failed
        """
        _check_amount(amount)
        product = self._load_for_write(product_id, size, product, "decrement")
        if product is None:
            return False

        current = _stock(product, size)
        if amount > current:
            logger.warning(
                f"Decrement of {amount} for product {product_id} size {size} "
                f"exceeds stock {current}; clamping to 0"
            )
        return self._save(product, size, max(0, current - amount), "decrement")

    def set_quantity(self, product_id: str, size: str, quantity: int, product: Optional[Document] = None) -> bool:
        """Overwrite the stock of a size (admin edit), clamped at zero."""
        product = self._load_for_write(product_id, size, product, "set quantity")
        if product is None:
            return False
        return self._save(product, size, max(0, quantity), "set quantity")

    def get_available_stock(self, product_id: str, size: str, product: Optional[Document] = None) -> int:
        """Stock for a size; 0 when the size or the product is unknown."""
        if product is None:
            product = self._load(product_id, "read stock")
        if product is None:
            return 0
        return _stock(product, size)

    def has_stock(self, product_id: str) -> bool:
        product = self._load(product_id, "read stock")
        if product is None:
            return False
        return any(stock > 0 for stock in (product.get("inventory") or {}).values())

    def _load(self, product_id: str, action: str) -> Optional[Document]:
        try:
            product = self.repository.find_one(self.COLLECTION, product_id)
        except StoreFailureError as e:
            logger.error(f"Could not load product {product_id} to {action}: {e}")
            return None
        if product is None:
            logger.error(f"Product {product_id} not found to {action}")
        return product

    def _load_for_write(
        self, product_id: str, size: str, product: Optional[Document], action: str
    ) -> Optional[Document]:
        if product is None:
            product = self._load(product_id, action)
        if product is None:
            return None
        if not offers_size(product, size):
            logger.error(f"Product {product_id} does not offer size {size}; refusing to {action}")
            return None
        return product

    def _save(self, product: Document, size: str, new_stock: int, action: str) -> bool:
        inventory = dict(product.get("inventory") or {})
        inventory[size] = new_stock
        try:
            self.repository.update_by_id(self.COLLECTION, product["id"], {"inventory": inventory})
        except (DocumentNotFoundError, StoreFailureError) as e:
            logger.error(f"Could not {action} inventory of product {product['id']}: {e}")
            return False
        product["inventory"] = inventory
        logger.info(f"Inventory {action}: product {product['id']} size {size} -> {new_stock}")
        return True


def offers_size(product: Document, size: str) -> bool:
    """Return True if the product lists ``size`` among its sizes."""
    return size in (product.get("sizes") or [])


def _stock(product: Document, size: str) -> int:
    return int((product.get("inventory") or {}).get(size, 0))


def _check_amount(amount: int) -> None:
    if amount < 0:
        raise ValueError(f"Amount must be non-negative, got {amount}")
