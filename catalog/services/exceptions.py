from typing import Any, Optional


class DocumentNotFoundError(Exception):
    """Exception raised when no document matches an identifier lookup."""

    def __init__(self, collection: str, document_id: str):
        self.collection = collection
        self.document_id = document_id
        super().__init__(f"Document {document_id} not found in '{collection}'")


class ProductNotFoundError(DocumentNotFoundError):
    """Exception raised when the requested product doesn't exist."""

    def __init__(self, product_id: str):
        super().__init__("products", product_id)
        self.args = (f"Product with ID {product_id} not found",)


class SaleNotFoundError(DocumentNotFoundError):
    """Exception raised when the requested sale doesn't exist."""

    def __init__(self, sale_id: str):
        super().__init__("sales", sale_id)
        self.args = (f"Sale with ID {sale_id} not found",)


class InsufficientStockError(Exception):
    """Exception raised when there's not enough stock to fulfill a sale."""

    def __init__(self, available: int, requested: int, size: Optional[str] = None):
        self.available = available
        self.requested = requested
        self.size = size
        super().__init__(
            f"Insufficient stock. Available: {available}, Requested: {requested}"
        )


class StoreFailureError(Exception):
    """Exception raised when the document store rejects or fails an operation."""


class StoreUnavailableError(StoreFailureError):
    """The document store could not be reached."""


class DocumentTooLargeError(StoreFailureError):
    """A document exceeds the store's maximum document size."""

    def __init__(self, size: Optional[int] = None, limit: Optional[int] = None):
        self.size = size
        self.limit = limit
        if size is not None and limit is not None:
            message = f"Document is too large ({size} bytes, limit {limit} bytes)"
        else:
            message = "Document is too large for the document store"
        super().__init__(message)


class InconsistentStateError(Exception):
    """
    A multi-step sale operation completed only partially.

    The sale write succeeded but the matching inventory adjustment did not.
    Nothing is rolled back; the caller gets the persisted sale and the
    adjustment that still has to be applied.
    """

    def __init__(self, message: str, sale: Any, product_id: str, size: str, pending_adjustment: int):
        self.sale = sale
        self.product_id = product_id
        self.size = size
        self.pending_adjustment = pending_adjustment
        super().__init__(message)
