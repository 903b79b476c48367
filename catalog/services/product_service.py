from typing import Any, List, Mapping, Optional

from catalog.models.product import Product
from catalog.schemas.product import ProductCreate, ProductUpdate
from catalog.services.catalog_service import CatalogService
from catalog.services.document_service import DocumentRepository
from catalog.services.exceptions import ProductNotFoundError


class ProductService:
    """
    Service class for Product CRUD operations.

    This service handles:
    - Creating new products
    - Reading products
    - Updating products (keeping inventory in line with sizes)
    - Deleting products
    - Cache invalidation for the public catalog
    """

    def __init__(self, repository: DocumentRepository, catalog: Optional[CatalogService] = None):
        self.repository = repository
        self.catalog = catalog or CatalogService(repository)

    def create(self, product_data: ProductCreate) -> Product:
        """
        Create a new product.

        Sizes without an inventory entry start at zero stock.
        """
        document = product_data.model_dump(mode="json")
        document["inventory"] = {
            size: product_data.inventory.get(size, 0) for size in product_data.sizes
        }
        product = Product.model_validate(self.repository.insert(Product.COLLECTION, document))
        self.catalog.invalidate()
        return product

    def get_by_id(self, product_id: str) -> Optional[Product]:
        """
        Get a product by ID.

        Returns:
            Product instance or None if not found
        """
        document = self.repository.find_one(Product.COLLECTION, product_id)
        return Product.model_validate(document) if document else None

    def get_all(self, params: Optional[Mapping[str, Any]] = None) -> List[Product]:
        """
        List products matching ``field[op]=value`` query parameters.
        """
        return [
            Product.model_validate(doc)
            for doc in self.repository.list(Product.COLLECTION, params or {})
        ]

    def update(self, product_id: str, product_data: ProductUpdate) -> Product:
        """
        Update an existing product.

        When the sizes change without an explicit inventory, stock of removed
        sizes is dropped and new sizes start at zero.

        Raises:
            ProductNotFoundError: If the product doesn't exist
        """
        existing = self.get_by_id(product_id)
        if existing is None:
            raise ProductNotFoundError(product_id)

        update_data = product_data.model_dump(mode="json", exclude_unset=True)
        sizes = update_data.get("sizes", existing.sizes)
        inventory = update_data.get("inventory", existing.inventory)
        if "sizes" in update_data or "inventory" in update_data:
            unknown = [size for size in inventory if size not in sizes]
            if "inventory" in update_data and unknown:
                raise ValueError(f"Inventory has sizes that are not offered: {', '.join(unknown)}")
            update_data["inventory"] = {size: inventory.get(size, 0) for size in sizes}

        product = Product.model_validate(
            self.repository.update_by_id(Product.COLLECTION, product_id, update_data)
        )
        self.catalog.invalidate()
        return product

    def delete(self, product_id: str) -> Product:
        """
        Delete a product.

        Raises:
            ProductNotFoundError: If the product doesn't exist
        """
        document = self.repository.find_one(Product.COLLECTION, product_id)
        if document is None:
            raise ProductNotFoundError(product_id)
        deleted = Product.model_validate(self.repository.delete_by_id(Product.COLLECTION, product_id))
        self.catalog.invalidate()
        return deleted
