"""
Thin HTTP client for the document API.

Mirrors the query-builder style used by the storefront::

    client = CatalogClient("http://localhost:8000/api")
    shirts = (
        client.table("products")
        .eq("category", "football")
        .gte("price", 100)
        .order("price", ascending=False)
        .limit(10)
        .fetch()
    )
"""
import logging
from typing import Any, Iterable, Optional, Union

import httpx

from catalog.services.exceptions import (
    DocumentNotFoundError,
    DocumentTooLargeError,
    StoreFailureError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

Document = dict[str, Any]


class CatalogClient:
    """Entry point of the client; one ``QueryBuilder`` per request."""

    def __init__(self, base_url: str = "", http: Optional[httpx.Client] = None, timeout: float = 10.0):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.prefix = "" if http is None else base_url.rstrip("/")

    def table(self, name: str) -> "QueryBuilder":
        return QueryBuilder(self, name)

    def request(self, method: str, path: str, **kwargs) -> Any:
        """
        Send a request and decode the JSON body.

        Raises:
            DocumentNotFoundError: On 404
            DocumentTooLargeError: On 413
            StoreUnavailableError: When the server can't be reached or answers 503
            StoreFailureError: On any other error status
        """
        url = f"{self.prefix}{path}"
        try:
            response = self.http.request(method, url, **kwargs)
        except httpx.TransportError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise StoreUnavailableError(f"Server unreachable: {e}") from e

        if response.status_code == 404:
            collection, _, document_id = path.strip("/").partition("/")
            raise DocumentNotFoundError(collection, document_id)
        if response.status_code == 413:
            raise DocumentTooLargeError()
        if response.status_code == 503:
            raise StoreUnavailableError(_error_detail(response))
        if response.is_error:
            logger.error(f"{method} {url} returned {response.status_code}")
            raise StoreFailureError(f"HTTP {response.status_code}: {_error_detail(response)}")
        return response.json()

    def close(self) -> None:
        self.http.close()


class QueryBuilder:
    """Collects filters, ordering and a limit, then runs one request."""

    def __init__(self, client: CatalogClient, table: str):
        self.client = client
        self.table = table
        self._select = "*"
        self._filters: list[tuple[str, str, Any]] = []
        self._order: Optional[tuple[str, str]] = None
        self._limit: Optional[int] = None

    def select(self, fields: str = "*") -> "QueryBuilder":
        self._select = fields
        return self

    def _filter(self, field: str, operator: str, value: Any) -> "QueryBuilder":
        self._filters.append((field, operator, value))
        return self

    def eq(self, field: str, value: Any) -> "QueryBuilder":
        return self._filter(field, "eq", value)

    def neq(self, field: str, value: Any) -> "QueryBuilder":
        return self._filter(field, "neq", value)

    def gt(self, field: str, value: Any) -> "QueryBuilder":
        return self._filter(field, "gt", value)

    def gte(self, field: str, value: Any) -> "QueryBuilder":
        return self._filter(field, "gte", value)

    def lt(self, field: str, value: Any) -> "QueryBuilder":
        return self._filter(field, "lt", value)

    def lte(self, field: str, value: Any) -> "QueryBuilder":
        return self._filter(field, "lte", value)

    def like(self, field: str, pattern: str) -> "QueryBuilder":
        return self._filter(field, "like", pattern)

    def ilike(self, field: str, pattern: str) -> "QueryBuilder":
        return self._filter(field, "ilike", pattern)

    def in_(self, field: str, values: Iterable[Any]) -> "QueryBuilder":
        return self._filter(field, "in", list(values))

    def order(self, field: str, ascending: bool = True) -> "QueryBuilder":
        self._order = (field, "asc" if ascending else "desc")
        return self

    def limit(self, count: int) -> "QueryBuilder":
        self._limit = count
        return self

    def params(self) -> list[tuple[str, str]]:
        """Encode the query as ``field[op]=value`` parameters."""
        params = []
        if self._select != "*":
            params.append(("select", self._select))
        for field, operator, value in self._filters:
            if isinstance(value, list):
                value = ",".join(str(item) for item in value)
            params.append((f"{field}[{operator}]", str(value)))
        if self._order:
            params.append(("order", f"{self._order[0]}.{self._order[1]}"))
        if self._limit:
            params.append(("limit", str(self._limit)))
        return params

    def fetch(self) -> list[Document]:
        return self.client.request("GET", f"/{self.table}", params=self.params())

    def single(self) -> Optional[Document]:
        """First matching document, or None."""
        self._limit = 1
        rows = self.fetch()
        return rows[0] if rows else None

    def get(self, document_id: str) -> Document:
        return self.client.request("GET", f"/{self.table}/{document_id}")

    def insert(self, data: Union[Document, list[Document]]) -> Union[Document, list[Document]]:
        return self.client.request("POST", f"/{self.table}", json=data)

    def update(self, changes: Document) -> list[Document]:
        return self.client.request("PATCH", f"/{self.table}", params=self.params(), json=changes)

    def update_by_id(self, document_id: str, changes: Document) -> Document:
        return self.client.request("PATCH", f"/{self.table}/{document_id}", json=changes)

    def delete(self) -> list[Document]:
        return self.client.request("DELETE", f"/{self.table}", params=self.params())

    def delete_by_id(self, document_id: str) -> Document:
        return self.client.request("DELETE", f"/{self.table}/{document_id}")


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or body)
    return str(body)
