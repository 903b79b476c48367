"""Tests for the HTTP client shim."""
import httpx
import pytest

from catalog.client import CatalogClient
from catalog.services.exceptions import (
    DocumentNotFoundError,
    DocumentTooLargeError,
    StoreUnavailableError,
)


@pytest.fixture
def api(client):
    return CatalogClient("/api", http=client)


def test_query_builder_encodes_filters(api):
    """Test filters, order and limit become bracketed query parameters."""
    query = (
        api.table("products")
        .select("name,price")
        .eq("category", "football")
        .gte("price", 100)
        .in_("color", ["Red", "Blue"])
        .order("price", ascending=False)
        .limit(5)
    )

    assert query.params() == [
        ("select", "name,price"),
        ("category[eq]", "football"),
        ("price[gte]", "100"),
        ("color[in]", "Red,Blue"),
        ("order", "price.desc"),
        ("limit", "5"),
    ]


def test_insert_fetch_update_delete(api):
    """Test a full cycle through the REST surface."""
    created = api.table("items").insert([
        {"name": "Cap", "price": 20},
        {"name": "Scarf", "price": 35},
        {"name": "Gloves", "price": 50},
    ])
    assert len(created) == 3

    rows = api.table("items").gt("price", 25).order("price").fetch()
    assert [row["name"] for row in rows] == ["Scarf", "Gloves"]

    updated = api.table("items").ilike("name", "^sc").update({"price": 30})
    assert [row["price"] for row in updated] == [30]

    first = api.table("items").order("price", ascending=False).single()
    assert first["name"] == "Gloves"

    deleted = api.table("items").lt("price", 31).delete()
    assert sorted(row["name"] for row in deleted) == ["Cap", "Scarf"]


def test_get_and_delete_by_id(api):
    """Test single-document helpers and the not-found mapping."""
    created = api.table("items").insert({"name": "Belt"})

    assert api.table("items").get(created["id"])["name"] == "Belt"
    assert api.table("items").update_by_id(created["id"], {"name": "Leather Belt"})["name"] == "Leather Belt"
    assert api.table("items").delete_by_id(created["id"])["id"] == created["id"]

    with pytest.raises(DocumentNotFoundError):
        api.table("items").get(created["id"])


def test_single_returns_none_when_empty(api):
    """Test single() on an empty result."""
    assert api.table("items").eq("name", "nothing").single() is None


def test_payload_too_large_is_distinguished():
    """Test 413 answers map to DocumentTooLargeError."""
    transport = httpx.MockTransport(lambda request: httpx.Response(413, json={"detail": "too large"}))
    api = CatalogClient(http=httpx.Client(transport=transport, base_url="http://catalog"))

    with pytest.raises(DocumentTooLargeError):
        api.table("products").insert({"name": "Huge"})


def test_unreachable_server_is_distinguished():
    """Test transport failures map to StoreUnavailableError."""

    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = CatalogClient(http=httpx.Client(transport=httpx.MockTransport(refuse), base_url="http://catalog"))

    with pytest.raises(StoreUnavailableError):
        api.table("products").fetch()
