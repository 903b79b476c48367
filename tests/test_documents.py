"""Tests for the generic document API."""
from unittest.mock import patch

from pymongo.errors import ServerSelectionTimeoutError


def _seed_prices(client, prices):
    return client.post(
        "/api/items",
        json=[{"name": f"Item {price}", "price": price} for price in prices]
    ).json()


def test_insert_single_document(client):
    """Test inserting one document returns one document with an id."""
    response = client.post("/api/items", json={"name": "Cap", "price": 15})

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Cap"
    assert len(data["id"]) == 24
    assert "_id" not in data
    assert "created_at" in data


def test_insert_list_returns_list(client):
    """Test inserting an array returns an array in the same order."""
    data = _seed_prices(client, [10, 20, 30])

    assert isinstance(data, list)
    assert [item["price"] for item in data] == [10, 20, 30]
    assert len({item["id"] for item in data}) == 3


def test_insert_ignores_client_id_and_keeps_created_at(client):
    """Test client ids are dropped and an explicit created_at is kept."""
    response = client.post(
        "/api/items",
        json={"id": "my-own-id", "name": "Scarf", "created_at": "2024-01-01T00:00:00.000Z"}
    )

    data = response.json()
    assert data["id"] != "my-own-id"
    assert data["created_at"] == "2024-01-01T00:00:00.000Z"


def test_round_trip_by_id_filter(client):
    """Test listing with id[eq] returns exactly the inserted document."""
    _seed_prices(client, [1, 2])
    created = client.post("/api/items", json={"name": "Target", "price": 3}).json()

    response = client.get("/api/items", params={"id[eq]": created["id"]})

    assert response.status_code == 200
    assert response.json() == [created]


def test_id_in_filter_matches_each_listed_document(client):
    """Test id[in] with several identifiers returns every listed document."""
    first, second, _ = _seed_prices(client, [1, 2, 3])

    response = client.get("/api/items", params={"id[in]": f"{first['id']},legacy,{second['id']}", "order": "price"})

    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [first["id"], second["id"]]


def test_price_range_order_and_limit(client):
    """Test a range filter with descending order and a limit."""
    _seed_prices(client, [50, 100, 150, 175, 200, 250])

    response = client.get(
        "/api/items",
        params={"price[gte]": "100", "price[lte]": "200", "order": "price.desc", "limit": "2"}
    )

    data = response.json()
    assert len(data) == 2
    assert all(100 <= item["price"] <= 200 for item in data)
    assert [item["price"] for item in data] == [200, 175]


def test_select_is_accepted(client):
    """Test select is accepted and does not project fields."""
    _seed_prices(client, [10])

    response = client.get("/api/items", params={"select": "name"})

    assert response.status_code == 200
    assert "price" in response.json()[0]


def test_ilike_filter(client):
    """Test case-insensitive pattern filter."""
    client.post("/api/items", json=[{"name": "Red Shirt"}, {"name": "blue shirt"}, {"name": "Cap"}])

    case_sensitive = client.get("/api/items", params={"name[like]": "Shirt"}).json()
    case_insensitive = client.get("/api/items", params={"name[ilike]": "shirt"}).json()

    assert [item["name"] for item in case_sensitive] == ["Red Shirt"]
    assert len(case_insensitive) == 2


def test_get_document(client):
    """Test getting a document by id."""
    created = client.post("/api/items", json={"name": "Belt"}).json()

    response = client.get(f"/api/items/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_get_document_not_found(client):
    """Test unknown and malformed ids return 404."""
    assert client.get("/api/items/64b7f0c2a1b2c3d4e5f60718").status_code == 404
    assert client.get("/api/items/not-an-id").status_code == 404


def test_invalid_collection_name(client):
    """Test collection names the proxy refuses."""
    response = client.get("/api/system.users")

    assert response.status_code == 400


def test_patch_by_id_merges_fields(client):
    """Test partial update keeps other fields and immutable fields."""
    created = client.post("/api/items", json={"name": "Socks", "price": 5, "color": "White"}).json()

    response = client.patch(
        f"/api/items/{created['id']}",
        json={"price": 7, "id": "other", "_id": "other", "created_at": "1999-01-01"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["price"] == 7
    assert data["color"] == "White"
    assert data["id"] == created["id"]
    assert data["created_at"] == created["created_at"]


def test_patch_by_id_not_found(client):
    """Test updating a missing document returns 404."""
    response = client.patch("/api/items/64b7f0c2a1b2c3d4e5f60718", json={"price": 1})

    assert response.status_code == 404


def test_patch_by_filter_returns_matching_set(client):
    """Test bulk update applies to every match and returns them."""
    _seed_prices(client, [10, 20, 30])

    response = client.patch("/api/items", params={"price[gte]": "20"}, json={"on_sale": True})

    data = response.json()
    assert len(data) == 2
    assert all(item["on_sale"] for item in data)
    untouched = client.get("/api/items", params={"price[lt]": "20"}).json()
    assert "on_sale" not in untouched[0]


def test_delete_by_filter_returns_deleted(client):
    """Test bulk delete returns the deleted documents."""
    _seed_prices(client, [10, 20, 30])

    response = client.delete("/api/items", params={"price[lte]": "20"})

    assert sorted(item["price"] for item in response.json()) == [10, 20]
    assert [item["price"] for item in client.get("/api/items").json()] == [30]


def test_delete_by_id(client):
    """Test deleting one document returns it and removes it."""
    created = client.post("/api/items", json={"name": "Gloves"}).json()

    response = client.delete(f"/api/items/{created['id']}")
    assert response.status_code == 200
    assert response.json()["id"] == created["id"]

    assert client.delete(f"/api/items/{created['id']}").status_code == 404


def test_reference_fields_filter_by_id(client):
    """Test identifier-shaped references are stored so *_id filters match."""
    product = client.post("/api/items", json={"name": "Jacket"}).json()
    client.post("/api/notes", json=[
        {"item_id": product["id"], "text": "first"},
        {"item_id": "64b7f0c2a1b2c3d4e5f60718", "text": "other"},
    ])

    response = client.get("/api/notes", params={"item_id[eq]": product["id"]})

    data = response.json()
    assert [note["text"] for note in data] == ["first"]
    assert data[0]["item_id"] == product["id"]


def test_oversized_document_is_rejected(client, repository):
    """Test documents above the size limit answer 413."""
    with patch("catalog.api.documents.DocumentRepository") as repository_cls:
        repository.max_document_bytes = 1024
        repository_cls.return_value = repository
        response = client.post("/api/items", json={"name": "Big", "image": "x" * 4096})

    assert response.status_code == 413
    assert response.json()["error"] == "document_too_large"


def test_unreachable_store_is_reported_distinctly(client):
    """Test connectivity failures answer 503, not 413 or a crash."""
    with patch(
        "catalog.services.document_service.DocumentRepository._collection",
        side_effect=ServerSelectionTimeoutError("no servers")
    ):
        response = client.get("/api/items")

    assert response.status_code == 503
    assert response.json()["error"] == "store_unavailable"
