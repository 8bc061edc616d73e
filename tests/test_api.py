import pytest
from fastapi.testclient import TestClient

from rentals.api import app
from rentals.db import repo as repo_module
from rentals.db.repo import reset_repository
from rentals.errors import ListingStoreError

client = TestClient(app)


@pytest.fixture(autouse=True)
def fresh_repository():
    reset_repository()
    yield
    reset_repository()


def test_health():
    assert client.get("/api/health").json() == {"status": "ok"}


def test_properties_endpoint():
    resp = client.get("/api/properties")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["total"] == len(payload["items"]) == 6
    assert payload["sort"] == "newest"
    first = payload["items"][0]
    assert {"id", "fullAddress", "ownerId", "createdAt", "images"} <= set(first)


def test_properties_filters_and_sort():
    resp = client.get("/api/properties", params={"minPrice": "60000", "availableOnly": "true", "sort": "price-low"})
    items = resp.json()["items"]
    assert [item["id"] for item in items] == ["p-004", "p-002"]


def test_properties_inverted_range_is_empty():
    resp = client.get("/api/properties", params={"minPrice": 100000, "maxPrice": 50000})
    assert resp.status_code == 200
    assert resp.json() == {"items": [], "total": 0, "sort": "newest"}


def test_properties_store_failure_returns_503(monkeypatch):
    def boom(self):
        raise ListingStoreError("backend offline")

    monkeypatch.setattr(repo_module.Repo, "fetch_all", boom)
    resp = client.get("/api/properties")
    assert resp.status_code == 503
    assert "backend offline" in resp.json()["detail"]


def test_store_failure_outside_search_returns_503(monkeypatch):
    def boom(self, *args):
        raise ListingStoreError("backend offline")

    monkeypatch.setattr(repo_module.Repo, "get_property", boom)
    monkeypatch.setattr(repo_module.Repo, "fetch_by_owner", boom)

    detail = client.get("/api/properties/p-001")
    assert detail.status_code == 503
    assert "backend offline" in detail.json()["detail"]
    assert client.get("/api/owners/u-001/properties").status_code == 503
    headers = {"X-User-Id": "u-001"}
    assert client.patch("/api/properties/p-001", json={"price": 1}, headers=headers).status_code == 503
    assert client.delete("/api/properties/p-001", headers=headers).status_code == 503


def test_patch_with_null_field_keeps_stored_value():
    resp = client.patch("/api/properties/p-001", json={"price": None, "title": "Renamed"}, headers={"X-User-Id": "u-001"})
    assert resp.status_code == 200
    assert resp.json()["price"] == 50000
    assert resp.json()["title"] == "Renamed"


def test_property_detail_has_owner_email():
    resp = client.get("/api/properties/p-004")
    assert resp.status_code == 200
    assert resp.json()["ownerEmail"] == "brian.otieno@example.com"
    assert client.get("/api/properties/missing").status_code == 404


def test_owner_properties_with_summary():
    payload = client.get("/api/owners/u-002/properties").json()
    assert [item["id"] for item in payload["items"]] == ["p-004", "p-003"]
    assert payload["summary"] == {"total": 2, "active": 1, "rented": 1, "draft": 0}


def test_owner_crud_flow():
    body = {"title": "Loft", "price": 70000, "location": "Nairobi, Upper Hill", "type": "Loft", "bedrooms": 1}
    assert client.post("/api/properties", json=body).status_code == 401

    created = client.post("/api/properties", json=body, params={"draft": "true"}, headers={"X-User-Id": "u-001"})
    assert created.status_code == 201
    listing = created.json()
    assert listing["status"] == "draft"
    assert listing["ownerName"] == "Grace Wanjiru"

    foreign = client.patch(f"/api/properties/{listing['id']}", json={"price": 1}, headers={"X-User-Id": "u-002"})
    assert foreign.status_code == 403

    updated = client.patch(
        f"/api/properties/{listing['id']}", json={"status": "active", "price": 72000}, headers={"X-User-Id": "u-001"}
    )
    assert updated.status_code == 200
    assert updated.json()["price"] == 72000

    search = client.get("/api/properties", params={"type": "loft"}).json()
    assert [item["id"] for item in search["items"]] == [listing["id"]]

    assert client.delete(f"/api/properties/{listing['id']}", headers={"X-User-Id": "u-001"}).status_code == 204
    assert client.delete(f"/api/properties/{listing['id']}", headers={"X-User-Id": "u-001"}).status_code == 404


def test_register_and_login():
    body = {"email": "owner@example.com", "password": "hunter22", "firstName": "Wanja", "lastName": "Mwangi", "userType": "owner"}
    registered = client.post("/api/auth/register", json=body)
    assert registered.status_code == 201
    assert registered.json()["displayName"] == "Wanja Mwangi"

    ok = client.post("/api/auth/login", json={"email": "owner@example.com", "password": "hunter22"})
    assert ok.status_code == 200
    assert ok.json()["accessToken"]

    bad = client.post("/api/auth/login", json={"email": "owner@example.com", "password": "nope"})
    assert bad.status_code == 401


def test_upload_images_appends_urls(monkeypatch, tmp_path):
    from rentals.utils import io as io_module

    monkeypatch.setattr(io_module, "UPLOAD_DIR", str(tmp_path))
    files = [
        ("files", ("front.jpg", b"front-bytes", "image/jpeg")),
        ("files", ("back.png", b"back-bytes", "image/png")),
    ]
    resp = client.post("/api/properties/p-006/images", files=files, headers={"X-User-Id": "u-003"})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["uploaded"] == 2
    assert payload["failed"] == 0
    images = payload["property"]["images"]
    assert images[0] == "https://example.com/img/p-006-a.jpg"
    assert len(images) == 3
    assert len(list(tmp_path.rglob("image_*"))) == 2

    denied = client.post("/api/properties/p-006/images", files=files, headers={"X-User-Id": "u-001"})
    assert denied.status_code == 403
