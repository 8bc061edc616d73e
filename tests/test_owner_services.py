import pytest

from rentals.db.csv_repo import CSVRepository
from rentals.errors import AuthError, ListingStoreError, PermissionDeniedError, PropertyNotFoundError
from rentals.models.property import PropertyCreate, PropertyStatus, PropertyUpdate
from rentals.models.user import RegisterRequest
from rentals.services.auth_service import AuthService
from rentals.services.contact_service import ContactService
from rentals.services.image_service import ImageService, image_path
from rentals.services.owner_service import OwnerService


def _payload(**overrides) -> PropertyCreate:
    data = {"title": "Garden flat", "price": 65000, "location": "Nairobi, Lavington", "type": "Apartment", "bedrooms": 2}
    data.update(overrides)
    return PropertyCreate(**data)


def test_owner_listings_are_newest_first():
    service = OwnerService(CSVRepository())
    assert [r.id for r in service.list_listings("u-001")] == ["p-005", "p-001", "p-002"]


def test_owner_summary_counts_statuses():
    summary = OwnerService(CSVRepository()).summary("u-001")
    assert (summary.total, summary.active, summary.rented, summary.draft) == (3, 2, 0, 1)


def test_create_listing_stamps_owner_and_status():
    repo = CSVRepository()
    owner = repo.get_user("u-002")
    service = OwnerService(repo)
    draft = service.create_listing(owner, _payload(), draft=True)
    live = service.create_listing(owner, _payload(title="Second"))
    assert draft.status == PropertyStatus.DRAFT
    assert live.status == PropertyStatus.ACTIVE
    assert draft.owner_id == "u-002"
    assert draft.owner_name == "Brian Otieno"
    assert draft.created_at is not None
    assert service.list_listings("u-002")[0].id == live.id


def test_update_listing_applies_partial_changes():
    repo = CSVRepository()
    service = OwnerService(repo)
    record = service.update_listing("u-001", "p-001", PropertyUpdate(status=PropertyStatus.RENTED, price=52000))
    assert record.status == PropertyStatus.RENTED
    assert record.price == 52000
    assert record.title == "Sunny 2BR in Westlands"
    assert repo.get_property("p-001").status == PropertyStatus.RENTED


def test_update_listing_ignores_null_fields():
    repo = CSVRepository()
    record = OwnerService(repo).update_listing(
        "u-001", "p-001", PropertyUpdate.model_validate({"price": None, "bedrooms": None, "title": "Renamed"})
    )
    assert record.title == "Renamed"
    assert record.price == 50000
    assert record.bedrooms == 2


def test_foreign_owner_cannot_modify_listing():
    service = OwnerService(CSVRepository())
    with pytest.raises(PermissionDeniedError):
        service.update_listing("u-002", "p-001", PropertyUpdate(price=1))
    with pytest.raises(PermissionDeniedError):
        service.delete_listing("u-002", "p-001")


def test_delete_listing_and_unknown_id():
    repo = CSVRepository()
    service = OwnerService(repo)
    service.delete_listing("u-001", "p-002")
    assert repo.get_property("p-002") is None
    with pytest.raises(PropertyNotFoundError):
        service.delete_listing("u-001", "p-002")


def test_property_detail_includes_owner_email():
    detail = ContactService(CSVRepository()).property_detail("p-001")
    assert detail.owner_email == "grace.wanjiru@example.com"
    assert detail.title == "Sunny 2BR in Westlands"


def test_property_detail_without_owner_profile():
    detail = ContactService(CSVRepository()).property_detail("p-006")
    assert detail.owner_email is None


def test_property_detail_unknown_property():
    with pytest.raises(PropertyNotFoundError):
        ContactService(CSVRepository()).property_detail("nope")


def test_register_then_login():
    repo = CSVRepository()
    auth = AuthService(repo)
    session = auth.register(
        RegisterRequest(email="new@example.com", password="secret1", first_name="Ada", last_name="Njeri", user_type="owner")
    )
    assert session.display_name == "Ada Njeri"
    profile = repo.get_user(session.user_id)
    assert profile.user_type == "owner"
    assert profile.verified is False

    login = auth.login("new@example.com", "secret1")
    assert login.user_id == session.user_id
    assert login.access_token
    with pytest.raises(AuthError):
        auth.login("new@example.com", "wrong-password")


def test_register_rejects_existing_email():
    auth = AuthService(CSVRepository())
    with pytest.raises(AuthError):
        auth.register(RegisterRequest(email="grace.wanjiru@example.com", password="secret1", first_name="G", last_name="W"))


class _FlakyStorage:
    def __init__(self):
        self.paths = []

    def upload_image(self, path, data, content_type):
        self.paths.append(path)
        if data == b"bad":
            raise ListingStoreError("quota exceeded")
        return f"https://cdn.example.com/{path}"


def test_upload_images_skips_failures_and_keeps_order():
    storage = _FlakyStorage()
    urls = ImageService(storage).upload_images(
        [(b"one", "image/png"), (b"bad", "image/png"), (b"three", "image/jpeg")], "p-9"
    )
    assert len(urls) == 2
    assert "image_0_" in urls[0]
    assert "image_2_" in urls[1]
    assert all(p.startswith("properties/p-9/image_") for p in storage.paths)


def test_image_path_layout():
    assert image_path("abc", 3, millis=1700000000000) == "properties/abc/image_3_1700000000000"


def test_local_upload_writes_file(tmp_path):
    repo = CSVRepository(upload_root=str(tmp_path))
    url = ImageService(repo).upload_images([(b"jpeg-bytes", "image/jpeg")], "p-1")[0]
    assert url.startswith("file://")
    assert list(tmp_path.rglob("image_0_*"))[0].read_bytes() == b"jpeg-bytes"
