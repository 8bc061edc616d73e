import json

import pytest
import requests

from app.backend_client import BackendClient
from rentals.db.repo import get_repository, reset_repository
from rentals.errors import ListingStoreError, PermissionDeniedError, PropertyNotFoundError
from rentals.models.property import PropertyUpdate
from rentals.services.listing_service import RequestSequencer


@pytest.fixture(autouse=True)
def fresh_repository():
    reset_repository()
    yield
    reset_repository()


def _response(status_code, body=None):
    resp = requests.Response()
    resp.status_code = status_code
    resp.reason = "Error" if status_code >= 400 else "OK"
    resp.url = "http://api.test/api/properties/p-001"
    resp._content = json.dumps(body if body is not None else {}).encode("utf-8")
    return resp


class FakeSession:
    """Answers every call with ``reply`` (a response or an exception) and records the calls."""

    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    def _answer(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply

    def get(self, url, **kwargs):
        return self._answer("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._answer("POST", url, **kwargs)

    def patch(self, url, **kwargs):
        return self._answer("PATCH", url, **kwargs)

    def delete(self, url, **kwargs):
        return self._answer("DELETE", url, **kwargs)


def _api_client(monkeypatch, reply):
    monkeypatch.setattr(BackendClient, "_ping_api", lambda self: True)
    client = BackendClient()
    client.session = FakeSession(reply)
    return client


def _local_client(monkeypatch):
    monkeypatch.setattr(BackendClient, "_ping_api", lambda self: False)
    return BackendClient()


def test_local_search_is_accepted_by_sequencer(monkeypatch):
    client = _local_client(monkeypatch)
    sequencer = RequestSequencer()
    result = client.search({"city": "Mombasa"}, "newest", sequencer)
    assert result.ok
    assert [record.id for record in result.properties] == ["p-004"]
    assert sequencer.latest is result


def test_superseded_search_yields_nothing_and_keeps_newer_result(monkeypatch):
    client = _local_client(monkeypatch)
    sequencer = RequestSequencer()
    original = client.listing_service.search_spec
    newer = {}

    def slow_search(spec, sort_key):
        if "result" not in newer:
            newer["result"] = None
            # A second search on the same sequencer completes while this one is in flight.
            newer["result"] = client.search({"city": "Mombasa"}, "newest", sequencer)
        return original(spec, sort_key)

    monkeypatch.setattr(client.listing_service, "search_spec", slow_search)
    stale = client.search({}, "newest", sequencer)

    assert stale is None
    assert newer["result"] is not None
    assert sequencer.latest is newer["result"]
    assert sequencer.latest.filters.city == "Mombasa"


def test_independent_sequencers_do_not_drop_each_other(monkeypatch):
    client = _local_client(monkeypatch)
    first, second = RequestSequencer(), RequestSequencer()
    original = client.listing_service.search_spec
    other = {}

    def interleaved(spec, sort_key):
        if "result" not in other:
            other["result"] = None
            other["result"] = client.search({"city": "Mombasa"}, "newest", second)
        return original(spec, sort_key)

    monkeypatch.setattr(client.listing_service, "search_spec", interleaved)
    result = client.search({}, "newest", first)

    assert result is not None and result.total == 6
    assert other["result"].total == 1


def test_error_status_is_raised_without_local_fallback(monkeypatch):
    client = _api_client(monkeypatch, _response(422, {"detail": "Unprocessable"}))
    with pytest.raises(requests.HTTPError):
        client.delete_listing("u-001", "p-001")
    assert client.use_api
    assert client.repository is None
    assert get_repository().get_property("p-001") is not None


def test_server_error_on_update_is_not_replayed_locally(monkeypatch):
    client = _api_client(monkeypatch, _response(500, {"detail": "Internal Server Error"}))
    with pytest.raises(requests.HTTPError):
        client.update_listing("u-001", "p-001", PropertyUpdate(price=1))
    assert client.use_api
    assert get_repository().get_property("p-001").price == 50000


@pytest.mark.parametrize(
    "status, error",
    [(404, PropertyNotFoundError), (403, PermissionDeniedError), (503, ListingStoreError)],
)
def test_error_statuses_map_to_domain_errors(monkeypatch, status, error):
    client = _api_client(monkeypatch, _response(status, {"detail": "nope"}))
    with pytest.raises(error):
        client.delete_listing("u-001", "p-001")
    assert client.use_api


def test_unreachable_api_falls_back_to_local_services(monkeypatch):
    client = _api_client(monkeypatch, requests.ConnectionError("connection refused"))
    client.delete_listing("u-001", "p-001")
    assert not client.use_api
    assert get_repository().get_property("p-001") is None


def test_update_omits_null_fields_from_request(monkeypatch):
    client = _api_client(monkeypatch, _response(200, {"id": "p-001", "title": "Renamed"}))
    client.update_listing("u-001", "p-001", PropertyUpdate.model_validate({"price": None, "title": "Renamed"}))
    method, _, kwargs = client.session.calls[-1]
    assert method == "PATCH"
    assert kwargs["json"] == {"title": "Renamed"}
