import threading

from rentals.db.csv_repo import CSVRepository
from rentals.errors import ListingStoreError
from rentals.models.property import SortKey
from rentals.services.listing_service import ListingService, RequestSequencer


class _BrokenStore:
    def fetch_all(self):
        raise ListingStoreError("permission denied")


def _service() -> ListingService:
    return ListingService(CSVRepository())


def test_search_without_filters_returns_everything_newest_first():
    result = _service().search({})
    assert result.ok
    ids = [r.id for r in result.properties]
    assert ids == ["p-005", "p-004", "p-001", "p-002", "p-003", "p-006"]
    assert result.total == 6


def test_search_normalizes_raw_form_values():
    result = _service().search(
        {"city": "nairobi", "type": "All Types", "bedrooms": "", "availableOnly": True}, "price-low"
    )
    assert [r.id for r in result.properties] == ["p-001", "p-002"]
    assert result.sort == SortKey.PRICE_LOW


def test_search_matches_neighbourhood_substring():
    result = _service().search({"city": "westlands"})
    assert [r.id for r in result.properties] == ["p-001"]


def test_store_failure_is_not_an_empty_result():
    result = ListingService(_BrokenStore()).search({"city": "Nairobi"})
    assert result.ok is False
    assert result.properties == []
    assert "permission denied" in result.error


def test_sequencer_discards_superseded_responses():
    seq: RequestSequencer[str] = RequestSequencer()
    first = seq.issue()
    second = seq.issue()
    assert seq.accept(second, "fresh")
    assert not seq.accept(first, "stale")
    assert seq.latest == "fresh"
    assert seq.latest_ticket == second


def test_sequencer_tickets_increase_across_threads():
    seq: RequestSequencer[int] = RequestSequencer()
    tickets = []
    lock = threading.Lock()

    def worker():
        for _ in range(50):
            t = seq.issue()
            with lock:
                tickets.append(t)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert sorted(tickets) == list(range(1, 201))
    assert seq.is_current(200)
