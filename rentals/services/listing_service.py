"""Search pipeline: fetch every listing from the store, then filter and sort locally."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Generic, List, Mapping, Optional, TypeVar

from ..errors import ListingStoreError
from ..models.property import FilterSpec, PropertyRecord, SortKey
from ..utils.logging import get_logger, kv
from .filter_state import build_filter_spec
from .query_engine import query

LOGGER = get_logger("services.listings")

T = TypeVar("T")


@dataclass
class SearchResult:
    """Outcome of one search.

    ``ok`` is False when the store could not be read; in that case
    ``properties`` is empty but does not mean "no matches".
    """

    ok: bool
    filters: FilterSpec
    sort: SortKey
    properties: List[PropertyRecord] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.properties)


class ListingService:
    def __init__(self, repository):
        self.repository = repository

    def search(self, raw_filters: Optional[Mapping[str, Any]] = None, sort: SortKey | str = SortKey.NEWEST) -> SearchResult:
        spec = build_filter_spec(raw_filters)
        return self.search_spec(spec, sort)

    def search_spec(self, spec: FilterSpec, sort: SortKey | str = SortKey.NEWEST) -> SearchResult:
        sort_key = SortKey.parse(sort)
        try:
            records = self.repository.fetch_all()
        except ListingStoreError as exc:
            LOGGER.error(kv("search_failed", error=exc))
            return SearchResult(ok=False, filters=spec, sort=sort_key, error=str(exc))
        results = query(records, spec, sort_key)
        LOGGER.debug(kv("search", fetched=len(records), matched=len(results), sort=sort_key.value))
        return SearchResult(ok=True, filters=spec, sort=sort_key, properties=results)


class RequestSequencer(Generic[T]):
    """Keeps only the response to the most recently issued request.

    Call ``issue`` before starting a fetch and ``accept`` with the returned
    ticket when it completes. A response whose ticket has been superseded is
    dropped so a slow, older request cannot overwrite newer results.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._issued = 0
        self._accepted_ticket = 0
        self._latest: Optional[T] = None

    def issue(self) -> int:
        with self._lock:
            self._issued += 1
            return self._issued

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._issued

    def accept(self, ticket: int, result: T) -> bool:
        with self._lock:
            if ticket != self._issued:
                LOGGER.debug(kv("response_discarded", ticket=ticket, latest=self._issued))
                return False
            self._accepted_ticket = ticket
            self._latest = result
            return True

    @property
    def latest(self) -> Optional[T]:
        with self._lock:
            return self._latest

    @property
    def latest_ticket(self) -> int:
        with self._lock:
            return self._accepted_ticket


__all__ = ["SearchResult", "ListingService", "RequestSequencer"]
