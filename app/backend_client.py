"""Helper client used by the Streamlit app to talk to the API or fall back to local services."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Mapping, Optional, Tuple

import requests
from requests import Response

from rentals.db.mappers import map_property_row
from rentals.db.repo import get_repository
from rentals.errors import AuthError, ListingStoreError, PermissionDeniedError, PropertyNotFoundError
from rentals.models.property import PropertyCreate, PropertyUpdate, SortKey
from rentals.models.user import RegisterRequest
from rentals.services.auth_service import AuthService
from rentals.services.contact_service import ContactService
from rentals.services.filter_state import build_filter_spec, spec_to_params
from rentals.services.image_service import ImageService
from rentals.services.listing_service import ListingService, RequestSequencer, SearchResult
from rentals.services.owner_service import OwnerService, summarize
from rentals.utils.logging import get_logger, kv

LOGGER = get_logger("app.backend_client")

# Only an unreachable API switches the client to local services; an API that
# answers with an error status is reported to the caller.
UNREACHABLE = (requests.ConnectionError, requests.Timeout)


class BackendClient:
    def __init__(self) -> None:
        self.base_url = os.getenv("API_BASE_URL", "http://localhost:8000")
        self.session = requests.Session()
        self.use_api = self._ping_api()
        self.repository: Optional[object] = None
        self.listing_service: Optional[ListingService] = None
        self.contact_service: Optional[ContactService] = None
        self.owner_service: Optional[OwnerService] = None
        self.image_service: Optional[ImageService] = None
        self.auth_service: Optional[AuthService] = None
        if not self.use_api:
            self._enable_local_mode()

    def _ping_api(self) -> bool:
        try:
            resp = self.session.get(f"{self.base_url}/api/health", timeout=2)
            return resp.status_code == 200
        except requests.RequestException:
            return False

    def search(
        self,
        raw_filters: Mapping[str, Any],
        sort: str,
        sequencer: RequestSequencer[SearchResult],
    ) -> Optional[SearchResult]:
        """Run a search tracked by the caller's ``sequencer``.

        Returns None when a newer search was issued on the same sequencer while
        this one was in flight; the caller keeps showing what it already has.
        """

        ticket = sequencer.issue()
        result = self._search(raw_filters, sort)
        if not sequencer.accept(ticket, result):
            return None
        return result

    def _search(self, raw_filters: Mapping[str, Any], sort: str) -> SearchResult:
        spec = build_filter_spec(raw_filters)
        sort_key = SortKey.parse(sort)
        if self.use_api:
            params = spec_to_params(spec)
            params["sort"] = sort_key.value
            try:
                resp = self.session.get(f"{self.base_url}/api/properties", params=params, timeout=10)
                if resp.status_code == 503:
                    return SearchResult(ok=False, filters=spec, sort=sort_key, error=self._detail(resp))
                self._raise_for_status(resp)
                items = [map_property_row(item) for item in resp.json()["items"]]
                return SearchResult(ok=True, filters=spec, sort=sort_key, properties=items)
            except UNREACHABLE as exc:
                LOGGER.warning(kv("api_search_failed", error=exc))
                self._enable_local_mode()
            except requests.RequestException as exc:
                return SearchResult(ok=False, filters=spec, sort=sort_key, error=str(exc))
        return self.listing_service.search_spec(spec, sort_key)

    def get_property(self, property_id: str) -> Dict:
        if self.use_api:
            try:
                resp = self.session.get(f"{self.base_url}/api/properties/{property_id}", timeout=10)
                if resp.status_code == 404:
                    raise ValueError("Property not found")
                self._check_response(resp)
                return resp.json()
            except UNREACHABLE:
                self._enable_local_mode()
        try:
            detail = self.contact_service.property_detail(property_id)
        except PropertyNotFoundError as exc:
            raise ValueError("Property not found") from exc
        return detail.model_dump(mode="json", by_alias=True)

    def owner_listings(self, owner_id: str) -> Dict:
        if self.use_api:
            try:
                resp = self.session.get(f"{self.base_url}/api/owners/{owner_id}/properties", timeout=10)
                self._check_response(resp)
                return resp.json()
            except UNREACHABLE:
                self._enable_local_mode()
        records = self.owner_service.list_listings(owner_id)
        return {
            "items": [record.model_dump(mode="json", by_alias=True) for record in records],
            "total": len(records),
            "summary": summarize(records).model_dump(by_alias=True),
        }

    def create_listing(self, owner_id: str, payload: PropertyCreate, draft: bool = False) -> Dict:
        if self.use_api:
            try:
                resp = self.session.post(
                    f"{self.base_url}/api/properties",
                    params={"draft": str(draft).lower()},
                    json=payload.model_dump(mode="json", by_alias=True),
                    headers={"X-User-Id": owner_id},
                    timeout=10,
                )
                self._check_response(resp)
                return resp.json()
            except UNREACHABLE:
                self._enable_local_mode()
        owner = self.repository.get_user(owner_id)  # type: ignore[attr-defined]
        if owner is None:
            raise PermissionDeniedError("Unknown user")
        record = self.owner_service.create_listing(owner, payload, draft=draft)
        return record.model_dump(mode="json", by_alias=True)

    def update_listing(self, owner_id: str, property_id: str, changes: PropertyUpdate) -> Dict:
        if self.use_api:
            try:
                resp = self.session.patch(
                    f"{self.base_url}/api/properties/{property_id}",
                    json=changes.model_dump(mode="json", by_alias=True, exclude_unset=True, exclude_none=True),
                    headers={"X-User-Id": owner_id},
                    timeout=10,
                )
                self._check_response(resp, property_id)
                return resp.json()
            except UNREACHABLE:
                self._enable_local_mode()
        record = self.owner_service.update_listing(owner_id, property_id, changes)
        return record.model_dump(mode="json", by_alias=True)

    def delete_listing(self, owner_id: str, property_id: str) -> None:
        if self.use_api:
            try:
                resp = self.session.delete(
                    f"{self.base_url}/api/properties/{property_id}",
                    headers={"X-User-Id": owner_id},
                    timeout=10,
                )
                self._check_response(resp, property_id)
                return
            except UNREACHABLE:
                self._enable_local_mode()
        self.owner_service.delete_listing(owner_id, property_id)

    def login(self, email: str, password: str) -> Dict:
        if self.use_api:
            try:
                resp = self.session.post(
                    f"{self.base_url}/api/auth/login", json={"email": email, "password": password}, timeout=10
                )
                if resp.status_code == 401:
                    raise AuthError(self._detail(resp, "Invalid email or password"))
                self._check_response(resp)
                return resp.json()
            except UNREACHABLE:
                self._enable_local_mode()
        return self.auth_service.login(email, password).model_dump(mode="json", by_alias=True)

    def register(self, req: RegisterRequest) -> Dict:
        if self.use_api:
            try:
                resp = self.session.post(
                    f"{self.base_url}/api/auth/register", json=req.model_dump(by_alias=True), timeout=10
                )
                if resp.status_code == 400:
                    raise AuthError(self._detail(resp, "Registration failed"))
                self._check_response(resp)
                return resp.json()
            except UNREACHABLE:
                self._enable_local_mode()
        return self.auth_service.register(req).model_dump(mode="json", by_alias=True)

    def upload_images(self, owner_id: str, property_id: str, files: List[Tuple[str, bytes, str]]) -> Dict:
        """Upload (filename, bytes, content type) triples and attach them to the listing."""

        if self.use_api:
            try:
                resp = self.session.post(
                    f"{self.base_url}/api/properties/{property_id}/images",
                    files=[("files", item) for item in files],
                    headers={"X-User-Id": owner_id},
                    timeout=60,
                )
                self._check_response(resp, property_id)
                return resp.json()
            except UNREACHABLE:
                self._enable_local_mode()
        self.owner_service.owned_listing(owner_id, property_id)
        urls = self.image_service.upload_images([(data, ctype) for _, data, ctype in files], property_id)
        record = self.owner_service.add_images(owner_id, property_id, urls)
        return {"uploaded": len(urls), "failed": len(files) - len(urls), "property": record.model_dump(mode="json", by_alias=True)}

    def _enable_local_mode(self) -> None:
        if self.repository is None:
            self.repository = get_repository()
            self.listing_service = ListingService(self.repository)
            self.contact_service = ContactService(self.repository)
            self.owner_service = OwnerService(self.repository)
            self.image_service = ImageService(self.repository)
            self.auth_service = AuthService(self.repository)
        self.use_api = False

    @staticmethod
    def _detail(response: Response, default: str = "") -> str:
        try:
            detail = response.json().get("detail")
        except ValueError:
            detail = None
        return str(detail or default or response.reason or response.status_code)

    def _check_response(self, response: Response, property_id: Optional[str] = None) -> None:
        """Map API error statuses to the errors the local services raise."""

        if response.status_code == 404 and property_id is not None:
            raise PropertyNotFoundError(property_id)
        if response.status_code == 403:
            raise PermissionDeniedError(self._detail(response, "Forbidden"))
        if response.status_code == 503:
            raise ListingStoreError(self._detail(response, "Listings unavailable"))
        self._raise_for_status(response)

    def _raise_for_status(self, response: Response) -> None:
        try:
            response.raise_for_status()
        except requests.RequestException as exc:
            LOGGER.warning(kv("api_error", status=response.status_code, error=exc))
            raise
