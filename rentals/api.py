from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, File, Header, HTTPException, Query, Request, Response, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)

from .db.repo import get_repository
from .errors import AuthError, ListingStoreError, PermissionDeniedError, PropertyNotFoundError
from .models.property import PropertyCreate, PropertyRecord, PropertyUpdate
from .models.user import LoginRequest, RegisterRequest
from .services.auth_service import AuthService
from .services.contact_service import ContactService
from .services.filter_state import filters_from_params
from .services.image_service import ImageService
from .services.listing_service import ListingService
from .services.owner_service import OwnerService, summarize
from .utils.logging import get_logger, kv

LOGGER = get_logger("api")

app = FastAPI(title="Direct Rentals")
router = APIRouter(prefix="/api")


@app.exception_handler(ListingStoreError)
async def listing_store_unavailable(request: Request, exc: ListingStoreError) -> JSONResponse:
    LOGGER.warning(kv("store_unavailable", path=request.url.path, error=exc))
    return JSONResponse(status_code=503, content={"detail": f"Listings unavailable: {exc}"})


def _dump(model) -> Dict[str, Any]:
    return jsonable_encoder(model.model_dump(mode="json", by_alias=True))


def _dump_many(records: List[PropertyRecord]) -> List[Dict[str, Any]]:
    return [_dump(record) for record in records]


def _require_user(user_id: Optional[str]) -> str:
    if not user_id:
        raise HTTPException(401, detail="X-User-Id header required")
    return user_id


@router.get("/health")
def health(): return {"status": "ok"}


@router.get("/properties")
def list_props(request: Request, sort: str = Query("newest")):
    params = {k: v for k, v in request.query_params.items() if k != "sort"}
    spec = filters_from_params(params)
    result = ListingService(get_repository()).search_spec(spec, sort)
    if not result.ok:
        raise HTTPException(503, detail=f"Listings unavailable: {result.error}")
    return {"items": _dump_many(result.properties), "total": result.total, "sort": result.sort.value}


@router.get("/properties/{property_id}")
def get_prop(property_id: str):
    try:
        detail = ContactService(get_repository()).property_detail(property_id)
    except PropertyNotFoundError as exc:
        raise HTTPException(404, detail=str(exc))
    return _dump(detail)


@router.get("/owners/{owner_id}/properties")
def owner_props(owner_id: str):
    records = OwnerService(get_repository()).list_listings(owner_id)
    return {"items": _dump_many(records), "total": len(records), "summary": _dump(summarize(records))}


@router.post("/properties", status_code=201)
def create_prop(payload: PropertyCreate, draft: bool = Query(False), x_user_id: Optional[str] = Header(None)):
    owner_id = _require_user(x_user_id)
    repo = get_repository()
    owner = repo.get_user(owner_id)
    if owner is None:
        raise HTTPException(403, detail="Unknown user")
    record = OwnerService(repo).create_listing(owner, payload, draft=draft)
    return _dump(record)


@router.patch("/properties/{property_id}")
def update_prop(property_id: str, changes: PropertyUpdate, x_user_id: Optional[str] = Header(None)):
    owner_id = _require_user(x_user_id)
    try:
        record = OwnerService(get_repository()).update_listing(owner_id, property_id, changes)
    except PropertyNotFoundError as exc:
        raise HTTPException(404, detail=str(exc))
    except PermissionDeniedError as exc:
        raise HTTPException(403, detail=str(exc))
    return _dump(record)


@router.delete("/properties/{property_id}", status_code=204)
def delete_prop(property_id: str, x_user_id: Optional[str] = Header(None)):
    owner_id = _require_user(x_user_id)
    try:
        OwnerService(get_repository()).delete_listing(owner_id, property_id)
    except PropertyNotFoundError as exc:
        raise HTTPException(404, detail=str(exc))
    except PermissionDeniedError as exc:
        raise HTTPException(403, detail=str(exc))
    return Response(status_code=204)


@router.post("/properties/{property_id}/images")
def upload_prop_images(property_id: str, files: List[UploadFile] = File(...), x_user_id: Optional[str] = Header(None)):
    owner_id = _require_user(x_user_id)
    repo = get_repository()
    owners = OwnerService(repo)
    try:
        owners.owned_listing(owner_id, property_id)
        urls = ImageService(repo).upload_images(
            [(f.file.read(), f.content_type or "image/jpeg") for f in files], property_id
        )
        record = owners.add_images(owner_id, property_id, urls)
    except PropertyNotFoundError as exc:
        raise HTTPException(404, detail=str(exc))
    except PermissionDeniedError as exc:
        raise HTTPException(403, detail=str(exc))
    return {"uploaded": len(urls), "failed": len(files) - len(urls), "property": _dump(record)}


@router.post("/auth/register", status_code=201)
def register(req: RegisterRequest):
    try:
        session = AuthService(get_repository()).register(req)
    except AuthError as exc:
        raise HTTPException(400, detail=str(exc))
    return _dump(session)


@router.post("/auth/login")
def login(req: LoginRequest):
    try:
        session = AuthService(get_repository()).login(req.email, req.password)
    except AuthError as exc:
        LOGGER.info(kv("login_failed", email=req.email))
        raise HTTPException(401, detail=str(exc))
    return _dump(session)


@router.post("/auth/logout")
def logout():
    try:
        AuthService(get_repository()).logout()
    except AuthError as exc:
        raise HTTPException(400, detail=str(exc))
    return {"ok": True}


app.include_router(router)
