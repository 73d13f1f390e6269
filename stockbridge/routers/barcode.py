from fastapi import APIRouter, Depends, status

from stockbridge.core.errors import InventoryError, http_error
from stockbridge.models.inventory import RecordRequest, RecordResult, ResolveResult
from stockbridge.services import resolver
from stockbridge.services.store import CatalogStore, EventLogStore, get_catalog_store, get_event_store

router = APIRouter(prefix="/barcode", tags=["barcode"])


# Code-128 values may contain slashes, hence the :path converter
@router.get("/resolve/{barcode:path}", response_model=ResolveResult)
async def barcode_resolve(barcode: str, catalog: CatalogStore = Depends(get_catalog_store)):
    try:
        return await resolver.resolve(barcode, catalog)
    except InventoryError as e:
        raise http_error(e) from e


@router.post("/record", response_model=RecordResult, status_code=status.HTTP_201_CREATED)
async def barcode_record(
    req: RecordRequest,
    catalog: CatalogStore = Depends(get_catalog_store),
    events: EventLogStore = Depends(get_event_store),
):
    try:
        return await resolver.create_and_record(
            req.barcode,
            req.quantity,
            catalog,
            events,
            name=req.name,
        )
    except InventoryError as e:
        raise http_error(e) from e
