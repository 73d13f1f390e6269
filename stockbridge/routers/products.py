# stockbridge/routers/products.py
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request

from stockbridge.core.errors import InventoryError, http_error
from stockbridge.models.inventory import ImportResponse, MergeRequest, MergeResult
from stockbridge.services import feed, matcher, merger
from stockbridge.services.store import CatalogStore, get_catalog_store

router = APIRouter(prefix="/products", tags=["products"])


@router.get("")
async def list_products(catalog: CatalogStore = Depends(get_catalog_store)) -> dict[str, Any]:
    try:
        items = await catalog.list_all()
    except InventoryError as e:
        raise http_error(e) from e
    return {"items": [p.model_dump() for p in items]}


@router.get("/search")
async def search_products(
    q: str = "",
    limit: Optional[int] = Query(default=None, ge=1),
    catalog: CatalogStore = Depends(get_catalog_store),
) -> dict[str, Any]:
    # no intent, no results: skip the catalog read entirely
    if not q.strip():
        return {"items": []}
    try:
        items = matcher.search(q, await catalog.list_all())
    except InventoryError as e:
        raise http_error(e) from e
    if limit is not None:
        items = items[:limit]
    return {"items": [p.model_dump() for p in items]}


@router.post("/merge", response_model=MergeResult)
async def merge_products(req: MergeRequest, catalog: CatalogStore = Depends(get_catalog_store)):
    try:
        return await merger.merge(req.rows, catalog)
    except InventoryError as e:
        raise http_error(e) from e


@router.post("/import", response_model=ImportResponse)
async def import_products(
    request: Request,
    preview: bool = False,
    catalog: CatalogStore = Depends(get_catalog_store),
):
    """
    Import a CSV product feed sent as the raw request body.
    UTF-8 text with a header row: `ean` (or `barcode`) and optionally `name`.
    With ?preview=true the feed is only parsed, nothing is written.
    """
    body = await request.body()
    try:
        parsed = feed.parse_feed(feed.decode_feed(body))
        if preview:
            return ImportResponse(preview=parsed.rows, parse_errors=parsed.errors)
        result = await merger.merge(parsed.rows, catalog)
    except InventoryError as e:
        raise http_error(e) from e
    return ImportResponse(result=result, parse_errors=parsed.errors)
