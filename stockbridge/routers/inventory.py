# stockbridge/routers/inventory.py
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from stockbridge.core import config
from stockbridge.core.errors import InventoryError, http_error
from stockbridge.models.inventory import InventoryFilter, InventoryView
from stockbridge.services import inventory_view
from stockbridge.services.store import CatalogStore, EventLogStore, get_catalog_store, get_event_store

router = APIRouter(prefix="/inventory", tags=["inventory"])


async def _load(catalog: CatalogStore, events: EventLogStore):
    try:
        evs = await events.list_events_ordered_by_timestamp_desc()
        products = await catalog.list_all()
    except InventoryError as e:
        raise http_error(e) from e
    return evs, products


def _filter(search: Optional[str], date_from: Optional[str], date_to: Optional[str]) -> InventoryFilter:
    return InventoryFilter(search=search, date_from=date_from, date_to=date_to)


@router.get("", response_model=InventoryView)
async def list_inventory(
    search: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    catalog: CatalogStore = Depends(get_catalog_store),
    events: EventLogStore = Depends(get_event_store),
):
    evs, products = await _load(catalog, events)
    return inventory_view.build_view(evs, products, _filter(search, date_from, date_to))


@router.get("/on-hand")
async def on_hand(
    catalog: CatalogStore = Depends(get_catalog_store),
    events: EventLogStore = Depends(get_event_store),
) -> dict[str, Any]:
    evs, products = await _load(catalog, events)
    return {"items": [r.model_dump() for r in inventory_view.on_hand(evs, products)]}


@router.get("/export")
async def export_inventory(
    search: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    catalog: CatalogStore = Depends(get_catalog_store),
    events: EventLogStore = Depends(get_event_store),
):
    evs, products = await _load(catalog, events)
    view = inventory_view.build_view(evs, products, _filter(search, date_from, date_to))
    return Response(
        content=inventory_view.to_csv(view.rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{config.EXPORT_FILENAME}"'},
    )
