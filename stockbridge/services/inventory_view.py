# stockbridge/services/inventory_view.py
"""
Read side of the inventory: join the event log against the catalog, filter,
aggregate and flatten for export.

Everything here is a pure function of (events, catalog, filter). Callers
re-run it whenever the filter or the data changes; nothing is cached.
"""
from __future__ import annotations

import csv
import io
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from stockbridge.models.inventory import (
    InventoryEvent,
    InventoryFilter,
    InventoryView,
    JoinedInventoryRow,
    OnHandRow,
    Product,
)

# Column identity is part of the export contract; downstream sheets key on it
EXPORT_COLUMNS = ("EAN", "Name", "Quantity", "Timestamp", "Source", "Added by App")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """ISO date or datetime -> aware UTC datetime; None when blank or malformed."""
    s = (value or "").strip()
    if not s:
        return None
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def catalog_index(catalog: Iterable[Product]) -> Dict[str, Product]:
    return {p.barcode: p for p in catalog}


def join_event(event: InventoryEvent, products: Mapping[str, Product]) -> JoinedInventoryRow:
    prod = products.get(event.barcode)
    return JoinedInventoryRow(
        **event.model_dump(),
        product_name=prod.name if prod else "",
        added_by_app=prod.added_by_app if prod else False,
    )


def _matches_search(row: JoinedInventoryRow, needle: str) -> bool:
    return needle in row.barcode.lower() or needle in (row.product_name or "").lower()


def _within(row: JoinedInventoryRow, lo: Optional[datetime], hi: Optional[datetime]) -> bool:
    if lo is None and hi is None:
        return True
    ts = parse_timestamp(row.timestamp)
    if ts is None:
        return False
    if lo is not None and ts < lo:
        return False
    if hi is not None and ts > hi:
        return False
    return True


def apply_filter(rows: Iterable[JoinedInventoryRow], filt: Optional[InventoryFilter]) -> List[JoinedInventoryRow]:
    if filt is None:
        return list(rows)

    needle = (filt.search or "").strip().lower()
    lo = parse_timestamp(filt.date_from)
    hi = parse_timestamp(filt.date_to)

    out = []
    for r in rows:
        if needle and not _matches_search(r, needle):
            continue
        if not _within(r, lo, hi):
            continue
        out.append(r)
    return out


def build_view(
    events: Sequence[InventoryEvent],
    catalog: Iterable[Product],
    filt: Optional[InventoryFilter] = None,
) -> InventoryView:
    products = catalog_index(catalog)
    joined = [join_event(e, products) for e in events]
    rows = apply_filter(joined, filt)
    return InventoryView(
        rows=rows,
        total_count=len(rows),
        total_quantity=sum(r.quantity for r in rows),
    )


def on_hand(events: Iterable[InventoryEvent], catalog: Iterable[Product]) -> List[OnHandRow]:
    """Per-barcode totals. Events only add, so every total is >= 0."""
    products = catalog_index(catalog)
    totals: Dict[str, OnHandRow] = {}

    for e in events:
        row = totals.get(e.barcode)
        if row is None:
            prod = products.get(e.barcode)
            row = totals[e.barcode] = OnHandRow(barcode=e.barcode, product_name=prod.name if prod else "")
        row.quantity += e.quantity
        row.events += 1

    return [totals[k] for k in sorted(totals)]


def export_rows(rows: Iterable[JoinedInventoryRow]) -> List[Dict[str, object]]:
    return [
        {
            "EAN": r.barcode,
            "Name": r.product_name,
            "Quantity": r.quantity,
            "Timestamp": r.timestamp,
            "Source": r.source,
            "Added by App": "Yes" if r.added_by_app else "",
        }
        for r in rows
    ]


def to_csv(rows: Iterable[JoinedInventoryRow]) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=EXPORT_COLUMNS, lineterminator="\r\n")
    writer.writeheader()
    writer.writerows(export_rows(rows))
    return buf.getvalue()
