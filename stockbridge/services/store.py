# stockbridge/services/store.py
"""
Persistence contracts consumed by the inventory core, plus the SQLite
adapters the service ships with.

Every contract method is async. The SQLite adapters push the blocking
sqlite3 work onto Starlette's threadpool and translate sqlite3 errors into
StoreFailure. Nothing here retries.
"""
from __future__ import annotations

import logging
import sqlite3
import uuid
from typing import Any, Callable, List, Optional, Protocol, Sequence, TypeVar

from starlette.concurrency import run_in_threadpool

from stockbridge.core.errors import InvalidInput, StoreFailure
from stockbridge.core.request_context import log_extra
from stockbridge.models.inventory import InventoryEvent, Product
from stockbridge.services import common

log = logging.getLogger("stockbridge.store")

T = TypeVar("T")

# SQLite's default host-parameter limit is 999 on older builds
_IN_CLAUSE_BATCH = 500


class CatalogStore(Protocol):
    async def get_by_barcode(self, barcode: str) -> Optional[Product]: ...

    async def create_if_absent(self, product: Product) -> bool: ...

    async def upsert_many(self, rows: Sequence[Product], conflict_key: str = "barcode") -> List[str]: ...

    async def list_all(self) -> List[Product]: ...


class EventLogStore(Protocol):
    async def insert(self, barcode: str, quantity: int, source: str) -> InventoryEvent: ...

    async def list_events_ordered_by_timestamp_desc(self) -> List[InventoryEvent]: ...


def _product_from_row(r: sqlite3.Row) -> Product:
    return Product(
        barcode=r["barcode"],
        name=r["name"] or "",
        added_by_app=bool(r["added_by_app"]),
        created_at=r["created_at"],
    )


def _event_from_row(r: sqlite3.Row) -> InventoryEvent:
    return InventoryEvent(
        id=r["id"],
        barcode=r["barcode"],
        quantity=int(r["quantity"]),
        timestamp=r["timestamp"],
        source=r["source"],
    )


async def _run(operation: str, fn: Callable[..., T], *args: Any) -> T:
    try:
        return await run_in_threadpool(fn, *args)
    except sqlite3.Error as e:
        log.error("store operation failed", extra=log_extra(operation=operation, error=str(e)))
        raise StoreFailure(f"{operation} failed: {e}", operation=operation) from e


class SqliteCatalogStore:
    def _get_by_barcode(self, barcode: str) -> Optional[Product]:
        with common.inventory_db() as conn:
            row = conn.execute(
                "SELECT barcode, name, added_by_app, created_at FROM products WHERE barcode = ?",
                (barcode,),
            ).fetchone()
        return _product_from_row(row) if row else None

    def _create_if_absent(self, product: Product) -> bool:
        with common.inventory_db() as conn:
            cur = conn.execute(
                """
                INSERT INTO products (barcode, name, added_by_app, created_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(barcode) DO NOTHING
                """,
                (product.barcode, product.name, 1 if product.added_by_app else 0, product.created_at),
            )
            return cur.rowcount == 1

    def _upsert_many(self, rows: Sequence[Product]) -> List[str]:
        # one statement per barcode; the last duplicate wins
        latest = {p.barcode: p for p in rows}
        rows = list(latest.values())
        barcodes = list(latest)

        with common.inventory_db() as conn:
            existing: set[str] = set()
            for i in range(0, len(barcodes), _IN_CLAUSE_BATCH):
                part = barcodes[i : i + _IN_CLAUSE_BATCH]
                marks = ",".join("?" for _ in part)
                found = conn.execute(
                    f"SELECT barcode FROM products WHERE barcode IN ({marks})", part
                ).fetchall()
                existing.update(r[0] for r in found)

            # provenance and creation time are write-once; only the name follows
            # the feed, and a feed row without a name keeps the current one
            conn.executemany(
                """
                INSERT INTO products (barcode, name, added_by_app, created_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(barcode) DO UPDATE SET
                  name = COALESCE(NULLIF(excluded.name, ''), products.name)
                """,
                [(p.barcode, p.name, 1 if p.added_by_app else 0, p.created_at) for p in rows],
            )

        return [b for b in barcodes if b not in existing]

    def _list_all(self) -> List[Product]:
        with common.inventory_db() as conn:
            rows = conn.execute(
                "SELECT barcode, name, added_by_app, created_at FROM products ORDER BY rowid"
            ).fetchall()
        return [_product_from_row(r) for r in rows]

    async def get_by_barcode(self, barcode: str) -> Optional[Product]:
        return await _run("get_by_barcode", self._get_by_barcode, barcode)

    async def create_if_absent(self, product: Product) -> bool:
        return await _run("create_product", self._create_if_absent, product)

    async def upsert_many(self, rows: Sequence[Product], conflict_key: str = "barcode") -> List[str]:
        if conflict_key != "barcode":
            raise InvalidInput(f"Unsupported conflict key: {conflict_key!r}")
        if not rows:
            return []
        return await _run("upsert_many", self._upsert_many, list(rows))

    async def list_all(self) -> List[Product]:
        return await _run("list_products", self._list_all)


class SqliteEventStore:
    def _insert(self, barcode: str, quantity: int, source: str) -> InventoryEvent:
        event = InventoryEvent(
            id=str(uuid.uuid4()),
            barcode=barcode,
            quantity=int(quantity),
            timestamp=common.now_iso(),
            source=source,
        )
        with common.inventory_db() as conn:
            conn.execute(
                "INSERT INTO inventory (id, barcode, quantity, timestamp, source) VALUES (?, ?, ?, ?, ?)",
                (event.id, event.barcode, event.quantity, event.timestamp, event.source),
            )
        return event

    def _list_desc(self) -> List[InventoryEvent]:
        with common.inventory_db() as conn:
            rows = conn.execute(
                """
                SELECT id, barcode, quantity, timestamp, source
                FROM inventory
                ORDER BY timestamp DESC, rowid DESC
                """
            ).fetchall()
        return [_event_from_row(r) for r in rows]

    async def insert(self, barcode: str, quantity: int, source: str) -> InventoryEvent:
        return await _run("insert_event", self._insert, barcode, quantity, source)

    async def list_events_ordered_by_timestamp_desc(self) -> List[InventoryEvent]:
        return await _run("list_events", self._list_desc)


def get_catalog_store() -> CatalogStore:
    return SqliteCatalogStore()


def get_event_store() -> EventLogStore:
    return SqliteEventStore()
