"""
Shared fixtures: a throwaway SQLite inventory per test, the SQLite stores
bound to it, and a TestClient running the full app (lifespan included).
"""
from __future__ import annotations

from typing import List

import pytest
from fastapi.testclient import TestClient

from stockbridge.core import config
from stockbridge.models.inventory import InventoryEvent, Product
from stockbridge.services import common
from stockbridge.services.store import SqliteCatalogStore, SqliteEventStore


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def db_path(tmp_path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "inventory.sqlite3"
    monkeypatch.setattr(config, "INVENTORY_DB", path)
    monkeypatch.setattr(config, "UNKNOWN_BARCODE_WEBHOOK", None)
    common.init_db()
    return path


@pytest.fixture
def catalog(db_path) -> SqliteCatalogStore:
    return SqliteCatalogStore()


@pytest.fixture
def events(db_path) -> SqliteEventStore:
    return SqliteEventStore()


@pytest.fixture
def client(db_path):
    from stockbridge.main import create_app

    with TestClient(create_app()) as c:
        yield c


def product(barcode: str, name: str, added_by_app: bool = False) -> Product:
    return Product(barcode=barcode, name=name, added_by_app=added_by_app, created_at="2025-01-01T00:00:00+00:00")


def event(barcode: str, quantity: int, timestamp: str, source: str = "app", id: str = "") -> InventoryEvent:
    return InventoryEvent(
        id=id or f"{barcode}-{timestamp}",
        barcode=barcode,
        quantity=quantity,
        timestamp=timestamp,
        source=source,
    )


def insert_products(*products: Product) -> None:
    with common.inventory_db() as conn:
        conn.executemany(
            "INSERT INTO products (barcode, name, added_by_app, created_at) VALUES (?, ?, ?, ?)",
            [(p.barcode, p.name, int(p.added_by_app), p.created_at) for p in products],
        )


def count_rows(table: str) -> int:
    with common.inventory_db() as conn:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


def names_by_barcode() -> dict:
    with common.inventory_db() as conn:
        return {r[0]: r[1] for r in conn.execute("SELECT barcode, name FROM products")}


def all_products() -> List[tuple]:
    with common.inventory_db() as conn:
        return [tuple(r) for r in conn.execute(
            "SELECT barcode, name, added_by_app, created_at FROM products ORDER BY barcode"
        )]
