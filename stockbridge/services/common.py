import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from stockbridge.core import config


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


@contextmanager
def inventory_db() -> Iterator[sqlite3.Connection]:
    """Connection for one unit of work: commit on success, rollback on error."""
    conn = sqlite3.connect(str(config.INVENTORY_DB), timeout=config.SQLITE_TIMEOUT_S)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db() -> None:
    config.INVENTORY_DB.parent.mkdir(parents=True, exist_ok=True)

    with inventory_db() as conn:
        # Catalog: one row per barcode, barcode is the business key
        conn.execute("""
        CREATE TABLE IF NOT EXISTS products (
          barcode TEXT PRIMARY KEY,
          name TEXT NOT NULL DEFAULT '',
          added_by_app INTEGER NOT NULL DEFAULT 0,
          created_at TEXT NOT NULL
        )
        """)

        # Append-only movement log; barcode is a reference, not a foreign key
        conn.execute("""
        CREATE TABLE IF NOT EXISTS inventory (
          id TEXT PRIMARY KEY,
          barcode TEXT NOT NULL,
          quantity INTEGER NOT NULL CHECK (quantity > 0),
          timestamp TEXT NOT NULL,
          source TEXT NOT NULL
        )
        """)
        conn.execute("CREATE INDEX IF NOT EXISTS idx_inventory_timestamp ON inventory(timestamp)")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_inventory_barcode ON inventory(barcode)")
