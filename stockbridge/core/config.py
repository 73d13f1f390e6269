import os
from pathlib import Path

# Project root = the checkout containing stockbridge/
PROJECT_ROOT = Path(__file__).resolve().parents[2]

DATA_DIR = Path(os.getenv("STOCKBRIDGE_DATA_DIR", str(PROJECT_ROOT / "data")))
INVENTORY_DB = Path(os.getenv("INVENTORY_DB", str(DATA_DIR / "inventory.sqlite3")))

# --- Version / build metadata (override via systemd env) ---
APP_VERSION = os.getenv("APP_VERSION", "0.3.0")
GIT_SHA = os.getenv("GIT_SHA", "unknown")
BUILD_DATE = os.getenv("BUILD_DATE", "unknown")

# Rows per upsert statement when merging a catalog feed
MERGE_CHUNK_SIZE = int(os.getenv("MERGE_CHUNK_SIZE", "500"))

# Optional webhook hit when a scanned barcode is not in the catalog
UNKNOWN_BARCODE_WEBHOOK = os.getenv("UNKNOWN_BARCODE_WEBHOOK") or None
NOTIFY_TIMEOUT_S = float(os.getenv("NOTIFY_TIMEOUT_S", "10"))

SQLITE_TIMEOUT_S = float(os.getenv("SQLITE_TIMEOUT_S", "10"))

EXPORT_FILENAME = "inventory.csv"
