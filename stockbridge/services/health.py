# stockbridge/services/health.py
from __future__ import annotations

import sqlite3
import time
from typing import Any, Dict, Optional

from stockbridge.core import config


def _ms_since(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _check_result(status: str, latency_ms: int, error: Optional[str] = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {"status": status, "latency_ms": latency_ms}
    if error:
        out["error"] = error
    return out


def check_db() -> Dict[str, Any]:
    start = time.perf_counter()
    try:
        conn = sqlite3.connect(str(config.INVENTORY_DB), timeout=2)
        try:
            conn.execute("SELECT 1 FROM products LIMIT 1;")
            conn.execute("SELECT 1 FROM inventory LIMIT 1;")
        finally:
            conn.close()
        return _check_result("ok", _ms_since(start))
    except sqlite3.Error as e:
        return _check_result("fail", _ms_since(start), str(e))


def version_payload() -> Dict[str, Any]:
    return {
        "version": config.APP_VERSION,
        "git_sha": config.GIT_SHA,
        "build_date": config.BUILD_DATE,
    }
