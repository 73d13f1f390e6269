from __future__ import annotations

import logging
from typing import Optional

import httpx

from stockbridge.core import config
from stockbridge.core.request_context import log_extra

log = logging.getLogger("stockbridge.notify")


async def notify_unknown(callback_url: Optional[str], barcode: str) -> bool:
    """
    Tell an external hook (e.g. a Home Assistant webhook) that a scan missed the catalog.
    Delivery problems are logged, never raised: a miss is still a valid resolve.
    """
    if not callback_url:
        return False
    try:
        async with httpx.AsyncClient(timeout=config.NOTIFY_TIMEOUT_S) as client:
            resp = await client.post(callback_url, json={"barcode": barcode})
            resp.raise_for_status()
    except httpx.HTTPError as e:
        log.warning("unknown barcode notification failed", extra=log_extra(barcode=barcode, error=str(e)))
        return False
    return True
