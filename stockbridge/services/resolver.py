# stockbridge/services/resolver.py
from __future__ import annotations

import logging
from typing import Optional

from stockbridge.core import config
from stockbridge.core.barcodes import gtin_check_digit_ok, is_gtin, symbology, validate_barcode
from stockbridge.core.errors import EventAppendFailure, InvalidInput, StoreFailure
from stockbridge.core.request_context import log_extra
from stockbridge.models.inventory import (
    SOURCE_ADDED_BY_APP,
    SOURCE_APP,
    Product,
    RecordResult,
    ResolveResult,
)
from stockbridge.services import common
from stockbridge.services.notify import notify_unknown
from stockbridge.services.store import CatalogStore, EventLogStore

log = logging.getLogger("stockbridge.resolver")


def validate_quantity(quantity: object) -> int:
    # bool is an int subclass; True is not a quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidInput(f"Quantity must be a whole number, got {quantity!r}")
    if quantity <= 0:
        raise InvalidInput(f"Quantity must be positive, got {quantity}")
    return quantity


def _resolved(code: str, product: Optional[Product]) -> ResolveResult:
    return ResolveResult(
        found=product is not None,
        barcode=code,
        product=product,
        symbology=symbology(code),
        check_digit_ok=gtin_check_digit_ok(code) if is_gtin(code) else None,
    )


async def resolve(barcode: str, catalog: CatalogStore) -> ResolveResult:
    code = validate_barcode(barcode)

    product = await catalog.get_by_barcode(code)
    if product is None:
        log.info("barcode not in catalog", extra=log_extra(barcode=code))
        await notify_unknown(config.UNKNOWN_BARCODE_WEBHOOK, code)

    return _resolved(code, product)


async def create_and_record(
    barcode: str,
    quantity: int,
    catalog: CatalogStore,
    events: EventLogStore,
    name: Optional[str] = None,
) -> RecordResult:
    """
    Record a quantity-in event for a scanned barcode, creating the product first
    when the catalog does not know it yet.

    The product insert is conditional (ON CONFLICT DO NOTHING), so two callers
    racing on the same unknown barcode end up with a single product row. The
    loser of the race records its event against the winner's product.

    Raises:
      InvalidInput       bad barcode/quantity, or no name for a new product
      StoreFailure       lookup or product creation failed (nothing written)
      EventAppendFailure product created, event not written
    """
    code = validate_barcode(barcode)
    qty = validate_quantity(quantity)

    product = await catalog.get_by_barcode(code)
    created = False

    if product is None:
        label = (name or "").strip()
        if not label:
            raise InvalidInput(f"Product {code} is not in the catalog; a name is required to create it")

        candidate = Product(barcode=code, name=label, added_by_app=True, created_at=common.now_iso())
        created = await catalog.create_if_absent(candidate)
        if created:
            product = candidate
            log.info("product created from scan", extra=log_extra(barcode=code))
        else:
            product = await catalog.get_by_barcode(code)
            if product is None:
                raise StoreFailure(f"Product {code} vanished after a conflicting create", operation="create_product")
            log.info("product created concurrently, reusing it", extra=log_extra(barcode=code))

    event_source = SOURCE_ADDED_BY_APP if created else SOURCE_APP

    try:
        event = await events.insert(code, qty, event_source)
    except StoreFailure as e:
        if created:
            raise EventAppendFailure(f"Product {code} was created but the inventory event was not recorded: {e}", product) from e
        raise

    log.info("inventory recorded", extra=log_extra(barcode=code, quantity=qty, source=event_source))
    return RecordResult(
        product_created=created,
        event_recorded=True,
        source=event_source,
        product=product,
        event=event,
    )
