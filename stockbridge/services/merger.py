# stockbridge/services/merger.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from stockbridge.core import config
from stockbridge.core.barcodes import validate_barcode
from stockbridge.core.errors import InvalidInput, NoData, PartialBatchFailure, StoreFailure
from stockbridge.core.request_context import log_extra
from stockbridge.models.inventory import MergeResult, MergeRow, Product, RowError
from stockbridge.services import common
from stockbridge.services.store import CatalogStore

log = logging.getLogger("stockbridge.merger")


def prepare_rows(rows: Sequence[MergeRow]) -> Tuple[List[MergeRow], List[RowError]]:
    """
    Validate a feed batch and collapse duplicate barcodes.

    Bad rows are collected, not raised. For duplicates the later row's name
    wins while the barcode keeps the position of its first occurrence. A blank
    name comes back as None, meaning "leave the catalog name alone".
    """
    latest: Dict[str, MergeRow] = {}
    rejected: List[RowError] = []

    for i, row in enumerate(rows, start=1):
        try:
            code = validate_barcode(row.barcode)
        except InvalidInput as e:
            rejected.append(RowError(row=i, barcode=(row.barcode or "").strip(), reason=str(e)))
            continue
        label = (row.name or "").strip() or None
        earlier = latest.get(code)
        if label is None and earlier is not None:
            label = earlier.name
        latest[code] = MergeRow(barcode=code, name=label)

    return list(latest.values()), rejected


def _chunks(seq: List[Product], size: int) -> List[List[Product]]:
    size = max(1, int(size))
    return [seq[i : i + size] for i in range(0, len(seq), size)]


async def merge(
    rows: Sequence[MergeRow],
    catalog: CatalogStore,
    chunk_size: Optional[int] = None,
    imported_at: Optional[str] = None,
) -> MergeResult:
    """
    Upsert a catalog feed keyed by barcode.

    Existing products get the feed's name when the row has one; unknown
    barcodes become products with added_by_app=False and the batch's import
    timestamp. Each chunk is
    one upsert statement; chunks are written in order and the first failing
    chunk stops the merge.
    """
    if not rows:
        raise InvalidInput("Merge batch is empty")

    valid, rejected = prepare_rows(rows)
    if not valid:
        raise NoData("No valid rows to merge", rejected=rejected)

    stamp = imported_at or common.now_iso()
    products = [
        Product(barcode=r.barcode, name=r.name or "", added_by_app=False, created_at=stamp)
        for r in valid
    ]

    result = MergeResult(rejected=rejected, imported_at=stamp)
    batches = _chunks(products, chunk_size or config.MERGE_CHUNK_SIZE)

    for n, batch in enumerate(batches):
        try:
            created = set(await catalog.upsert_many(batch, conflict_key="barcode"))
        except StoreFailure as e:
            result.failed = [p.barcode for b in batches[n:] for p in b]
            if result.merged == 0:
                raise
            result.status = "partial"
            log.warning(
                "catalog merge stopped partway",
                extra=log_extra(merged=result.merged, failed=len(result.failed)),
            )
            raise PartialBatchFailure(f"Merged {result.merged} rows before failing: {e}", result) from e

        for p in batch:
            (result.created if p.barcode in created else result.updated).append(p.barcode)
        result.merged += len(batch)

    log.info(
        "catalog merged",
        extra=log_extra(
            merged=result.merged,
            created_count=len(result.created),
            updated_count=len(result.updated),
            rejected_count=len(result.rejected),
        ),
    )
    return result
