# stockbridge/services/feed.py
from __future__ import annotations

import csv
import io
from typing import List, Optional

from stockbridge.core.errors import InvalidInput
from stockbridge.models.inventory import FeedParseResult, MergeRow, RowError

BARCODE_HEADERS = ("ean", "barcode")
NAME_HEADER = "name"

_DELIMITERS = (",", ";", "\t")


def _sniff_delimiter(text: str) -> str:
    header = next((ln for ln in text.splitlines() if ln.strip()), "")
    best = ","
    best_count = header.count(",")
    for d in _DELIMITERS[1:]:
        c = header.count(d)
        if c > best_count:
            best, best_count = d, c
    return best


def _column(header: List[str], names: tuple) -> Optional[int]:
    for n in names:
        if n in header:
            return header.index(n)
    return None


def decode_feed(body: bytes) -> str:
    """Decode an uploaded feed as UTF-8 (BOM allowed); anything else is rejected."""
    try:
        return body.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise InvalidInput(f"Feed is not valid UTF-8 (byte {e.start})") from e


def parse_feed(text: str) -> FeedParseResult:
    """
    Parse a delimited product feed with a header row into merge rows.

    Recognised columns: `ean` or `barcode`, and `name` (case-insensitive).
    Blank lines are skipped. Lines with the wrong number of fields are
    reported with their line number and left out; the rest still parse.
    """
    text = (text or "").lstrip("\ufeff")
    delimiter = _sniff_delimiter(text)
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)

    out = FeedParseResult()
    header: Optional[List[str]] = None
    barcode_idx: Optional[int] = None
    name_idx: Optional[int] = None

    try:
        for row in reader:
            if not any(cell.strip() for cell in row):
                continue

            if header is None:
                header = [h.strip().lower() for h in row]
                barcode_idx = _column(header, BARCODE_HEADERS)
                name_idx = _column(header, (NAME_HEADER,))
                if barcode_idx is None:
                    raise InvalidInput(f"Feed header has no barcode column (expected one of {', '.join(BARCODE_HEADERS)})")
                continue

            if len(row) != len(header):
                out.errors.append(
                    RowError(
                        row=reader.line_num,
                        barcode=row[barcode_idx].strip() if barcode_idx < len(row) else "",
                        reason=f"Expected {len(header)} fields, got {len(row)}",
                    )
                )
                continue

            out.rows.append(
                MergeRow(
                    barcode=row[barcode_idx],
                    name=row[name_idx] if name_idx is not None else None,
                )
            )
    except csv.Error as e:
        # the reader cannot resync after this; keep what parsed so far
        out.errors.append(RowError(row=reader.line_num, reason=f"Unreadable line: {e}"))

    if header is None:
        raise InvalidInput("Feed is empty")

    return out
