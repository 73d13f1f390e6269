# stockbridge/models/inventory.py
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

SOURCE_APP = "app"
SOURCE_ADDED_BY_APP = "added_by_app"


class Product(BaseModel):
    barcode: str
    name: str = ""
    added_by_app: bool = False
    created_at: str


class InventoryEvent(BaseModel):
    id: str
    barcode: str
    quantity: int
    timestamp: str
    source: str


class JoinedInventoryRow(InventoryEvent):
    # left join: both fall back to empty/false when the product is missing
    product_name: str = ""
    added_by_app: bool = False


class InventoryFilter(BaseModel):
    search: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None


class InventoryView(BaseModel):
    rows: List[JoinedInventoryRow] = Field(default_factory=list)
    total_count: int = 0
    total_quantity: int = 0


class OnHandRow(BaseModel):
    barcode: str
    product_name: str = ""
    quantity: int = 0
    events: int = 0


class ResolveResult(BaseModel):
    found: bool
    barcode: str
    product: Optional[Product] = None
    symbology: Optional[str] = None
    # None when the value is not GTIN-shaped
    check_digit_ok: Optional[bool] = None


class RecordRequest(BaseModel):
    barcode: str
    quantity: int
    name: Optional[str] = None


class RecordResult(BaseModel):
    product_created: bool
    event_recorded: bool = True
    source: str
    product: Product
    event: InventoryEvent


class MergeRow(BaseModel):
    barcode: Optional[str] = None
    name: Optional[str] = None


class MergeRequest(BaseModel):
    rows: List[MergeRow]


class RowError(BaseModel):
    row: int
    barcode: str = ""
    reason: str


class MergeResult(BaseModel):
    merged: int = 0
    created: List[str] = Field(default_factory=list)
    updated: List[str] = Field(default_factory=list)
    rejected: List[RowError] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)
    status: Literal["ok", "partial"] = "ok"
    imported_at: Optional[str] = None


class FeedParseResult(BaseModel):
    rows: List[MergeRow] = Field(default_factory=list)
    errors: List[RowError] = Field(default_factory=list)


class ImportResponse(BaseModel):
    result: Optional[MergeResult] = None
    preview: List[MergeRow] = Field(default_factory=list)
    parse_errors: List[RowError] = Field(default_factory=list)
