# stockbridge/core/errors.py
from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional

from fastapi import HTTPException, status

if TYPE_CHECKING:
    from stockbridge.models.inventory import MergeResult, Product, RowError


class InventoryError(Exception):
    """Base class for everything the inventory core raises on purpose."""


class InvalidInput(InventoryError, ValueError):
    """Input rejected before the store is touched."""


class NoData(InvalidInput):
    """A merge batch in which not a single row survived validation."""

    def __init__(self, message: str, rejected: Optional[List["RowError"]] = None):
        super().__init__(message)
        self.rejected = list(rejected or [])


class StoreFailure(InventoryError):
    """
    The backing store was unreachable or refused the operation.
    The original exception is kept as __cause__.
    """

    def __init__(self, message: str, operation: str = "store"):
        super().__init__(message)
        self.operation = operation


class EventAppendFailure(StoreFailure):
    """
    The product row was created but the inventory event could not be written.
    The product stays; callers must report both outcomes separately.
    """

    def __init__(self, message: str, product: "Product"):
        super().__init__(message, operation="event_insert")
        self.product = product

    def detail(self) -> dict[str, Any]:
        return {
            "error": str(self),
            "product_created": True,
            "event_recorded": False,
            "product": self.product.model_dump(),
        }


class PartialBatchFailure(StoreFailure):
    """Some merge chunks were written before a later chunk failed."""

    def __init__(self, message: str, result: "MergeResult"):
        super().__init__(message, operation="upsert_many")
        self.result = result


def http_error(e: InventoryError) -> HTTPException:
    """Map a core error onto the HTTPException the routers raise."""
    if isinstance(e, NoData):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": str(e), "rejected": [r.model_dump() for r in e.rejected]},
        )
    if isinstance(e, InvalidInput):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, EventAppendFailure):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.detail())
    if isinstance(e, PartialBatchFailure):
        return HTTPException(
            status_code=status.HTTP_207_MULTI_STATUS,
            detail={"error": str(e), "result": e.result.model_dump()},
        )
    if isinstance(e, StoreFailure):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": str(e), "operation": e.operation},
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
