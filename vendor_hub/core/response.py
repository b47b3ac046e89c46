"""Response envelopes: `{ data: ... }` for one item, `{ data: [...], meta: {...} }` for lists."""


import math
from typing import Generic, TypeVar

from vendor_hub.core.pagination import PageMeta, PaginationParams
from vendor_hub.schemas.common import CamelModel

T = TypeVar("T")


class DataResponse(CamelModel, Generic[T]):
    data: T


class ListResponse(CamelModel, Generic[T]):
    data: list[T]
    meta: PageMeta


def paginated(items: list, total: int, pagination: PaginationParams) -> dict:
    """Build a ListResponse payload for one page of results."""
    return {
        "data": items,
        "meta": {
            "total": total,
            "page": pagination.page,
            "limit": pagination.limit,
            "pages": math.ceil(total / pagination.limit) if pagination.limit else 1,
        },
    }


def complete(items: list) -> dict:
    """ListResponse payload for an endpoint that always returns every row."""
    return {
        "data": items,
        "meta": {"total": len(items), "page": 1, "limit": len(items), "pages": 1},
    }
