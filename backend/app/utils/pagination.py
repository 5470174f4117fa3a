"""
Pagination Utility Module

Provides standardized pagination helpers for list endpoints backed by Motor
collections.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorCollection
from pydantic import BaseModel
from pymongo import DESCENDING

MAX_PAGE_SIZE = 100


class PaginationParams(BaseModel):
    """Standard pagination parameters, clamped to sane bounds"""
    page: int = 1
    limit: int = 10

    @classmethod
    def clamp(cls, page: int = 1, limit: int = 10) -> "PaginationParams":
        return cls(page=max(1, page), limit=max(1, min(MAX_PAGE_SIZE, limit)))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


async def paginate(
    collection: AsyncIOMotorCollection,
    query: Dict[str, Any],
    params: PaginationParams,
    sort: Optional[List[Tuple[str, int]]] = None,
    serializer: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    Apply pagination to a collection query.

    Args:
        collection: Motor collection
        query: MongoDB filter document
        params: Page and page size
        sort: Sort specification (default: newest first)
        serializer: Optional per-document transform

    Returns:
        Dictionary with data and pagination {total, page, limit, total_pages}
    """
    sort = sort or [("created_at", DESCENDING)]

    cursor = collection.find(query).sort(sort).skip(params.offset).limit(params.limit)
    docs = await cursor.to_list(length=params.limit)
    total = await collection.count_documents(query)

    items = [serializer(doc) for doc in docs] if serializer else docs

    return create_paginated_response(items, total, params.page, params.limit)


def create_paginated_response(
    items: List[Any],
    total: int,
    page: int,
    limit: int
) -> dict:
    """
    Create a paginated response dictionary.

    Args:
        items: List of items for current page
        total: Total count of all items
        page: Current page number
        limit: Items per page

    Returns:
        Paginated response dictionary
    """
    total_pages = (total + limit - 1) // limit if total > 0 else 1

    return {
        "data": items,
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": total_pages,
        },
    }
