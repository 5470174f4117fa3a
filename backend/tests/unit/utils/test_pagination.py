"""
Unit Tests for pagination helpers
"""
from datetime import datetime, timedelta

from app.utils.pagination import PaginationParams, create_paginated_response, paginate


class TestPaginationParams:
    def test_defaults(self):
        params = PaginationParams()

        assert (params.page, params.limit, params.offset) == (1, 10, 0)

    def test_clamp_bounds(self):
        assert PaginationParams.clamp(0, 0).model_dump() == {"page": 1, "limit": 1}
        assert PaginationParams.clamp(3, 500).model_dump() == {"page": 3, "limit": 100}

    def test_offset(self):
        assert PaginationParams(page=3, limit=20).offset == 40


def test_create_paginated_response():
    result = create_paginated_response(["a", "b"], total=12, page=2, limit=5)

    assert result["data"] == ["a", "b"]
    assert result["pagination"] == {"total": 12, "page": 2, "limit": 5, "total_pages": 3}


def test_empty_response_has_one_page():
    assert create_paginated_response([], 0, 1, 10)["pagination"]["total_pages"] == 1


async def test_paginate_newest_first(db):
    base = datetime(2024, 1, 1)
    for n in range(7):
        await db["items"].insert_one({"n": n, "created_at": base + timedelta(minutes=n)})

    result = await paginate(db["items"], {}, PaginationParams(page=2, limit=3))

    assert [doc["n"] for doc in result["data"]] == [3, 2, 1]
    assert result["pagination"]["total"] == 7


async def test_paginate_applies_serializer_and_filter(db):
    for n in range(4):
        await db["items"].insert_one({"n": n, "even": n % 2 == 0, "created_at": datetime(2024, 1, 1 + n)})

    result = await paginate(
        db["items"],
        {"even": True},
        PaginationParams(),
        serializer=lambda doc: doc["n"],
    )

    assert result["data"] == [2, 0]
    assert result["pagination"]["total"] == 2
