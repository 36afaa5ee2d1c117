from __future__ import annotations

import pytest

from university_erp.common.pagination import Page, Pagination


@pytest.mark.parametrize(
    "page,limit,expected",
    [
        (None, None, (1, 20)),
        ("3", "50", (3, 50)),
        ("0", "-5", (1, 20)),
        ("abc", "x", (1, 20)),
        ("2", "5000", (2, 200)),
    ],
)
def test_from_query_defaults_and_clamps(page, limit, expected):
    p = Pagination.from_query(page, limit)

    assert (p.page, p.limit) == expected


def test_meta_for_middle_page():
    meta = Pagination(page=2, limit=10).meta(35)

    assert meta == {"page": 2, "limit": 10, "total": 35, "totalPages": 4, "hasNext": True, "hasPrev": True}


def test_meta_for_last_and_empty_pages():
    assert Pagination(page=4, limit=10).meta(35)["hasNext"] is False
    empty = Pagination(page=1, limit=10).meta(0)
    assert empty["totalPages"] == 0
    assert empty["hasNext"] is False
    assert empty["hasPrev"] is False


def test_offset_and_page_meta():
    page = Page(items=["a"], total=21, pagination=Pagination(page=3, limit=10))

    assert page.pagination.offset == 20
    assert page.meta()["totalPages"] == 3
