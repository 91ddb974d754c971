import pytest

from donation_api.core.errors import ApiError
from donation_api.services.pagination import MAX_PAGE, parse_pagination


@pytest.mark.parametrize(
    "page, limit, expected",
    [
        (None, None, (1, 10)),
        ("2", "20", (2, 20)),
        ("0", "0", (1, 10)),
        ("abc", "xyz", (1, 10)),
        ("3abc", "5.9", (3, 5)),
        ("1", "500", (1, 100)),
        ("1", "-5", (1, 1)),
        ("0003", "0000000000000000000000010", (3, 10)),
        ("1", "9" * 5000, (1, 100)),
    ],
)
def test_parse_pagination(page, limit, expected):
    pagination = parse_pagination(page, limit)
    assert (pagination.page, pagination.limit) == expected


def test_negative_page_is_rejected():
    with pytest.raises(ApiError) as exc_info:
        parse_pagination("-1", None)
    assert exc_info.value.code == "VALIDATION_ERROR"


@pytest.mark.parametrize("page", ["1000000000000000000", "9" * 5000])
def test_page_beyond_offset_range_is_rejected(page):
    with pytest.raises(ApiError) as exc_info:
        parse_pagination(page, "100")
    assert exc_info.value.code == "VALIDATION_ERROR"

    assert parse_pagination(str(MAX_PAGE), "100").page == MAX_PAGE


def test_meta_for_middle_page():
    pagination = parse_pagination("2", "10")
    assert pagination.offset == 10
    assert pagination.meta(25) == {
        "page": 2,
        "limit": 10,
        "total_count": 25,
        "total_pages": 3,
        "has_next": True,
        "has_prev": True,
    }


def test_meta_for_last_and_empty_pages():
    last = parse_pagination("3", "10").meta(25)
    assert last["has_next"] is False
    assert last["has_prev"] is True

    empty = parse_pagination(None, None).meta(0)
    assert empty["total_pages"] == 0
    assert empty["has_next"] is False
    assert empty["has_prev"] is False
