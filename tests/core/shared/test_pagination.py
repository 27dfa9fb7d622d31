"""
Unit tests for PageRequest / Page.
"""

import pytest

from src.core.shared.exceptions import ValidationError
from src.core.shared.pagination import DEFAULT_LIMIT, MAX_LIMIT, Page, PageRequest


class TestPageRequest:

    def test_defaults(self):
        request = PageRequest.from_params()
        assert request == PageRequest(page=1, limit=DEFAULT_LIMIT)
        assert request.offset == 0

    def test_raw_query_values(self):
        request = PageRequest.from_params("3", "20")
        assert request.page == 3
        assert request.limit == 20
        assert request.offset == 40

    def test_blank_values_fall_back(self):
        assert PageRequest.from_params("", "", default_limit=25) == PageRequest(page=1, limit=25)

    def test_limit_is_bounded(self):
        assert PageRequest.from_params(1, 1000).limit == MAX_LIMIT
        assert PageRequest.from_params(1, 0).limit == 1

    @pytest.mark.parametrize("page,limit,field", [
        ("abc", None, "page"),
        (0, None, "page"),
        (1, "many", "limit"),
    ])
    def test_invalid(self, page, limit, field):
        with pytest.raises(ValidationError) as exc_info:
            PageRequest.from_params(page, limit)
        assert exc_info.value.field == field


class TestPage:

    def test_slice_and_metadata(self):
        page = Page.slice(list(range(23)), PageRequest(page=3, limit=10))

        assert page.items == [20, 21, 22]
        assert page.pagination() == {
            "total": 23,
            "page": 3,
            "limit": 10,
            "total_pages": 3,
            "has_next_page": False,
            "has_prev_page": True,
        }

    def test_empty(self):
        page = Page.slice([], PageRequest())
        assert page.total_pages == 0
        assert not page.has_next_page
        assert not page.has_prev_page

    def test_map_keeps_metadata(self):
        page = Page.slice([1, 2, 3], PageRequest(page=1, limit=2)).map(str)
        assert page.items == ["1", "2"]
        assert page.total == 3
        assert page.has_next_page
