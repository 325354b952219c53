import pytest
from decimal import Decimal

from bookstore.utils.money import round_half_up
from bookstore.utils.pagination import PageRequest, clamp_pagination, page_links, total_pages


class TestPagination:
    def test_offset(self):
        assert PageRequest(page=1, limit=12).offset == 0
        assert PageRequest(page=3, limit=5).offset == 10

    @pytest.mark.parametrize(
        "page, limit, expected",
        [
            (None, None, PageRequest(page=1, limit=12)),
            (0, 0, PageRequest(page=1, limit=12)),
            (-4, -1, PageRequest(page=1, limit=1)),
            (2, 5, PageRequest(page=2, limit=5)),
            (1, 1000, PageRequest(page=1, limit=100)),
        ],
    )
    def test_clamp_pagination(self, page, limit, expected):
        assert clamp_pagination(page, limit, default_limit=12) == expected

    def test_total_pages(self):
        assert total_pages(12, 5) == 3
        assert total_pages(10, 5) == 2
        assert total_pages(0, 5) == 0

    def test_page_links(self):
        assert page_links(1, 3) == (None, 2)
        assert page_links(2, 3) == (1, 3)
        assert page_links(3, 3) == (2, None)
        assert page_links(1, 1) == (None, None)


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("16.90"), 17),
            (Decimal("12.5"), 13),
            (Decimal("12.49"), 12),
            (2.5, 3),
            (0, 0),
        ],
    )
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected
