"""Unit tests for the sorted token views."""

from datetime import datetime, timedelta, timezone

import pytest

from monscreener.services.token_views import (
    by_creation_time,
    by_latest_trade,
    by_market_cap,
    paginate,
    validate_paging,
)
from monscreener.utils.errors import ValidationError
from tests.fixtures.common import make_token

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def address(n: int) -> str:
    return f"0x{n:040x}"


def mixed_tokens():
    return [
        make_token(address(1), graduated=True, market_cap=500.0, volume_24h=10.0),
        make_token(address(2), graduated=False, bonding_curve_progress=20.0, market_cap=9_999.0),
        make_token(address(3), graduated=True, market_cap=900.0, volume_24h=5.0),
        make_token(address(4), graduated=False, bonding_curve_progress=80.0),
        make_token(address(5), graduated=True, market_cap=500.0, volume_24h=99.0),
    ]


@pytest.mark.parametrize("page,limit", [(0, 10), (-1, 10), (1, 0), (1, 201)])
def test_validate_paging_rejects(page, limit):
    with pytest.raises(ValidationError):
        validate_paging(page, limit)


def test_validate_paging_accepts_bounds():
    validate_paging(1, 1)
    validate_paging(3, 200)


def test_by_market_cap_partitions_then_sorts():
    page = by_market_cap(mixed_tokens(), page=1, limit=10)

    assert [t.address for t in page.tokens] == [
        address(4), address(2), address(3), address(1), address(5)
    ]
    assert page.total == 5


def test_by_latest_trade_uses_volume():
    page = by_latest_trade(mixed_tokens(), page=1, limit=10)

    assert [t.address for t in page.tokens] == [
        address(4), address(2), address(5), address(1), address(3)
    ]


def test_by_creation_time_uses_whole_set_when_few_are_recent():
    tokens = [
        make_token(address(1), created_at=NOW - timedelta(days=3)),
        make_token(address(2), created_at=NOW - timedelta(hours=1)),
        make_token(address(3), created_at=NOW - timedelta(days=2)),
    ]

    page = by_creation_time(tokens, page=1, limit=10, now=NOW)

    assert [t.address for t in page.tokens] == [address(2), address(3), address(1)]
    assert page.total == 3


def test_by_creation_time_restricts_to_recent_tokens():
    recent = [make_token(address(i), created_at=NOW - timedelta(minutes=i)) for i in range(1, 13)]
    old = [make_token(address(100 + i), created_at=NOW - timedelta(days=2)) for i in range(5)]

    page = by_creation_time(old + recent, page=1, limit=50, now=NOW)

    assert page.total == 12
    assert [t.address for t in page.tokens] == [address(i) for i in range(1, 13)]


def test_ties_break_by_address():
    same_time = NOW - timedelta(hours=1)
    tokens = [make_token(address(n), created_at=same_time) for n in (3, 1, 2)]

    page = by_creation_time(tokens, now=NOW)

    assert [t.address for t in page.tokens] == [address(1), address(2), address(3)]


def test_pages_line_up_across_page_sizes():
    tokens = [
        make_token(address(n), graduated=True, market_cap=float(n % 4))
        for n in range(1, 31)
    ]

    whole = by_market_cap(tokens, page=1, limit=30).tokens
    by_tens = [t for p in (1, 2, 3) for t in by_market_cap(tokens, page=p, limit=10).tokens]
    by_sevens = [t for p in range(1, 6) for t in by_market_cap(tokens, page=p, limit=7).tokens]

    assert [t.address for t in by_tens] == [t.address for t in whole]
    assert [t.address for t in by_sevens] == [t.address for t in whole]


def test_page_past_the_end_is_empty():
    page = paginate([make_token(address(1))], page=3, limit=10)

    assert page.tokens == []
    assert page.total == 1
    assert page.page == 3


def test_by_creation_time_accepts_naive_now():
    recent = [make_token(address(i), created_at=NOW - timedelta(minutes=i)) for i in range(1, 13)]
    old = [make_token(address(100 + i), created_at=NOW - timedelta(days=2)) for i in range(5)]

    page = by_creation_time(old + recent, page=1, limit=50, now=datetime(2024, 6, 1, 12, 0))

    assert page.total == 12
    assert page.tokens[0].address == address(1)
