"""Unit tests for the DEXScreener token source."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from monscreener.clients.dexscreener_client import DexScreenerClient
from monscreener.services.dex_source import DexTokenSource, pair_to_token, unique_by_base_token
from monscreener.utils.errors import ExternalServiceError
from tests.fixtures.common import TOKEN_A, TOKEN_B, dex_pair


@pytest.fixture
def mock_dex_client():
    client = AsyncMock(spec=DexScreenerClient)
    client.search_pairs.return_value = []
    client.get_top_boosted_tokens.return_value = []
    client.get_tokens_by_addresses.return_value = []
    return client


class TestPairToToken:
    def test_maps_market_and_social_fields(self):
        token = pair_to_token(dex_pair(TOKEN_A.upper().replace("0X", "0x"), name="Alpha", symbol="ALP"))

        assert token.address == TOKEN_A
        assert token.name == "Alpha"
        assert token.price == 1.5
        assert token.market_cap == 1500.0
        assert token.volume_24h == 100.0
        assert token.price_change_24h == 12.5
        assert token.image == "https://cdn.example/dex.png"
        assert token.twitter == "https://x.com/dex"
        assert token.telegram == "https://t.me/dex"
        assert token.website == "https://dex.example"
        assert token.created_at == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)

    def test_market_cap_falls_back_to_fdv(self):
        assert pair_to_token(dex_pair(TOKEN_A, market_cap=None)).market_cap == 2000.0

    def test_graduation_from_dex(self):
        token = pair_to_token(dex_pair(TOKEN_A, dex_id="uniswap", liquidity=500.0))

        assert token.graduated is True
        assert token.bonding_curve_progress == 5.0

    def test_launchpad_pair_graduates_on_liquidity(self):
        shallow = pair_to_token(dex_pair(TOKEN_A, dex_id="nad-fun", liquidity=5_000.0))
        deep = pair_to_token(dex_pair(TOKEN_A, dex_id="nad-fun", liquidity=20_000.0))

        assert shallow.graduated is False
        assert shallow.bonding_curve_progress == 100.0
        assert deep.graduated is True

    def test_missing_base_token_raises(self):
        pair = dex_pair(TOKEN_A)
        del pair["baseToken"]

        with pytest.raises(KeyError):
            pair_to_token(pair)


def test_unique_by_base_token_keeps_first():
    pairs = [
        dex_pair(TOKEN_A, pair_address="first"),
        dex_pair(TOKEN_A.upper().replace("0X", "0x"), pair_address="second"),
        dex_pair(TOKEN_B, pair_address="third"),
        {"pairAddress": "no-base"},
    ]

    assert [p["pairAddress"] for p in unique_by_base_token(pairs)] == ["first", "third"]


@pytest.mark.asyncio
async def test_fetch_search_merges_queries(mock_dex_client):
    mock_dex_client.search_pairs.side_effect = [
        [dex_pair(TOKEN_A, name="Alpha")],
        [dex_pair(TOKEN_A, name="Alpha again"), dex_pair(TOKEN_B, name="Beta")],
    ]
    source = DexTokenSource(mock_dex_client, search_queries=["monad", "nad.fun"])

    tokens = await source.fetch_search()

    assert [t.name for t in tokens] == ["Alpha", "Beta"]


@pytest.mark.asyncio
async def test_fetch_search_tolerates_partial_failure(mock_dex_client):
    mock_dex_client.search_pairs.side_effect = [
        ExternalServiceError("rate limited", service_name="dexscreener", http_status=429),
        [dex_pair(TOKEN_B)],
    ]
    source = DexTokenSource(mock_dex_client, search_queries=["monad", "nad.fun"])

    tokens = await source.fetch_search()

    assert [t.address for t in tokens] == [TOKEN_B]


@pytest.mark.asyncio
async def test_fetch_search_raises_when_every_query_fails(mock_dex_client):
    mock_dex_client.search_pairs.side_effect = ExternalServiceError("down", service_name="dexscreener")
    source = DexTokenSource(mock_dex_client, search_queries=["monad", "nad.fun"])

    with pytest.raises(ExternalServiceError):
        await source.fetch_search()


@pytest.mark.asyncio
async def test_fetch_search_skips_malformed_pairs(mock_dex_client):
    broken = dex_pair(TOKEN_A)
    broken["baseToken"] = {"address": TOKEN_A, "name": "Broken"}
    broken["liquidity"] = {"usd": "not a number"}
    broken["pairCreatedAt"] = "yesterday"
    mock_dex_client.search_pairs.return_value = [broken, dex_pair(TOKEN_B)]
    source = DexTokenSource(mock_dex_client, search_queries=["monad"])

    tokens = await source.fetch_search()

    assert [t.address for t in tokens] == [TOKEN_B]


@pytest.mark.asyncio
async def test_fetch_boosts_dedupes_and_caps_addresses(mock_dex_client):
    mock_dex_client.get_top_boosted_tokens.return_value = [
        {"chainId": "monad", "tokenAddress": TOKEN_A},
        {"chainId": "monad", "tokenAddress": TOKEN_A.upper().replace("0X", "0x")},
        {"chainId": "monad", "tokenAddress": TOKEN_B},
        {"chainId": "monad", "tokenAddress": "0x" + "d" * 40},
    ]
    mock_dex_client.get_tokens_by_addresses.return_value = [dex_pair(TOKEN_A), dex_pair(TOKEN_B)]
    source = DexTokenSource(mock_dex_client, max_boosted=2)

    tokens = await source.fetch_boosts()

    mock_dex_client.get_tokens_by_addresses.assert_awaited_once_with([TOKEN_A, TOKEN_B])
    assert [t.address for t in tokens] == [TOKEN_A, TOKEN_B]


@pytest.mark.asyncio
async def test_fetch_boosts_without_boosted_tokens(mock_dex_client):
    source = DexTokenSource(mock_dex_client)

    assert await source.fetch_boosts() == []
    mock_dex_client.get_tokens_by_addresses.assert_not_awaited()
