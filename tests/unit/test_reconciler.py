"""Unit tests for multi-source token reconciliation."""

from unittest.mock import AsyncMock

import pytest

from monscreener.services.bonding_curve import BondingCurveDiscoverer
from monscreener.services.dex_source import DexTokenSource
from monscreener.services.reconciler import (
    SOURCE_BONDING_CURVE,
    SOURCE_TOKEN_BOOSTS,
    TokenReconciler,
    merge_source,
    merge_token,
)
from monscreener.utils.errors import ExternalServiceError, RpcConnectionError
from tests.fixtures.common import CREATOR, TOKEN_A, TOKEN_B, make_token


@pytest.fixture
def mock_discoverer():
    discoverer = AsyncMock(spec=BondingCurveDiscoverer)
    discoverer.discover.return_value = []
    return discoverer


@pytest.fixture
def mock_dex_source():
    source = AsyncMock(spec=DexTokenSource)
    source.fetch_search.return_value = []
    source.fetch_boosts.return_value = []
    return source


class TestMergeToken:
    def test_refreshes_market_fields(self):
        existing = make_token(TOKEN_A, price=1.0, market_cap=100.0, volume_24h=5.0)
        incoming = make_token(TOKEN_A, price=2.0, market_cap=0.0, volume_24h=50.0)

        merged = merge_token(existing, incoming)

        assert merged.price == 2.0
        assert merged.market_cap == 100.0
        assert merged.volume_24h == 50.0

    def test_never_overwrites_with_empty_values(self):
        existing = make_token(TOKEN_A, name="Alpha", image="https://img/a.png", twitter="https://x.com/a")
        incoming = make_token(TOKEN_A, name="", image=None, twitter=None)

        merged = merge_token(existing, incoming)

        assert merged.name == "Alpha"
        assert merged.image == "https://img/a.png"
        assert merged.twitter == "https://x.com/a"

    def test_fills_missing_descriptive_fields_only(self):
        existing = make_token(TOKEN_A, name="Alpha", creator=CREATOR, website=None)
        incoming = make_token(TOKEN_A, name="Other name", creator="0x" + "9" * 40, website="https://alpha.example")

        merged = merge_token(existing, incoming)

        assert merged.name == "Alpha"
        assert merged.creator == CREATOR
        assert merged.website == "https://alpha.example"

    def test_keeps_graduation_and_progress(self):
        existing = make_token(TOKEN_A, graduated=False, bonding_curve_progress=40.0)
        incoming = make_token(TOKEN_A, graduated=True, bonding_curve_progress=100.0, price=3.0)

        merged = merge_token(existing, incoming)

        assert merged.graduated is False
        assert merged.bonding_curve_progress == 40.0
        assert merged.price == 3.0

    def test_does_not_mutate_inputs(self):
        existing = make_token(TOKEN_A, price=1.0)
        merge_token(existing, make_token(TOKEN_A, price=9.0))

        assert existing.price == 1.0


class TestMergeSource:
    def test_keys_are_lower_case(self):
        tokens = {}
        merge_source(tokens, [make_token(TOKEN_A.upper().replace("0X", "0x"))])

        assert list(tokens) == [TOKEN_A]

    def test_new_tokens_from_dex_are_graduated(self):
        tokens = {}
        inserted = merge_source(tokens, [make_token(TOKEN_A, graduated=False)], mark_graduated=True)

        assert inserted == 1
        assert tokens[TOKEN_A].graduated is True

    def test_curve_tokens_keep_their_state(self):
        tokens = {}
        merge_source(tokens, [make_token(TOKEN_A, graduated=False)], mark_graduated=False)

        assert tokens[TOKEN_A].graduated is False

    def test_existing_tokens_are_merged_not_inserted(self):
        tokens = {TOKEN_A: make_token(TOKEN_A, price=1.0)}

        inserted = merge_source(tokens, [make_token(TOKEN_A, price=2.0), make_token(TOKEN_B)])

        assert inserted == 1
        assert tokens[TOKEN_A].price == 2.0
        assert set(tokens) == {TOKEN_A, TOKEN_B}


@pytest.mark.asyncio
async def test_dex_data_enriches_curve_token(mock_discoverer, mock_dex_source):
    mock_discoverer.discover.return_value = [
        make_token(TOKEN_A, graduated=False, bonding_curve_progress=40.0)
    ]
    mock_dex_source.fetch_search.return_value = [
        make_token(TOKEN_A.upper().replace("0X", "0x"), price=2.5, market_cap=1000.0, graduated=True)
    ]
    reconciler = TokenReconciler(mock_discoverer, mock_dex_source)

    result = await reconciler.reconcile()

    assert list(result.tokens) == [TOKEN_A]
    token = result.tokens[TOKEN_A]
    assert token.graduated is False
    assert token.bonding_curve_progress == 40.0
    assert token.price == 2.5
    assert token.market_cap == 1000.0
    assert result.complete


@pytest.mark.asyncio
async def test_sources_merge_in_precedence_order(mock_discoverer, mock_dex_source):
    mock_dex_source.fetch_search.return_value = [make_token(TOKEN_B, name="From search", price=1.0)]
    mock_dex_source.fetch_boosts.return_value = [make_token(TOKEN_B, name="From boosts", price=4.0)]
    reconciler = TokenReconciler(mock_discoverer, mock_dex_source)

    result = await reconciler.reconcile()

    token = result.tokens[TOKEN_B]
    assert token.name == "From search"
    assert token.price == 4.0
    assert token.graduated is True


@pytest.mark.asyncio
async def test_failed_source_is_isolated(mock_discoverer, mock_dex_source):
    mock_discoverer.discover.side_effect = RpcConnectionError("unreachable", method="eth_blockNumber")
    mock_dex_source.fetch_search.return_value = [make_token(TOKEN_A)]
    mock_dex_source.fetch_boosts.side_effect = ExternalServiceError("down", service_name="dexscreener")
    reconciler = TokenReconciler(mock_discoverer, mock_dex_source)

    result = await reconciler.reconcile()

    assert list(result.tokens) == [TOKEN_A]
    assert set(result.errors) == {SOURCE_BONDING_CURVE, SOURCE_TOKEN_BOOSTS}
    assert "unreachable" in result.errors[SOURCE_BONDING_CURVE]
    assert not result.complete


@pytest.mark.asyncio
async def test_every_source_failing_yields_empty_result(mock_discoverer, mock_dex_source):
    mock_discoverer.discover.side_effect = RpcConnectionError("unreachable")
    mock_dex_source.fetch_search.side_effect = ExternalServiceError("down", service_name="dexscreener")
    mock_dex_source.fetch_boosts.side_effect = ExternalServiceError("down", service_name="dexscreener")
    reconciler = TokenReconciler(mock_discoverer, mock_dex_source)

    result = await reconciler.reconcile()

    assert result.tokens == {}
    assert len(result.errors) == 3
