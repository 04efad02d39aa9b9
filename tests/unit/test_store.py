"""
Unit tests for the in-memory opportunity store and sample data.
"""

from datetime import UTC, datetime

import pytest

from chainarb.core.errors import UpstreamUnavailableError
from chainarb.core.types import ConditionsUpdate, Opportunity, OpportunityUpdate
from chainarb.market.store import InMemoryOpportunityStore


NOW = datetime(2024, 1, 1, tzinfo=UTC)


class TestSeedOpportunities:
    """Tests for the sample opportunity set."""

    def test_profit_fields_derived(self, opportunities: list[Opportunity]) -> None:
        """Test seeded profit fields agree with seeded prices."""
        for opp in opportunities:
            expected = (opp.target_price - opp.source_price) / opp.source_price * 100
            assert opp.profit_percentage == pytest.approx(expected)

    def test_ids_and_executable(self, opportunities: list[Opportunity]) -> None:
        """Test ids are sequential and one sample is not executable."""
        assert [o.id for o in opportunities] == ["opp-1", "opp-2", "opp-3", "opp-4", "opp-5"]
        assert [o.id for o in opportunities if not o.executable] == ["opp-4"]


class TestInMemoryOpportunityStore:
    """Tests for InMemoryOpportunityStore."""

    @pytest.mark.asyncio
    async def test_list_executable_returns_copies(self, store: InMemoryOpportunityStore) -> None:
        """Test mutating a listed record does not touch the store."""
        listed = await store.list_executable()
        listed[0].source_price = -1.0

        assert len(listed) == 4
        assert store.get(listed[0].id).source_price > 0
        assert store.size == 5

    @pytest.mark.asyncio
    async def test_apply_update(self, store: InMemoryOpportunityStore) -> None:
        """Test price writes persist and are counted."""
        await store.apply_update(OpportunityUpdate("opp-1", 2700.0, 2710.0, 5.0, 0.37, NOW))

        opp = store.get("opp-1")
        assert (opp.source_price, opp.target_price, opp.last_updated) == (2700.0, 2710.0, NOW)
        assert store.price_writes == 1

    @pytest.mark.asyncio
    async def test_apply_conditions(self, store: InMemoryOpportunityStore) -> None:
        """Test condition writes persist and are counted separately."""
        await store.apply_conditions(ConditionsUpdate("opp-2", 90_000.0, 1.6, 75, True, NOW))

        opp = store.get("opp-2")
        assert (opp.liquidity, opp.time_window, opp.trending) == (90_000.0, 75, True)
        assert store.condition_writes == 1
        assert store.price_writes == 0

    @pytest.mark.asyncio
    async def test_unknown_id(self, store: InMemoryOpportunityStore) -> None:
        """Test writes to unknown ids fail."""
        with pytest.raises(KeyError):
            await store.apply_update(OpportunityUpdate("opp-99", 1.0, 1.0, 0.0, 0.0, NOW))

    @pytest.mark.asyncio
    async def test_unavailable(self, store: InMemoryOpportunityStore) -> None:
        """Test an unavailable store rejects reads."""
        store.set_available(False)

        with pytest.raises(UpstreamUnavailableError):
            await store.list_executable()
