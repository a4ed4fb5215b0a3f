"""Unit tests for summaries and cached group totals"""

from decimal import Decimal

import pytest

from splitledger.core.exceptions import NotFoundError, ValidationError
from splitledger.repositories.group_repository import InMemoryGroupRepository
from splitledger.schemas.group import GroupSnapshot
from splitledger.services.summary_service import SummaryService


class TestGroupTotal:
    """Test running group totals and drift detection"""

    def test_compute_group_total(self, group):
        """Test total derived from expense history"""
        assert SummaryService.compute_group_total(group) == Decimal("90.00")

    def test_reconcile_without_cache(self, group):
        """Test that no cached value means no drift"""
        total = SummaryService.reconcile_group_total(group, None)

        assert total.amount == Decimal("90.00")
        assert total.drift_detected is False

    def test_reconcile_detects_drift(self, group):
        """Test that a diverging cached value is reported, not trusted"""
        total = SummaryService.reconcile_group_total(group, Decimal("120.00"))

        assert total.amount == Decimal("90.00")
        assert total.cached_amount == Decimal("120.00")
        assert total.drift_detected is True

    @pytest.mark.asyncio
    async def test_get_group_total_rewrites_drifted_cache(self, group, mock_cache):
        """Test that a drifted cache entry is overwritten"""
        mock_cache.get.return_value = "120.00"

        total = await SummaryService.get_group_total(group)

        assert total.drift_detected is True
        assert total.amount == Decimal("90.00")
        mock_cache.get.assert_awaited_once_with("group_total:g1")
        mock_cache.set.assert_awaited_once_with("group_total:g1", "90.00")

    @pytest.mark.asyncio
    async def test_get_group_total_matching_cache(self, group, mock_cache):
        """Test that a matching cache entry is left alone"""
        mock_cache.get.return_value = "90.00"

        total = await SummaryService.get_group_total(group)

        assert total.drift_detected is False
        mock_cache.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_group_total_unreadable_cache(self, group, mock_cache):
        """Test that garbage in the cache is discarded and replaced"""
        mock_cache.get.return_value = "not-a-number"

        total = await SummaryService.get_group_total(group)

        assert total.cached_amount is None
        mock_cache.set.assert_awaited_once_with("group_total:g1", "90.00")

    @pytest.mark.asyncio
    async def test_get_group_total_without_cache(self, group, mock_cache):
        """Test that use_cache=False never touches Redis"""
        total = await SummaryService.get_group_total(group, use_cache=False)

        assert total.amount == Decimal("90.00")
        mock_cache.get.assert_not_awaited()
        mock_cache.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cache_disabled_in_settings(self, group, mock_cache, monkeypatch):
        """Test that CACHE_ENABLED=false bypasses Redis"""
        monkeypatch.setenv("CACHE_ENABLED", "false")

        await SummaryService.get_group_total(group)

        mock_cache.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_advance_group_total_in_step(self, group, mock_cache):
        """Test that cached total plus the write equals history"""
        total = await SummaryService.advance_group_total(
            group, Decimal("60.00"), Decimal("30.00")
        )

        assert total.amount == Decimal("90.00")
        assert total.cached_amount == Decimal("90.00")
        assert total.drift_detected is False
        mock_cache.set.assert_awaited_once_with("group_total:g1", "90.00")

    @pytest.mark.asyncio
    async def test_advance_group_total_out_of_step(self, group, mock_cache):
        """Test that a running total that misses a write is reported"""
        total = await SummaryService.advance_group_total(
            group, Decimal("10.00"), Decimal("30.00")
        )

        assert total.drift_detected is True
        assert total.cached_amount == Decimal("40.00")
        mock_cache.set.assert_awaited_once_with("group_total:g1", "90.00")

    @pytest.mark.asyncio
    async def test_advance_group_total_without_cached_value(self, group, mock_cache):
        """Test that a cold cache is seeded from history"""
        total = await SummaryService.advance_group_total(group, None, Decimal("90.00"))

        assert total.drift_detected is False
        mock_cache.set.assert_awaited_once_with("group_total:g1", "90.00")


class TestGroupSummary:
    """Test group summary"""

    @pytest.mark.asyncio
    async def test_get_group_summary(self, repository):
        """Test counts, suggestion count and the member's net"""
        summary = await SummaryService.get_group_summary("g1", "B", repository)

        assert summary.group_name == "Trip"
        assert summary.members_count == 3
        assert summary.total_expenses == 1
        assert summary.total_settlements == 0
        assert summary.suggestion_count == 2
        assert summary.your_net == Decimal("-30.00")

    @pytest.mark.asyncio
    async def test_non_member(self, repository):
        """Test that a non-member cannot get a summary"""
        with pytest.raises(ValidationError):
            await SummaryService.get_group_summary("g1", "Q", repository)

    @pytest.mark.asyncio
    async def test_missing_group(self, repository):
        """Test that an unknown group raises NotFoundError"""
        with pytest.raises(NotFoundError):
            await SummaryService.get_group_summary("nope", "A", repository)


class TestDashboardSummary:
    """Test dashboard summary across groups"""

    @pytest.fixture
    def dashboard_repository(self, group, make_expense, make_settlement):
        """A is owed 60 in g1 and owes 10 in g2; B is in g2 only"""
        trip = group.with_settlement(make_settlement("B", "A", "10", minutes=1))
        flat = GroupSnapshot(
            id="g2",
            members=("A", "D"),
            expenses=(
                make_expense(
                    "D", "20", "equal", [{"member": "A"}, {"member": "D"}],
                    group_id="g2",
                ),
            ),
        )
        for minutes in range(2, 8):
            flat = flat.with_settlement(
                make_settlement("A", "D", "1", minutes=minutes, group_id="g2")
            )
        return InMemoryGroupRepository([trip, flat])

    @pytest.mark.asyncio
    async def test_dashboard_totals(self, dashboard_repository):
        """Test totals across every group of the member"""
        summary = await SummaryService.get_dashboard_summary("A", dashboard_repository)

        assert summary.total_groups == 2
        assert summary.total_expenses == 2
        assert summary.total_settlements == 7
        # g1: A +60 - 10 = +50; g2: A -10 + 6 = -4
        assert summary.you_get_back_total == Decimal("50.00")
        assert summary.you_owe_total == Decimal("4.00")

    @pytest.mark.asyncio
    async def test_recent_settlements(self, dashboard_repository):
        """Test that the five newest settlements are listed first"""
        summary = await SummaryService.get_dashboard_summary("A", dashboard_repository)

        recent = summary.recent_settlements
        assert len(recent) == 5
        assert [s.settled_at for s in recent] == sorted(
            (s.settled_at for s in recent), reverse=True
        )
        assert recent[0].group_id == "g2"
        assert recent[0].group_name == "Group"

    @pytest.mark.asyncio
    async def test_member_without_groups(self):
        """Test the empty dashboard"""
        summary = await SummaryService.get_dashboard_summary(
            "nobody", InMemoryGroupRepository()
        )

        assert summary.total_groups == 0
        assert summary.you_owe_total == Decimal("0")
        assert summary.recent_settlements == []
