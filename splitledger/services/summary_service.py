"""Group and dashboard summaries"""

import logging
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from splitledger.config import get_settings
from splitledger.core.exceptions import ValidationError
from splitledger.repositories.group_repository import GroupRepository
from splitledger.schemas.group import GroupSnapshot
from splitledger.schemas.summary import (DashboardSummary, GroupSummary,
                                         GroupTotal, RecentSettlement)
from splitledger.services.balance_service import BalanceService
from splitledger.services.cache_service import CacheService
from splitledger.services.settlement_service import SettlementService
from splitledger.utils.decimal_utils import ZERO, round_decimal, sum_decimals

logger = logging.getLogger(__name__)


class SummaryService:
    """Service for summary views over group histories"""

    @staticmethod
    def _group_total_key(group_id: str) -> str:
        return f"group_total:{group_id}"

    @staticmethod
    def compute_group_total(group: GroupSnapshot) -> Decimal:
        """Sum of all expense totals of a group"""
        return round_decimal(sum_decimals(e.total_amount for e in group.expenses))

    @staticmethod
    def reconcile_group_total(
        group: GroupSnapshot, cached_amount: Optional[Decimal]
    ) -> GroupTotal:
        """
        Compare a cached running total with the total derived from history.

        The derived amount is always the one returned; the cached value is
        only reported.

        Args:
            group: Group snapshot
            cached_amount: Previously cached total, None if absent

        Returns:
            GroupTotal with drift_detected set when the two disagree
        """
        amount = SummaryService.compute_group_total(group)
        drift = cached_amount is not None and cached_amount != amount

        if drift:
            logger.warning(
                "Cached total for group %s drifted: cached %s, actual %s",
                group.id, cached_amount, amount,
            )

        return GroupTotal(
            group_id=group.id,
            amount=amount,
            cached_amount=cached_amount,
            drift_detected=drift,
        )

    @staticmethod
    async def get_cached_group_total(group_id: str) -> Optional[Decimal]:
        """
        Read the cached display total of a group.

        Args:
            group_id: Group ID

        Returns:
            Cached total, None if absent, unreadable or caching is disabled
        """
        if not get_settings().cache_enabled:
            return None

        cached_data = await CacheService.get(SummaryService._group_total_key(group_id))
        if cached_data is None:
            return None

        try:
            return Decimal(cached_data)
        except InvalidOperation:
            logger.warning(
                "Discarding unreadable cached total for group %s: %r",
                group_id, cached_data,
            )
            return None

    @staticmethod
    async def _store_group_total(
        total: GroupTotal, previous: Optional[Decimal]
    ) -> None:
        if get_settings().cache_enabled and previous != total.amount:
            await CacheService.set(
                SummaryService._group_total_key(total.group_id), str(total.amount)
            )

    @staticmethod
    async def get_group_total(group: GroupSnapshot, use_cache: bool = True) -> GroupTotal:
        """
        Get the running total of a group and refresh its display cache.

        Args:
            group: Group snapshot
            use_cache: Whether to compare against and refresh the cache

        Returns:
            GroupTotal
        """
        if not use_cache:
            return SummaryService.reconcile_group_total(group, None)

        cached_amount = await SummaryService.get_cached_group_total(group.id)
        total = SummaryService.reconcile_group_total(group, cached_amount)
        await SummaryService._store_group_total(total, cached_amount)
        return total

    @staticmethod
    async def advance_group_total(
        group: GroupSnapshot, cached_amount: Optional[Decimal], delta: Decimal
    ) -> GroupTotal:
        """
        Move the running total forward by one expense write.

        The cached value read before the write plus the change the write made
        must equal the total derived from the updated history. Anything else
        is reported as drift and the cache is overwritten.

        Args:
            group: Group snapshot after the write
            cached_amount: Cached total read before the write, None if absent
            delta: Change in the group total caused by the write

        Returns:
            GroupTotal
        """
        running = None if cached_amount is None else cached_amount + delta
        total = SummaryService.reconcile_group_total(group, running)
        await SummaryService._store_group_total(total, cached_amount)
        return total

    @staticmethod
    async def get_group_summary(
        group_id: str, member: str, repository: GroupRepository
    ) -> GroupSummary:
        """
        Get a group overview for one member.

        Args:
            group_id: Group ID
            member: Member asking for the summary
            repository: Snapshot collaborator

        Returns:
            GroupSummary

        Raises:
            NotFoundError: If group not found
            ValidationError: If member is not in the group
        """
        group = await BalanceService.get_group_snapshot(group_id, repository)

        if not group.has_member(member):
            raise ValidationError(f"{member} is not a member of group {group_id}")

        balances = BalanceService.compute_group_balances(group)
        plan = SettlementService.plan(balances)

        return GroupSummary(
            group_id=group.id,
            group_name=group.name,
            members_count=len(group.members),
            total_expenses=len(group.expenses),
            total_settlements=len(group.settlements),
            suggestion_count=len(plan),
            your_net=balances[member].net,
        )

    @staticmethod
    async def get_dashboard_summary(
        member: str, repository: GroupRepository
    ) -> DashboardSummary:
        """
        Get totals across every group a member belongs to.

        Args:
            member: Member ID
            repository: Snapshot collaborator

        Returns:
            DashboardSummary
        """
        groups = await repository.list_member_groups(member)

        you_owe_total = ZERO
        you_get_back_total = ZERO
        recent: List[RecentSettlement] = []

        for group in groups:
            balances = BalanceService.compute_group_balances(group)
            net = balances[member].net

            if net > 0:
                you_get_back_total += net
            elif net < 0:
                you_owe_total += abs(net)

            recent.extend(
                RecentSettlement(
                    settlement_id=s.id,
                    group_id=group.id,
                    group_name=group.name or "Group",
                    from_member=s.from_member,
                    to_member=s.to_member,
                    amount=s.amount,
                    settled_at=s.settled_at,
                )
                for s in group.settlements
            )

        recent.sort(key=lambda s: s.settled_at, reverse=True)

        return DashboardSummary(
            total_groups=len(groups),
            total_expenses=sum(len(g.expenses) for g in groups),
            total_settlements=sum(len(g.settlements) for g in groups),
            you_owe_total=round_decimal(you_owe_total),
            you_get_back_total=round_decimal(you_get_back_total),
            recent_settlements=recent[:get_settings().recent_settlements_limit],
        )
