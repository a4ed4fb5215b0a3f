"""Balance calculation logic"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, Mapping

from splitledger.core.exceptions import ConsistencyError, NotFoundError
from splitledger.repositories.group_repository import GroupRepository
from splitledger.schemas.balance import GroupBalancesResponse, NetBalance
from splitledger.schemas.expense import ExpenseRecord
from splitledger.schemas.group import GroupSnapshot
from splitledger.schemas.settlement import SettlementRecord
from splitledger.utils.decimal_utils import ZERO, round_decimal

logger = logging.getLogger(__name__)


class BalanceService:
    """Service for balance calculation operations"""

    @staticmethod
    def compute_net_balances(
        members: Iterable[str],
        expenses: Iterable[ExpenseRecord],
        settlements: Iterable[SettlementRecord],
    ) -> Dict[str, NetBalance]:
        """
        Compute every member's net balance from the full ledger history.

        The payer of an expense is credited with the total and every split
        member is debited with their owed amount. A settlement credits the
        payer (debt reduced) and debits the receiver (credit reduced).
        Values are summed exactly and rounded only once at the end, so any
        ordering of the same records gives the same result.

        Args:
            members: Declared group members
            expenses: All expenses of the group
            settlements: All settlements of the group

        Returns:
            Dictionary mapping member to NetBalance, in members order

        Raises:
            ConsistencyError: If a record references a non-member
        """
        running: Dict[str, Decimal] = {member: ZERO for member in members}
        unknown: set = set()

        def apply(member: str, delta: Decimal) -> None:
            if member not in running:
                unknown.add(member)
                return
            running[member] += delta

        for expense in expenses:
            apply(expense.payer, expense.total_amount)
            for entry in expense.split_entries:
                apply(entry.member, -entry.owed_amount)

        for settlement in settlements:
            apply(settlement.from_member, settlement.amount)
            apply(settlement.to_member, -settlement.amount)

        if unknown:
            raise ConsistencyError(
                "Ledger references members that are not in the group",
                details={"unknown_members": sorted(unknown)},
            )

        return {
            member: NetBalance.from_net(member, round_decimal(net))
            for member, net in running.items()
        }

    @staticmethod
    def compute_group_balances(group: GroupSnapshot) -> Dict[str, NetBalance]:
        """Net balances for a snapshot"""
        return BalanceService.compute_net_balances(
            group.members, group.expenses, group.settlements
        )

    @staticmethod
    def outstanding_debt(balances: Mapping[str, NetBalance], member: str) -> Decimal:
        """
        Amount a member currently owes.

        Args:
            balances: Output of compute_net_balances
            member: Member ID

        Returns:
            max(0, -net), or 0 for a member with no balance
        """
        balance = balances.get(member)
        if balance is None or balance.net >= 0:
            return round_decimal(ZERO)
        return -balance.net

    @staticmethod
    async def get_group_snapshot(
        group_id: str, repository: GroupRepository
    ) -> GroupSnapshot:
        """
        Load a group snapshot.

        Args:
            group_id: Group ID
            repository: Snapshot collaborator

        Returns:
            GroupSnapshot

        Raises:
            NotFoundError: If group_id is malformed or the group doesn't exist
        """
        if not isinstance(group_id, str) or not group_id.strip():
            raise NotFoundError(f"Invalid group ID: {group_id!r}")

        group = await repository.get_snapshot(group_id)
        if group is None:
            raise NotFoundError(f"Group with ID {group_id} not found")

        return group

    @staticmethod
    async def get_group_balances(
        group_id: str, repository: GroupRepository
    ) -> GroupBalancesResponse:
        """
        Get balances of every member of a group.

        Args:
            group_id: Group ID
            repository: Snapshot collaborator

        Returns:
            GroupBalancesResponse with balances in member order

        Raises:
            NotFoundError: If group not found
            ConsistencyError: If the history references non-members
        """
        group = await BalanceService.get_group_snapshot(group_id, repository)
        balances = BalanceService.compute_group_balances(group)

        logger.debug(
            "Computed balances for group %s from %d expenses and %d settlements",
            group_id, len(group.expenses), len(group.settlements),
        )

        return GroupBalancesResponse(
            group_id=group_id, balances=list(balances.values())
        )
