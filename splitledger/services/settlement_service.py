"""Settlement planning and recording"""

import logging
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Tuple, Union

from splitledger.config import get_settings
from splitledger.core.exceptions import (ConsistencyError, ExceedsDebtError,
                                         ValidationError)
from splitledger.repositories.group_repository import GroupRepository
from splitledger.schemas.balance import NetBalance, SettlementSuggestions
from splitledger.schemas.group import GroupSnapshot
from splitledger.schemas.settlement import (SettlementCreate,
                                            SettlementPlanEntry,
                                            SettlementRecord)
from splitledger.services.balance_service import BalanceService
from splitledger.utils.decimal_utils import (ZERO, is_within_tolerance,
                                             round_decimal, sum_decimals,
                                             to_decimal)

logger = logging.getLogger(__name__)

BalanceInput = Mapping[str, Union[NetBalance, Decimal]]


def _net_amounts(balances: BalanceInput) -> Dict[str, Decimal]:
    nets = {}
    for member, balance in balances.items():
        value = balance.net if isinstance(balance, NetBalance) else balance
        nets[member] = round_decimal(to_decimal(value))
    return nets


def _ranked(amounts: List[Tuple[str, Decimal]]) -> List[List]:
    # Largest amount first, member id breaks ties
    ranked = sorted(amounts, key=lambda item: (-item[1], item[0]))
    return [[member, amount] for member, amount in ranked]


class SettlementService:
    """Service for settlement operations"""

    @staticmethod
    def plan(
        balances: BalanceInput, tolerance: Optional[Decimal] = None
    ) -> List[SettlementPlanEntry]:
        """
        Produce payments that bring every balance to zero.

        Creditors and debtors are each ranked by amount descending (member
        id ascending on ties) and matched greedily: the current debtor pays
        the current creditor min(debt, credit), and whichever side reaches
        zero moves on to the next member.

        Args:
            balances: Mapping of member to NetBalance (or signed Decimal)
            tolerance: Allowed deviation of sum(net) from zero
                (default: settings.balance_tolerance)

        Returns:
            Ordered list of SettlementPlanEntry

        Raises:
            ConsistencyError: If balances don't sum to zero within tolerance
        """
        if tolerance is None:
            tolerance = get_settings().balance_tolerance

        nets = _net_amounts(balances)

        imbalance = sum_decimals(nets.values())
        if not is_within_tolerance(imbalance, tolerance):
            raise ConsistencyError(
                "Balances do not sum to zero",
                details={"imbalance": str(imbalance)},
            )

        creditors = _ranked([(m, net) for m, net in nets.items() if net > 0])
        debtors = _ranked([(m, -net) for m, net in nets.items() if net < 0])

        plan: List[SettlementPlanEntry] = []
        i = 0
        j = 0

        while i < len(debtors) and j < len(creditors):
            debtor = debtors[i]
            creditor = creditors[j]

            pay_amount = min(debtor[1], creditor[1])

            plan.append(SettlementPlanEntry(
                from_member=debtor[0],
                to_member=creditor[0],
                amount=pay_amount,
            ))

            debtor[1] -= pay_amount
            creditor[1] -= pay_amount

            if debtor[1] == 0:
                i += 1
            if creditor[1] == 0:
                j += 1

        return plan

    @staticmethod
    def apply_plan(
        balances: BalanceInput, plan: List[SettlementPlanEntry]
    ) -> Dict[str, Decimal]:
        """
        Net amounts left after every plan entry is paid as a settlement.

        Args:
            balances: Balances the plan was built from
            plan: Output of plan()

        Returns:
            Dictionary mapping member to remaining net amount
        """
        nets = _net_amounts(balances)
        for entry in plan:
            nets[entry.from_member] = nets.get(entry.from_member, ZERO) + entry.amount
            nets[entry.to_member] = nets.get(entry.to_member, ZERO) - entry.amount
        return nets

    @staticmethod
    def validate_settlement(group: GroupSnapshot, data: SettlementCreate) -> Decimal:
        """
        Check a settlement against the group's current balances.

        Args:
            group: Snapshot the settlement would be appended to
            data: Settlement input

        Returns:
            Outstanding debt of the paying member before this settlement

        Raises:
            ValidationError: Same payer and receiver, bad amount, non-members
            ExceedsDebtError: Payer owes nothing or less than the amount
        """
        if data.from_member == data.to_member:
            raise ValidationError("from and to cannot be the same member")

        if data.amount <= 0:
            raise ValidationError(f"Amount must be greater than 0, got {data.amount}")

        if round_decimal(data.amount) != data.amount:
            raise ValidationError(
                f"Amount must have at most 2 decimal places, got {data.amount}"
            )

        if not group.has_member(data.from_member) or not group.has_member(data.to_member):
            raise ValidationError("from and to must be group members")

        balances = BalanceService.compute_group_balances(group)
        owed = BalanceService.outstanding_debt(balances, data.from_member)

        if owed == 0:
            raise ExceedsDebtError("This user does not owe anything currently")

        if data.amount > owed:
            raise ExceedsDebtError(
                f"Amount exceeds pending debt. Max payable: {owed}",
                details={"max_payable": str(owed)},
            )

        return owed

    @staticmethod
    async def create_settlement(
        group_id: str, data: SettlementCreate, repository: GroupRepository
    ) -> SettlementRecord:
        """
        Record a payment between two members.

        Reading the history, validating against it and appending happen
        under the repository's per-group lock, so two concurrent payments
        cannot together overdraw the same debt.

        Args:
            group_id: Group ID
            data: Settlement input
            repository: Snapshot collaborator

        Returns:
            Created SettlementRecord

        Raises:
            NotFoundError: If group not found
            ValidationError: If the input is malformed
            ExceedsDebtError: If the amount exceeds the payer's debt
        """
        async with repository.lock(group_id):
            group = await BalanceService.get_group_snapshot(group_id, repository)
            SettlementService.validate_settlement(group, data)

            settlement = SettlementRecord(
                group_id=group_id,
                from_member=data.from_member,
                to_member=data.to_member,
                amount=round_decimal(data.amount),
            )
            await repository.append_settlement(group_id, settlement)

        logger.info(
            "Recorded settlement %s in group %s: %s paid %s %s",
            settlement.id, group_id, settlement.from_member,
            settlement.to_member, settlement.amount,
        )
        return settlement

    @staticmethod
    async def get_settlement_suggestions(
        group_id: str, repository: GroupRepository
    ) -> SettlementSuggestions:
        """
        Get balances and the payments that would settle the group.

        Args:
            group_id: Group ID
            repository: Snapshot collaborator

        Returns:
            SettlementSuggestions

        Raises:
            NotFoundError: If group not found
            ConsistencyError: If the history is inconsistent
        """
        group = await BalanceService.get_group_snapshot(group_id, repository)
        balances = BalanceService.compute_group_balances(group)

        return SettlementSuggestions(
            group_id=group_id,
            balances=list(balances.values()),
            settlements=SettlementService.plan(balances),
        )

    @staticmethod
    async def get_settlement_logs(
        group_id: str, repository: GroupRepository
    ) -> List[SettlementRecord]:
        """
        Get recorded settlements of a group, most recent first.

        Args:
            group_id: Group ID
            repository: Snapshot collaborator

        Returns:
            List of SettlementRecord

        Raises:
            NotFoundError: If group not found
        """
        group = await BalanceService.get_group_snapshot(group_id, repository)
        return sorted(group.settlements, key=lambda s: s.settled_at, reverse=True)
