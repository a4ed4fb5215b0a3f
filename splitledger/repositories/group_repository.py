"""Group snapshot data access"""

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from splitledger.schemas.expense import ExpenseRecord
from splitledger.schemas.group import GroupSnapshot
from splitledger.schemas.settlement import SettlementRecord


class GroupRepository(ABC):
    """
    Storage collaborator that hands the ledger consistent group snapshots.

    Implementations must make lock(group_id) cover every read-validate-append
    sequence for that group.
    """

    @abstractmethod
    async def get_snapshot(self, group_id: str) -> Optional[GroupSnapshot]:
        """
        Get the current snapshot of a group.

        Args:
            group_id: Group ID

        Returns:
            GroupSnapshot if found, None otherwise
        """

    @abstractmethod
    async def list_member_groups(self, member: str) -> List[GroupSnapshot]:
        """
        Get snapshots of every group the member belongs to.

        Args:
            member: Member ID

        Returns:
            List of GroupSnapshot
        """

    @abstractmethod
    async def save_expense(self, group_id: str, expense: ExpenseRecord) -> GroupSnapshot:
        """Append a new expense or replace the one with the same id"""

    @abstractmethod
    async def append_settlement(
        self, group_id: str, settlement: SettlementRecord
    ) -> GroupSnapshot:
        """Append a settlement"""

    @abstractmethod
    def lock(self, group_id: str) -> asyncio.Lock:
        """Per-group mutual exclusion scope"""


class InMemoryGroupRepository(GroupRepository):
    """Dict-backed repository, one asyncio.Lock per group"""

    def __init__(self, groups: Optional[List[GroupSnapshot]] = None):
        self._groups: Dict[str, GroupSnapshot] = {g.id: g for g in groups or []}
        self._locks: Dict[str, asyncio.Lock] = {}

    def add_group(self, group: GroupSnapshot) -> None:
        self._groups[group.id] = group

    async def get_snapshot(self, group_id: str) -> Optional[GroupSnapshot]:
        return self._groups.get(group_id)

    async def list_member_groups(self, member: str) -> List[GroupSnapshot]:
        return [g for g in self._groups.values() if g.has_member(member)]

    async def save_expense(self, group_id: str, expense: ExpenseRecord) -> GroupSnapshot:
        group = self._groups[group_id]
        if group.get_expense(expense.id) is None:
            group = group.with_expense(expense)
        else:
            group = group.replacing_expense(expense)
        self._groups[group_id] = group
        return group

    async def append_settlement(
        self, group_id: str, settlement: SettlementRecord
    ) -> GroupSnapshot:
        group = self._groups[group_id].with_settlement(settlement)
        self._groups[group_id] = group
        return group

    def lock(self, group_id: str) -> asyncio.Lock:
        if group_id not in self._locks:
            self._locks[group_id] = asyncio.Lock()
        return self._locks[group_id]
