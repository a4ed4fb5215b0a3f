"""Expense business logic"""
import logging
from typing import Optional

from splitledger.core.exceptions import NotFoundError, ValidationError
from splitledger.repositories.group_repository import GroupRepository
from splitledger.schemas.expense import ExpenseCreate, ExpenseRecord
from splitledger.schemas.group import GroupSnapshot
from splitledger.services.balance_service import BalanceService
from splitledger.services.split_strategies import normalize_split
from splitledger.services.summary_service import SummaryService
from splitledger.utils.decimal_utils import round_decimal

logger = logging.getLogger(__name__)


class ExpenseService:
    """Service for expense operations"""

    @staticmethod
    def validate_members_exist(group: GroupSnapshot, expense_data: ExpenseCreate) -> None:
        """
        Validate that the payer and every split member belong to the group.

        Args:
            group: Group snapshot
            expense_data: Expense input

        Raises:
            ValidationError: If any member is not in the group
        """
        if not group.has_member(expense_data.payer):
            raise ValidationError(
                f"Payer {expense_data.payer} is not a member of group {group.id}"
            )

        outsiders = [
            entry.member for entry in expense_data.split_entries
            if not group.has_member(entry.member)
        ]
        if outsiders:
            raise ValidationError(
                "Split members must belong to the group",
                details={"unknown_members": outsiders},
            )

    @staticmethod
    def build_expense(
        group: GroupSnapshot,
        expense_data: ExpenseCreate,
        expense_id: Optional[str] = None
    ) -> ExpenseRecord:
        """
        Build an immutable expense record with a normalized split.

        Args:
            group: Group the expense belongs to
            expense_data: Expense input
            expense_id: Keep this id (logical replacement); new id if None

        Returns:
            ExpenseRecord

        Raises:
            ValidationError: If validation fails
            ImbalanceError: If the split doesn't reconcile
        """
        ExpenseService.validate_members_exist(group, expense_data)

        split_entries = normalize_split(
            expense_data.total_amount,
            expense_data.split_type,
            expense_data.split_entries
        )

        fields = dict(
            group_id=group.id,
            payer=expense_data.payer,
            description=expense_data.description,
            total_amount=round_decimal(expense_data.total_amount),
            split_type=expense_data.split_type,
            split_entries=tuple(split_entries),
        )
        if expense_id is not None:
            fields["id"] = expense_id

        return ExpenseRecord(**fields)

    @staticmethod
    async def create_expense(
        group_id: str,
        expense_data: ExpenseCreate,
        repository: GroupRepository
    ) -> ExpenseRecord:
        """
        Create a new expense.

        Args:
            group_id: Group ID
            expense_data: Expense creation data
            repository: Snapshot collaborator

        Returns:
            Created expense

        Raises:
            NotFoundError: If group not found
            ValidationError: If validation fails
            ImbalanceError: If the split doesn't reconcile
        """
        async with repository.lock(group_id):
            group = await BalanceService.get_group_snapshot(group_id, repository)
            expense = ExpenseService.build_expense(group, expense_data)
            cached_total = await SummaryService.get_cached_group_total(group_id)
            group = await repository.save_expense(group_id, expense)
            await SummaryService.advance_group_total(
                group, cached_total, expense.total_amount
            )

        logger.info(
            "Created expense %s in group %s: %s paid %s (%s split)",
            expense.id, group_id, expense.payer,
            expense.total_amount, expense.split_type.value,
        )

        return expense

    @staticmethod
    async def replace_expense(
        group_id: str,
        expense_id: str,
        expense_data: ExpenseCreate,
        repository: GroupRepository
    ) -> ExpenseRecord:
        """
        Replace an expense with a new version carrying the same id.

        Args:
            group_id: Group ID
            expense_id: Expense ID
            expense_data: Updated expense data
            repository: Snapshot collaborator

        Returns:
            Replacement expense

        Raises:
            NotFoundError: If group or expense not found
            ValidationError: If validation fails
            ImbalanceError: If the split doesn't reconcile
        """
        async with repository.lock(group_id):
            group = await BalanceService.get_group_snapshot(group_id, repository)

            previous = group.get_expense(expense_id)
            if previous is None:
                raise NotFoundError("Expense not found")

            expense = ExpenseService.build_expense(group, expense_data, expense_id)
            cached_total = await SummaryService.get_cached_group_total(group_id)
            group = await repository.save_expense(group_id, expense)
            await SummaryService.advance_group_total(
                group, cached_total, expense.total_amount - previous.total_amount
            )

        logger.info("Replaced expense %s in group %s", expense_id, group_id)

        return expense
