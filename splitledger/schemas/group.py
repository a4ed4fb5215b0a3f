"""Group snapshot schema"""
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from splitledger.schemas.expense import ExpenseRecord
from splitledger.schemas.settlement import SettlementRecord


class GroupSnapshot(BaseModel):
    """
    Consistent, immutable view of one group's ledger history.

    Appending a record returns a new snapshot; the original is never mutated.
    """

    id: str = Field(..., min_length=1)
    name: str = ""
    members: Tuple[str, ...]
    expenses: Tuple[ExpenseRecord, ...] = ()
    settlements: Tuple[SettlementRecord, ...] = ()

    model_config = ConfigDict(frozen=True)

    @field_validator("members")
    @classmethod
    def validate_members(cls, v):
        """Validate member ids are unique"""
        if len(set(v)) != len(v):
            raise ValueError("Group members must be unique")
        return v

    def has_member(self, member: str) -> bool:
        return member in self.members

    def get_expense(self, expense_id: str) -> Optional[ExpenseRecord]:
        return next((e for e in self.expenses if e.id == expense_id), None)

    def with_expense(self, expense: ExpenseRecord) -> "GroupSnapshot":
        return self.model_copy(update={"expenses": self.expenses + (expense,)})

    def replacing_expense(self, expense: ExpenseRecord) -> "GroupSnapshot":
        """Swap the expense with the same id for a new version"""
        expenses = tuple(
            expense if existing.id == expense.id else existing
            for existing in self.expenses
        )
        return self.model_copy(update={"expenses": expenses})

    def with_settlement(self, settlement: SettlementRecord) -> "GroupSnapshot":
        return self.model_copy(
            update={"settlements": self.settlements + (settlement,)}
        )
