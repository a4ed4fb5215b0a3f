"""Expense schemas"""

from datetime import datetime
from decimal import Decimal
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from splitledger.schemas.common import new_id, utcnow
from splitledger.schemas.split import RawSplitEntry, SplitEntry, SplitType
from splitledger.utils.decimal_utils import to_decimal


class ExpenseBase(BaseModel):
    """Base expense schema"""

    payer: str = Field(..., min_length=1)
    description: str = Field(default="", max_length=500)
    total_amount: Decimal
    split_type: SplitType

    @field_validator("total_amount", mode="before")
    @classmethod
    def convert_total_amount(cls, v):
        """Convert total_amount to Decimal"""
        return to_decimal(v)


class ExpenseCreate(ExpenseBase):
    """Schema for creating an expense"""

    split_entries: List[RawSplitEntry] = Field(..., min_length=1)


class ExpenseRecord(ExpenseBase):
    """Stored, normalized expense. Immutable once created."""

    id: str = Field(default_factory=new_id)
    group_id: str
    split_entries: Tuple[SplitEntry, ...]
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(frozen=True)
