"""Settlement schemas"""

from datetime import datetime
from decimal import Decimal

from pydantic import (BaseModel, ConfigDict, Field, ValidationInfo,
                      field_validator)

from splitledger.schemas.common import new_id, utcnow
from splitledger.utils.decimal_utils import to_decimal


class SettlementBase(BaseModel):
    """Base settlement schema; accepts and emits "from"/"to" keys"""

    from_member: str = Field(..., min_length=1, alias="from")
    to_member: str = Field(..., min_length=1, alias="to")
    amount: Decimal

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        """Convert amount to Decimal"""
        return to_decimal(v)


class SettlementCreate(SettlementBase):
    """Schema for recording a payment between two members"""


class SettledPayment(SettlementBase):
    """A payment between two distinct members for a positive amount"""

    amount: Decimal = Field(..., gt=0)

    @field_validator("to_member")
    @classmethod
    def validate_distinct_members(cls, v: str, info: ValidationInfo) -> str:
        """Validate that nobody pays themselves"""
        if v == info.data.get("from_member"):
            raise ValueError("from and to must be different members")
        return v


class SettlementRecord(SettledPayment):
    """Stored settlement. Immutable once created."""

    id: str = Field(default_factory=new_id)
    group_id: str
    settled_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class SettlementPlanEntry(SettledPayment):
    """One suggested payment in a settlement plan"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)
