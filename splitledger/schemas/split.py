"""Split schemas"""

import enum
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from splitledger.utils.decimal_utils import to_decimal


class SplitType(str, enum.Enum):
    """Enum for split types"""

    EQUAL = "equal"
    EXACT = "exact"
    PERCENTAGE = "percentage"

    @classmethod
    def _missing_(cls, value):
        # Accept "EQUAL", "Percentage", ...
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().lower():
                    return member
        return None


class RawSplitEntry(BaseModel):
    """Caller-supplied split input for one member"""

    member: str = Field(..., min_length=1)
    amount: Optional[Decimal] = None
    percent: Optional[Decimal] = None

    @field_validator("amount", "percent", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal"""
        if v is None:
            return v
        return to_decimal(v)


class SplitEntry(BaseModel):
    """Normalized owed amount for one member of an expense"""

    member: str
    owed_amount: Decimal = Field(..., ge=0)
    percent: Optional[Decimal] = None

    model_config = ConfigDict(frozen=True)
