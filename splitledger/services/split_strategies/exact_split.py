"""Exact split strategy"""
from decimal import Decimal
from typing import List

from splitledger.core.exceptions import ImbalanceError, ValidationError
from splitledger.schemas.split import RawSplitEntry, SplitEntry
from splitledger.services.split_strategies.base import BaseSplitStrategy
from splitledger.utils.decimal_utils import round_decimal, sum_decimals


class ExactSplitStrategy(BaseSplitStrategy):
    """Strategy for split with caller-specified amounts"""

    def calculate_splits(
        self,
        total_amount: Decimal,
        entries: List[RawSplitEntry]
    ) -> List[SplitEntry]:
        """
        Use the specified amounts for the split, unchanged apart from
        rounding to cents.

        Args:
            total_amount: Total expense amount
            entries: Raw entries with member and amount

        Returns:
            List of SplitEntry with specified amounts

        Raises:
            ValidationError: If an amount is missing or negative
            ImbalanceError: If amounts don't sum to total_amount
        """
        splits = []
        for entry in entries:
            if entry.amount is None:
                raise ValidationError(
                    f"Amount is required for member {entry.member} in an exact split"
                )

            if entry.amount < 0:
                raise ValidationError(
                    f"Split amount cannot be negative, got {entry.amount}"
                )

            splits.append(SplitEntry(
                member=entry.member,
                owed_amount=round_decimal(entry.amount)
            ))

        # No remainder absorption: exactness is the caller's responsibility
        total_assigned = sum_decimals(split.owed_amount for split in splits)
        if total_assigned != total_amount:
            raise ImbalanceError(
                "exact split sum must match total amount",
                details={
                    "total_amount": str(total_amount),
                    "split_sum": str(total_assigned),
                },
            )

        return splits
