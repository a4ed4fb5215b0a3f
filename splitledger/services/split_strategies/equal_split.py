"""Equal split strategy"""

from decimal import Decimal
from typing import List

from splitledger.core.exceptions import ValidationError
from splitledger.schemas.split import RawSplitEntry, SplitEntry
from splitledger.services.split_strategies.base import (BaseSplitStrategy,
                                                        absorb_remainder)
from splitledger.utils.decimal_utils import round_decimal


class EqualSplitStrategy(BaseSplitStrategy):
    """Strategy for splitting expense equally among members"""

    def calculate_splits(
        self, total_amount: Decimal, entries: List[RawSplitEntry]
    ) -> List[SplitEntry]:
        """
        Calculate equal split for all members.

        Every member gets total / n rounded to cents, except the last one,
        which gets whatever is left so the split reconciles exactly.

        Args:
            total_amount: Total expense amount
            entries: Raw entries (only member is used)

        Returns:
            List of SplitEntry with equal amounts

        Raises:
            ValidationError: If the total is too small to give the last
                member a non-negative share
        """
        num_members = len(entries)

        # Calculate base amount per person
        per_head = round_decimal(total_amount / num_members)

        amounts = absorb_remainder(total_amount, [per_head] * num_members)

        if amounts[-1] < 0:
            raise ValidationError(
                f"Total amount {total_amount} is too small to split "
                f"equally among {num_members} members"
            )

        return [
            SplitEntry(member=entry.member, owed_amount=amount)
            for entry, amount in zip(entries, amounts)
        ]
