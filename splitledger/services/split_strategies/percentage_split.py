"""Percentage split strategy"""

from decimal import Decimal
from typing import List

from splitledger.core.exceptions import ImbalanceError, ValidationError
from splitledger.schemas.split import RawSplitEntry, SplitEntry
from splitledger.services.split_strategies.base import (BaseSplitStrategy,
                                                        absorb_remainder)
from splitledger.utils.decimal_utils import (HUNDRED, round_decimal,
                                             sum_decimals)


class PercentageSplitStrategy(BaseSplitStrategy):
    """Strategy for splitting expense by percentage"""

    def calculate_splits(
        self, total_amount: Decimal, entries: List[RawSplitEntry]
    ) -> List[SplitEntry]:
        """
        Calculate percentage-based split for members.

        Args:
            total_amount: Total expense amount
            entries: Raw entries with member and percent

        Returns:
            List of SplitEntry with calculated amounts; the last entry
            absorbs the rounding remainder

        Raises:
            ValidationError: If a percent is missing or not positive, or the
                total is too small to give the last member a non-negative share
            ImbalanceError: If percentages don't sum to 100
        """
        percents = []
        for entry in entries:
            if entry.percent is None:
                raise ValidationError(
                    f"Percent is required for member {entry.member} in a percentage split"
                )

            if entry.percent <= 0:
                raise ValidationError(
                    f"Percent must be greater than 0, got {entry.percent}"
                )

            percents.append(round_decimal(entry.percent))

        total_percentage = round_decimal(sum_decimals(percents))
        if total_percentage != HUNDRED:
            raise ImbalanceError(
                f"Percentages must sum to 100%, got {total_percentage}%",
                details={"total_percent": str(total_percentage)},
            )

        amounts = [
            round_decimal(total_amount * percent / HUNDRED) for percent in percents
        ]
        amounts = absorb_remainder(total_amount, amounts)

        if amounts[-1] < 0:
            raise ValidationError(
                f"Total amount {total_amount} is too small to split "
                f"by percentage among {len(entries)} members"
            )

        return [
            SplitEntry(member=entry.member, owed_amount=amount, percent=percent)
            for entry, percent, amount in zip(entries, percents, amounts)
        ]
