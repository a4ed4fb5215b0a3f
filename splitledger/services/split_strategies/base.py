"""Base strategy interface"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List

from splitledger.schemas.split import RawSplitEntry, SplitEntry
from splitledger.utils.decimal_utils import sum_decimals


def absorb_remainder(total_amount: Decimal, amounts: List[Decimal]) -> List[Decimal]:
    """
    Force amounts to sum to total_amount by adjusting the last position.

    Works on a copy; the input list is left untouched.

    Args:
        total_amount: Amount the result must sum to
        amounts: Rounded amounts in input order

    Returns:
        New list whose last element is total_amount minus all previous ones
    """
    reconciled = list(amounts)
    if reconciled:
        reconciled[-1] = total_amount - sum_decimals(reconciled[:-1])
    return reconciled


class BaseSplitStrategy(ABC):
    """Base class for split strategies"""

    @abstractmethod
    def calculate_splits(
        self, total_amount: Decimal, entries: List[RawSplitEntry]
    ) -> List[SplitEntry]:
        """
        Calculate owed amounts for split entries.

        Args:
            total_amount: Total expense amount (positive, 2 decimal places)
            entries: Non-empty raw entries with unique members

        Returns:
            List of SplitEntry in the same order as entries
        """
        pass
