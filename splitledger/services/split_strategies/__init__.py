"""Split calculation strategies"""

from collections import Counter
from typing import Any, List, Mapping, Sequence, Union

import pydantic

from splitledger.core.exceptions import ValidationError
from splitledger.schemas.split import RawSplitEntry, SplitEntry, SplitType
from splitledger.services.split_strategies.base import (BaseSplitStrategy,
                                                        absorb_remainder)
from splitledger.services.split_strategies.equal_split import EqualSplitStrategy
from splitledger.services.split_strategies.exact_split import ExactSplitStrategy
from splitledger.services.split_strategies.percentage_split import \
    PercentageSplitStrategy
from splitledger.utils.decimal_utils import round_decimal, to_decimal

RawEntryInput = Union[RawSplitEntry, Mapping[str, Any]]


def get_split_strategy(split_type: Union[SplitType, str]) -> BaseSplitStrategy:
    """
    Get appropriate split strategy based on split type.

    Args:
        split_type: Type of split (equal, exact or percentage, any case)

    Returns:
        Instance of appropriate strategy

    Raises:
        ValidationError: If split_type is not recognized
    """
    strategies = {
        SplitType.EQUAL: EqualSplitStrategy(),
        SplitType.EXACT: ExactSplitStrategy(),
        SplitType.PERCENTAGE: PercentageSplitStrategy(),
    }

    try:
        strategy = strategies.get(SplitType(split_type))
    except ValueError:
        strategy = None

    if strategy is None:
        raise ValidationError(
            f"unsupported split type: {split_type}",
            details={"supported": [t.value for t in SplitType]},
        )

    return strategy


def _coerce_entries(raw_entries: Sequence[RawEntryInput]) -> List[RawSplitEntry]:
    entries = []
    for raw in raw_entries:
        if isinstance(raw, RawSplitEntry):
            entries.append(raw)
            continue
        try:
            entries.append(RawSplitEntry.model_validate(raw))
        except pydantic.ValidationError as e:
            raise ValidationError(
                "Invalid split entry", details=e.errors(include_url=False)
            ) from e
    return entries


def normalize_split(
    total_amount: Any,
    split_type: Union[SplitType, str],
    raw_entries: Sequence[RawEntryInput],
) -> List[SplitEntry]:
    """
    Turn a raw split request into reconciled owed amounts.

    Output order equals input order, and whenever amounts are derived
    (equal, percentage) the rounding remainder lands on the last entry.

    Args:
        total_amount: Positive total with at most 2 decimal places
        split_type: equal, exact or percentage
        raw_entries: RawSplitEntry objects or dicts with member/amount/percent

    Returns:
        List of SplitEntry summing exactly to total_amount

    Raises:
        ValidationError: Empty or duplicate entries, bad total, unknown type
        ImbalanceError: Exact amounts or percentages don't reconcile
    """
    try:
        total = to_decimal(total_amount)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    if total <= 0:
        raise ValidationError(f"Total amount must be greater than 0, got {total}")

    if round_decimal(total) != total:
        raise ValidationError(
            f"Total amount must have at most 2 decimal places, got {total}"
        )

    if not raw_entries:
        raise ValidationError("Split entries must be a non-empty list")

    strategy = get_split_strategy(split_type)
    entries = _coerce_entries(raw_entries)

    counts = Counter(entry.member for entry in entries)
    duplicates = sorted(member for member, count in counts.items() if count > 1)
    if duplicates:
        raise ValidationError(
            "Split entries contain duplicate members",
            details={"duplicates": duplicates},
        )

    return strategy.calculate_splits(round_decimal(total), entries)


__all__ = [
    "BaseSplitStrategy",
    "EqualSplitStrategy",
    "ExactSplitStrategy",
    "PercentageSplitStrategy",
    "absorb_remainder",
    "get_split_strategy",
    "normalize_split",
]
