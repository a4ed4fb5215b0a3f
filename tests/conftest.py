"""Pytest fixtures and configuration"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace
from typing import Dict, Generator
from unittest.mock import AsyncMock, patch

import pytest

from splitledger.config import get_settings
from splitledger.repositories.group_repository import InMemoryGroupRepository
from splitledger.schemas.expense import ExpenseRecord
from splitledger.schemas.group import GroupSnapshot
from splitledger.schemas.settlement import SettlementRecord
from splitledger.schemas.split import SplitType
from splitledger.services.cache_service import CacheService
from splitledger.services.split_strategies import normalize_split

GROUP_ID = "g1"
BASE_TIME = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator:
    """Re-read settings for every test"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def mock_cache() -> Generator[SimpleNamespace, None, None]:
    """Replace Redis calls with AsyncMocks (empty cache by default)"""
    with patch.object(CacheService, "get", AsyncMock(return_value=None)) as get, \
            patch.object(CacheService, "set", AsyncMock(return_value=True)) as set_:
        yield SimpleNamespace(get=get, set=set_)


@pytest.fixture
def cache_store(mock_cache) -> Dict[str, str]:
    """Back the cache mocks with a dict so values survive between calls"""
    store: Dict[str, str] = {}

    async def _get(key):
        return store.get(key)

    async def _set(key, value, ttl=None):
        store[key] = value
        return True

    mock_cache.get.side_effect = _get
    mock_cache.set.side_effect = _set
    return store


@pytest.fixture
def members():
    """Members of the default test group"""
    return ("A", "B", "C")


@pytest.fixture
def make_expense():
    """Factory for normalized expense records"""

    def _make_expense(payer, total, split_type, entries, group_id=GROUP_ID, **kwargs):
        split_entries = normalize_split(total, split_type, entries)
        return ExpenseRecord(
            group_id=group_id,
            payer=payer,
            total_amount=Decimal(str(total)),
            split_type=SplitType(split_type),
            split_entries=tuple(split_entries),
            **kwargs,
        )

    return _make_expense


@pytest.fixture
def make_settlement():
    """Factory for settlement records; minutes orders settled_at"""

    def _make_settlement(from_member, to_member, amount, minutes=0, group_id=GROUP_ID):
        return SettlementRecord(
            group_id=group_id,
            from_member=from_member,
            to_member=to_member,
            amount=Decimal(str(amount)),
            settled_at=BASE_TIME + timedelta(minutes=minutes),
        )

    return _make_settlement


@pytest.fixture
def dinner_expense(make_expense):
    """A paid 90 split equally among A, B, C"""
    return make_expense(
        "A", "90", "equal", [{"member": "A"}, {"member": "B"}, {"member": "C"}]
    )


@pytest.fixture
def group(members, dinner_expense) -> GroupSnapshot:
    """Group with one equal-split expense"""
    return GroupSnapshot(
        id=GROUP_ID, name="Trip", members=members, expenses=(dinner_expense,)
    )


@pytest.fixture
def repository(group) -> InMemoryGroupRepository:
    """In-memory repository holding the default group"""
    return InMemoryGroupRepository([group])
