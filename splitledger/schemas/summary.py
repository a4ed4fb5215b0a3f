"""Summary schemas"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class GroupSummary(BaseModel):
    """Overview of one group from a member's point of view"""
    group_id: str
    group_name: str
    members_count: int
    total_expenses: int
    total_settlements: int
    suggestion_count: int
    your_net: Decimal


class RecentSettlement(BaseModel):
    """Settlement line shown on the dashboard"""
    settlement_id: str
    group_id: str
    group_name: str
    from_member: str
    to_member: str
    amount: Decimal
    settled_at: datetime


class DashboardSummary(BaseModel):
    """Totals across every group a member belongs to"""
    total_groups: int
    total_expenses: int
    total_settlements: int
    you_owe_total: Decimal
    you_get_back_total: Decimal
    recent_settlements: List[RecentSettlement]


class GroupTotal(BaseModel):
    """Running group total recomputed from history, with cache comparison"""
    group_id: str
    amount: Decimal
    cached_amount: Optional[Decimal] = None
    drift_detected: bool = False
