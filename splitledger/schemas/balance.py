"""Balance schemas"""
from decimal import Decimal
from typing import List, Literal

from pydantic import BaseModel, ConfigDict

from splitledger.schemas.settlement import SettlementPlanEntry

BalanceStatus = Literal["owes", "gets back", "settled"]


class NetBalance(BaseModel):
    """Signed net position of one member (positive = is owed money)"""
    member: str
    net: Decimal
    status: BalanceStatus

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_net(cls, member: str, net: Decimal) -> "NetBalance":
        """Build a balance with status derived from the sign of net"""
        if net > 0:
            status = "gets back"
        elif net < 0:
            status = "owes"
        else:
            status = "settled"
        return cls(member=member, net=net, status=status)


class GroupBalancesResponse(BaseModel):
    """Balances of every member of a group, in member order"""
    group_id: str
    balances: List[NetBalance]


class SettlementSuggestions(BaseModel):
    """Balances plus the payments that would settle them"""
    group_id: str
    balances: List[NetBalance]
    settlements: List[SettlementPlanEntry]
