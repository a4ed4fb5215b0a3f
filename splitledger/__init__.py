"""Ledger computation engine for shared group expenses"""
from splitledger.services.balance_service import BalanceService
from splitledger.services.settlement_service import SettlementService
from splitledger.services.split_strategies import normalize_split

__version__ = "1.0.0"

compute_net_balances = BalanceService.compute_net_balances
plan_settlements = SettlementService.plan

__all__ = [
    "BalanceService",
    "SettlementService",
    "compute_net_balances",
    "normalize_split",
    "plan_settlements",
]
