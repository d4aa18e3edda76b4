"""
Trader records: one purchase per trader, at most one sale.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .router import ExecutionSource


@dataclass(frozen=True)
class Purchase:
    amount_paid: float
    tokens_received: float
    source: ExecutionSource
    day: int
    tokens_to_pool: float = 0.0   # skimmed into the pool as passive liquidity


@dataclass(frozen=True)
class Sale:
    tokens_sold: float
    amount_received: float
    source: ExecutionSource
    day: int
    currency_to_pool: float = 0.0


@dataclass
class Trader:
    """
    A participant created atomically with its first purchase.

    Sells once, whole balance, never before `minimum_holding_days` have passed. An
    unfulfilled sale attempt is still recorded and closes the trader.
    """
    id: int
    purchase: Purchase
    sale: Optional[Sale] = None

    @property
    def token_balance(self) -> float:
        if self.sale is not None and self.sale.source is not ExecutionSource.UNFULFILLED:
            return 0.0
        return self.purchase.tokens_received - self.purchase.tokens_to_pool

    def holding_days(self, day: int) -> int:
        return day - self.purchase.day

    def can_sell(self, day: int, minimum_holding_days: int) -> bool:
        return self.sale is None and self.holding_days(day) >= minimum_holding_days

    def record_sale(self, sale: Sale) -> None:
        if self.sale is not None:
            raise RuntimeError(f"Trader {self.id} already sold on day {self.sale.day}")
        self.sale = sale
