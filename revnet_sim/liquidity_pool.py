"""
Constant-product (x·y = k) pool between the base currency and the Revnet token.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class Asset(str, Enum):
    """Pool sides: A is the base currency (e.g. ETH), B is the Revnet token."""
    A = "A"
    B = "B"

    @property
    def other(self) -> "Asset":
        return Asset.B if self is Asset.A else Asset.A


# =============================================================================
# Pool (Uniswap v2–style constant product)
# =============================================================================

@dataclass
class ConstantProductPool:
    """
    Minimal constant-product pool for a single asset pair.

    Reserves & price:
      • `reserve_a` (currency) and `reserve_b` (token) are both strictly positive
        while the pool is tradable. k := reserve_a · reserve_b.
      • Spot price of A is reserve_b / reserve_a (B per A) and vice versa.

    Fees & swaps:
      • Fee f is **on output**: a swap of Δin moves the reserves along the curve,
            gross = reserve_out − k / (reserve_in + Δin),
        and the trader receives net = gross · (1 − f). The fee f · gross is parked
        in `fees_a` / `fees_b` and is never reinjected into the tradable reserves,
        so k is exactly preserved by every swap.
      • `quote(..., net=False)` is the pre-fee amount; `net=True` is what `swap`
        actually settles.

    Liquidity:
      • `provide` adds to one reserve with no withdrawal; k grows. There is no
        burn/withdraw path.
    """
    reserve_a: float
    reserve_b: float
    fee_rate: float = 0.0
    fees_a: float = 0.0
    fees_b: float = 0.0

    # ----- derived properties -----
    @property
    def invariant(self) -> float:
        return self.reserve_a * self.reserve_b

    def reserve(self, asset: Asset) -> float:
        return self.reserve_a if asset is Asset.A else self.reserve_b

    def has_liquidity(self) -> bool:
        return self.reserve_a > 0.0 and self.reserve_b > 0.0

    def _require_liquidity(self) -> None:
        if not self.has_liquidity():
            raise ValueError(
                f"Pool reserves must be positive (reserve_a={self.reserve_a}, reserve_b={self.reserve_b})"
            )

    # ----- quotes (non-mutating) -----
    def _gross_out(self, asset_in: Asset, amount_in: float) -> float:
        reserve_in = self.reserve(asset_in)
        reserve_out = self.reserve(asset_in.other)
        return reserve_out - self.invariant / (reserve_in + amount_in)

    def quote(self, asset_in: Asset, amount_in: float, net: bool = True) -> float:
        """Amount of the other asset returned for `amount_in` of `asset_in`, without mutating state."""
        self._require_liquidity()
        if amount_in < 0:
            raise ValueError(f"Swap input must be non-negative, got {amount_in}")
        gross = self._gross_out(asset_in, amount_in)
        return gross * (1.0 - self.fee_rate) if net else gross

    def spot_price(self, asset: Asset) -> float:
        """Marginal price of one unit of `asset` in units of the other asset."""
        self._require_liquidity()
        if asset is Asset.A:
            return self.reserve_b / self.reserve_a
        return self.reserve_a / self.reserve_b

    # ----- state changes -----
    def swap(self, asset_in: Asset, amount_in: float) -> float:
        """Spend `amount_in` of `asset_in`; returns the net amount of the other asset received."""
        self._require_liquidity()
        if amount_in < 0:
            raise ValueError(f"Swap input must be non-negative, got {amount_in}")

        k = self.invariant
        if asset_in is Asset.A:
            new_a = self.reserve_a + amount_in
            new_b = k / new_a
            gross = self.reserve_b - new_b
            fee = self.fee_rate * gross
            self.reserve_a, self.reserve_b = new_a, new_b
            self.fees_b += fee
        else:
            new_b = self.reserve_b + amount_in
            new_a = k / new_b
            gross = self.reserve_a - new_a
            fee = self.fee_rate * gross
            self.reserve_a, self.reserve_b = new_a, new_b
            self.fees_a += fee
        return gross - fee

    def provide(self, asset: Asset, amount: float) -> None:
        """Add passive liquidity to one side of the pool."""
        if amount < 0:
            raise ValueError(f"Provided liquidity must be non-negative, got {amount}")
        if asset is Asset.A:
            self.reserve_a += amount
        else:
            self.reserve_b += amount

    # ----- reporting -----
    def summary(self) -> Dict[str, float]:
        out = {
            "reserve_a": self.reserve_a,
            "reserve_b": self.reserve_b,
            "fees_a": self.fees_a,
            "fees_b": self.fees_b,
        }
        if self.has_liquidity():
            out["price_a"] = self.spot_price(Asset.A)
            out["price_b"] = self.spot_price(Asset.B)
        return out
