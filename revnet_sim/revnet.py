"""
Revnet issuance/redemption engine: up-only price ceiling and tax-adjusted floor.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field

from .utils import EPS_SUPPLY


# =============================================================================
# Revnet
# =============================================================================

@dataclass
class Revnet:
    """
    Simplified Revnet backed by a reserve of the base currency.

    Ceiling (issuance):
      • Each full period of `ceiling_step_frequency_days` multiplies the issuance
        rate by (1 − `ceiling_step_percentage`):
            tokens_per_currency(day) = (1 − c)^⌊day / freq⌋
        so `price_ceiling(day) = 1 / tokens_per_currency(day)` never decreases.
      • While `day < boost_duration_days`, a `boost_percent` share of every mint is
        routed to the boost allocation; the payer receives the rest.

    Floor (redemption):
      • Burning a share r = tokens_in / token_supply returns
            reserve · r · ((1 − t) + r · t)
        with t = `floor_tax_intensity`. For t > 0 and r < 1 this is strictly below
        the pro-rata reserve · r; a full exit (r = 1) returns the whole reserve.

    The day is always passed explicitly; the Revnet holds no clock. Solvency of a
    redemption is the router's concern, `redeem` itself does not bound-check the
    reserve.
    """
    ceiling_step_percentage: float
    ceiling_step_frequency_days: int
    floor_tax_intensity: float
    premint_amount: float = 0.0
    boost_percent: float = 0.0
    boost_duration_days: int = 0
    token_supply: float = field(init=False)
    reserve_balance: float = field(init=False, default=0.0)
    tokens_sent_to_boost: float = field(init=False)

    def __post_init__(self) -> None:
        self.token_supply = float(self.premint_amount)
        self.tokens_sent_to_boost = float(self.premint_amount)

    @classmethod
    def from_params(cls, params) -> "Revnet":
        """Build a fresh Revnet from a `RevnetParams` record."""
        return cls(
            ceiling_step_percentage=params.ceiling_step_percentage,
            ceiling_step_frequency_days=params.ceiling_step_frequency_days,
            floor_tax_intensity=params.floor_tax_intensity,
            premint_amount=params.premint_amount,
            boost_percent=params.boost_percent,
            boost_duration_days=params.boost_duration_days,
        )

    # ----- ceiling -----
    def tokens_per_currency(self, day: int) -> float:
        """Tokens minted per unit of currency on `day`."""
        steps = math.floor(day / self.ceiling_step_frequency_days)
        return (1.0 - self.ceiling_step_percentage) ** steps

    def price_ceiling(self, day: int) -> float:
        """Currency cost of one marginal token minted on `day`."""
        return 1.0 / self.tokens_per_currency(day)

    def boost_active(self, day: int) -> bool:
        return day < self.boost_duration_days

    def issue(self, amount_in: float, day: int) -> float:
        """Mint at the ceiling; returns the tokens handed to the payer (net of boost)."""
        if amount_in < 0:
            raise ValueError(f"Issuance amount must be non-negative, got {amount_in}")
        tokens_out = amount_in * self.tokens_per_currency(day)
        self.reserve_balance += amount_in
        self.token_supply += tokens_out
        if self.boost_active(day):
            boosted = tokens_out * self.boost_percent
            self.tokens_sent_to_boost += boosted
            return tokens_out - boosted
        return tokens_out

    # ----- floor -----
    @property
    def circulating_supply(self) -> float:
        """Supply outside the boost allocation."""
        return self.token_supply - self.tokens_sent_to_boost

    def can_redeem(self, tokens_in: float) -> bool:
        # boost tokens are never burned by traders, so token_supply >= tokens_sent_to_boost holds
        return self.token_supply > EPS_SUPPLY and 0.0 <= tokens_in <= self.circulating_supply

    def redeemable_amount(self, tokens_in: float) -> float:
        """Currency reclaimed by burning `tokens_in`, net of the floor tax."""
        if self.token_supply <= EPS_SUPPLY:
            raise ValueError("Cannot price a redemption against zero token supply")
        if tokens_in < 0 or tokens_in > self.token_supply:
            raise ValueError(
                f"Redemption of {tokens_in} tokens outside [0, supply={self.token_supply}]"
            )
        share = tokens_in / self.token_supply
        tax_term = (1.0 - self.floor_tax_intensity) + share * self.floor_tax_intensity
        return self.reserve_balance * share * tax_term

    def redeem(self, tokens_in: float) -> float:
        """Burn `tokens_in` at the floor; returns the currency paid out."""
        amount_out = self.redeemable_amount(tokens_in)
        self.token_supply -= tokens_in
        self.reserve_balance -= amount_out
        return amount_out

    def price_floor(self, reference_tokens: float = 1.0) -> float:
        """Per-token redeemable currency at a reference burn size."""
        if self.token_supply <= EPS_SUPPLY:
            return 0.0
        size = min(reference_tokens, self.token_supply)
        return self.redeemable_amount(size) / size

    def tokens_needed_for_reclaim(self, amount: float) -> float:
        """
        Tokens to burn so that `redeemable_amount` returns exactly `amount`.

        Positive root of t·r² + (1 − t)·r − amount/reserve = 0 in the share r.
        """
        if self.token_supply <= EPS_SUPPLY or self.reserve_balance <= 0.0:
            raise ValueError("Reclaim requires positive token supply and reserve")
        if amount < 0 or amount > self.reserve_balance:
            raise ValueError(
                f"Reclaim amount {amount} outside [0, reserve={self.reserve_balance}]"
            )
        t = self.floor_tax_intensity
        target = amount / self.reserve_balance
        if t == 0.0:
            share = target
        else:
            disc = (1.0 - t) ** 2 + 4.0 * t * target
            share = (-(1.0 - t) + math.sqrt(disc)) / (2.0 * t)
        return share * self.token_supply
