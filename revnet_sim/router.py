"""
Execution venue selection: route each trade to the pool or the Revnet, whichever pays more.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .liquidity_pool import Asset, ConstantProductPool
from .revnet import Revnet

logger = logging.getLogger(__name__)


class ExecutionSource(str, Enum):
    POOL = "pool"
    REVNET = "revnet"
    UNFULFILLED = "unfulfilled"


@dataclass(frozen=True)
class Execution:
    source: ExecutionSource
    amount_in: float
    amount_out: float

    @property
    def fulfilled(self) -> bool:
        return self.source is not ExecutionSource.UNFULFILLED


def route_purchase(amount_in: float, day: int, revnet: Revnet,
                   pool: Optional[ConstantProductPool] = None) -> Execution:
    """
    Spend `amount_in` of currency on tokens.

    The pool wins only if it holds more tokens than the pre-fee quote and its
    post-fee output is strictly larger than minting at the ceiling. Otherwise the
    Revnet mints, which always succeeds. Pass `pool=None` before the pool exists.
    """
    if pool is not None and pool.has_liquidity():
        gross = pool.quote(Asset.A, amount_in, net=False)
        net = pool.quote(Asset.A, amount_in, net=True)
        mint_out = revnet.tokens_per_currency(day) * amount_in
        if pool.reserve_b > gross and net > mint_out:
            tokens_out = pool.swap(Asset.A, amount_in)
            logger.debug("day %d: buy %.6f via pool -> %.6f tokens", day, amount_in, tokens_out)
            return Execution(ExecutionSource.POOL, amount_in, tokens_out)

    tokens_out = revnet.issue(amount_in, day)
    logger.debug("day %d: buy %.6f via revnet -> %.6f tokens", day, amount_in, tokens_out)
    return Execution(ExecutionSource.REVNET, amount_in, tokens_out)


def route_sale(tokens_in: float, day: int, revnet: Revnet,
               pool: Optional[ConstantProductPool] = None) -> Execution:
    """
    Sell `tokens_in` for currency.

    The pool wins if it holds more currency than the pre-fee quote and its post-fee
    output strictly beats the Revnet floor. Otherwise the Revnet redeems, but only
    when the reclaim stays strictly below its reserve. When neither venue can fill,
    nothing executes and the sale is returned as unfulfilled.

    Tokens beyond the Revnet's circulating supply (pool-originated tokens) cannot
    be redeemed; the Revnet then offers zero.
    """
    redeemable = revnet.can_redeem(tokens_in)
    reclaim = revnet.redeemable_amount(tokens_in) if redeemable else 0.0

    if pool is not None and pool.has_liquidity():
        gross = pool.quote(Asset.B, tokens_in, net=False)
        net = pool.quote(Asset.B, tokens_in, net=True)
        if pool.reserve_a > gross and net > reclaim:
            amount_out = pool.swap(Asset.B, tokens_in)
            logger.debug("day %d: sell %.6f via pool -> %.6f", day, tokens_in, amount_out)
            return Execution(ExecutionSource.POOL, tokens_in, amount_out)

    if redeemable and reclaim < revnet.reserve_balance:
        amount_out = revnet.redeem(tokens_in)
        logger.debug("day %d: sell %.6f via revnet -> %.6f", day, tokens_in, amount_out)
        return Execution(ExecutionSource.REVNET, tokens_in, amount_out)

    logger.debug(
        "day %d: sale of %.6f tokens unfulfilled (reclaim=%.6f, reserve=%.6f)",
        day, tokens_in, reclaim, revnet.reserve_balance,
    )
    return Execution(ExecutionSource.UNFULFILLED, tokens_in, 0.0)
