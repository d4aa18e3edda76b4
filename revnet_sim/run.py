"""
Main simulation runner for the Revnet model.
"""
from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
from tqdm import tqdm

from .agents import Purchase, Sale, Trader
from .config import SimulationConfig, load_simulation_config
from .liquidity_pool import Asset, ConstantProductPool
from .revnet import Revnet
from .router import ExecutionSource, route_purchase, route_sale
from .sampling import SeededSampler
from .utils import ensure_parent

logger = logging.getLogger(__name__)

# Burn size used to quote the per-token price floor in snapshots
FLOOR_REFERENCE_TOKENS = 1.0


# =============================================================================
# Records
# =============================================================================

@dataclass(frozen=True)
class TradeRecord:
    trader_id: int
    side: str              # "buy" | "sell"
    amount_in: float       # currency for buys, tokens for sells
    amount_out: float
    source: ExecutionSource


@dataclass(frozen=True)
class DailySnapshot:
    day: int
    reserve_balance: float
    token_supply: float
    price_ceiling: float
    price_floor: float
    tokens_sent_to_boost: float
    pool_deployed: bool
    pool_reserve_a: float
    pool_reserve_b: float
    pool_token_price: float   # currency per token
    pool_fees_a: float
    pool_fees_b: float
    purchases: Tuple[TradeRecord, ...] = ()
    sales: Tuple[TradeRecord, ...] = ()


@dataclass
class SimulationResult:
    config: SimulationConfig
    snapshots: List[DailySnapshot] = field(default_factory=list)
    traders: List[Trader] = field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per day: scalar snapshot fields plus trade counts and volumes."""
        rows = []
        for snap in self.snapshots:
            sales_filled = [s for s in snap.sales if s.source is not ExecutionSource.UNFULFILLED]
            rows.append({
                "day": snap.day,
                "reserve_balance": snap.reserve_balance,
                "token_supply": snap.token_supply,
                "price_ceiling": snap.price_ceiling,
                "price_floor": snap.price_floor,
                "tokens_sent_to_boost": snap.tokens_sent_to_boost,
                "pool_deployed": snap.pool_deployed,
                "pool_reserve_a": snap.pool_reserve_a,
                "pool_reserve_b": snap.pool_reserve_b,
                "pool_token_price": snap.pool_token_price,
                "pool_fees_a": snap.pool_fees_a,
                "pool_fees_b": snap.pool_fees_b,
                "n_purchases": len(snap.purchases),
                "n_sales": len(sales_filled),
                "n_unfulfilled": len(snap.sales) - len(sales_filled),
                "purchase_volume": float(sum(t.amount_in for t in snap.purchases)),
                "sale_proceeds": float(sum(t.amount_out for t in sales_filled)),
            })
        return pd.DataFrame(rows)

    def traders_frame(self) -> pd.DataFrame:
        rows = []
        for tr in self.traders:
            p, s = tr.purchase, tr.sale
            rows.append({
                "trader_id": tr.id,
                "purchase_day": p.day,
                "amount_paid": p.amount_paid,
                "tokens_received": p.tokens_received,
                "purchase_source": p.source.value,
                "tokens_to_pool": p.tokens_to_pool,
                "sale_day": s.day if s else np.nan,
                "tokens_sold": s.tokens_sold if s else np.nan,
                "amount_received": s.amount_received if s else np.nan,
                "sale_source": s.source.value if s else None,
            })
        return pd.DataFrame(rows)


# =============================================================================
# Simulation
# =============================================================================

def _snapshot(day: int, revnet: Revnet, pool: ConstantProductPool, deployed: bool,
              purchases: List[TradeRecord], sales: List[TradeRecord]) -> DailySnapshot:
    return DailySnapshot(
        day=day,
        reserve_balance=revnet.reserve_balance,
        token_supply=revnet.token_supply,
        price_ceiling=revnet.price_ceiling(day),
        price_floor=revnet.price_floor(FLOOR_REFERENCE_TOKENS),
        tokens_sent_to_boost=revnet.tokens_sent_to_boost,
        pool_deployed=deployed,
        pool_reserve_a=pool.reserve_a,
        pool_reserve_b=pool.reserve_b,
        pool_token_price=pool.spot_price(Asset.B) if pool.has_liquidity() else float("nan"),
        pool_fees_a=pool.fees_a,
        pool_fees_b=pool.fees_b,
        purchases=tuple(purchases),
        sales=tuple(sales),
    )


def simulate(
    config: Optional[SimulationConfig] = None,
    sampler: Optional[SeededSampler] = None,
    progress: bool = False,
) -> SimulationResult:
    """
    Run the day-by-day Revnet/pool model.

    Each day:
      1. draw the number of purchases ~ Poisson(daily_purchase_mean_count);
      2. per purchase: size ~ LogNormal(log_mean, log_sigma), route it, create a
         trader, and (pool deployed) skim `token_liquidity_feed_ratio` of the
         tokens into the pool;
      3. per open trader held ≥ `minimum_holding_days`: sell the whole balance with
         probability `sale_probability`, feeding `currency_liquidity_feed_ratio`
         of the proceeds into the pool;
      4. record a `DailySnapshot`.

    Fresh Revnet, pool and trader list on every call. All randomness comes from
    `sampler` (default: seeded from `simulation.random_seed`), in a fixed draw
    order, so identical configs reproduce identical snapshots.
    """
    if config is None:
        config = SimulationConfig()
    sim = config.simulation
    if sampler is None:
        sampler = SeededSampler(sim.random_seed)

    revnet = Revnet.from_params(config.revnet)
    pool = ConstantProductPool(
        reserve_a=config.pool.initial_reserve_a,
        reserve_b=config.pool.initial_reserve_b,
        fee_rate=config.pool.fee_rate,
    )
    result = SimulationResult(config=config)
    traders = result.traders

    days = tqdm(range(sim.total_days), desc="Simulating days", unit="day", disable=not progress)
    for day in days:
        deployed = day >= config.pool.deployment_day
        venue = pool if deployed else None
        purchases: List[TradeRecord] = []
        sales: List[TradeRecord] = []

        # ----- 1-2) purchases -----
        n_purchases = sampler.poisson(sim.daily_purchase_mean_count)
        for _ in range(n_purchases):
            amount = sampler.lognormal(sim.purchase_size_log_mean, sim.purchase_size_log_sigma)
            execution = route_purchase(amount, day, revnet, venue)
            to_pool = 0.0
            if deployed and execution.amount_out > 0.0:
                to_pool = sim.token_liquidity_feed_ratio * execution.amount_out
                pool.provide(Asset.B, to_pool)
            trader = Trader(
                id=len(traders),
                purchase=Purchase(
                    amount_paid=amount,
                    tokens_received=execution.amount_out,
                    source=execution.source,
                    day=day,
                    tokens_to_pool=to_pool,
                ),
            )
            traders.append(trader)
            purchases.append(TradeRecord(trader.id, "buy", amount, execution.amount_out, execution.source))

        # ----- 3) sales by holders past the minimum holding period -----
        for trader in traders:
            if not trader.can_sell(day, sim.minimum_holding_days):
                continue
            if not sampler.bernoulli(sim.sale_probability):
                continue
            tokens = trader.token_balance
            execution = route_sale(tokens, day, revnet, venue)
            to_pool = 0.0
            if deployed and execution.amount_out > 0.0:
                to_pool = sim.currency_liquidity_feed_ratio * execution.amount_out
                pool.provide(Asset.A, to_pool)
            # an unfulfilled sale moves no tokens
            sold = tokens if execution.fulfilled else 0.0
            trader.record_sale(Sale(
                tokens_sold=sold,
                amount_received=execution.amount_out,
                source=execution.source,
                day=day,
                currency_to_pool=to_pool,
            ))
            sales.append(TradeRecord(trader.id, "sell", sold, execution.amount_out, execution.source))

        # ----- 4) snapshot -----
        result.snapshots.append(_snapshot(day, revnet, pool, deployed, purchases, sales))

    if result.snapshots:
        last = result.snapshots[-1]
        logger.info(
            "simulated %d days, %d traders | ceiling=%.4f floor=%.4f pool price=%.4f",
            sim.total_days, len(traders), last.price_ceiling, last.price_floor, last.pool_token_price,
        )
    return result


# =============================================================================
# Entrypoint
# =============================================================================

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run one Revnet simulation from a YAML configuration."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path(__file__).with_name("revnet_config.yml"),
        help="Path to the YAML configuration file.",
    )
    parser.add_argument("--csv", type=Path, default=None, help="Write the daily table to this CSV path.")
    parser.add_argument("--plot", type=Path, default=None, help="Directory for the price and reserve figures.")
    parser.add_argument("--verbose", action="store_true", help="Log routing decisions.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    scenario_label, config = load_simulation_config(args.config)
    print(f"[config] {args.config}")
    print(f"[scenario] {scenario_label}")

    result = simulate(config, progress=True)
    df = result.to_dataframe()
    print(df.tail())

    if args.csv is not None:
        ensure_parent(args.csv)
        df.to_csv(args.csv, index=False)
        print(f"[RESULT] CSV saved to {args.csv}")

    if args.plot is not None:
        from .plotting import save_figures
        for path in save_figures(result, args.plot, prefix=f"revnet_{scenario_label}"):
            print(f"[RESULT] Plot saved to {path}")


if __name__ == "__main__":
    main()
