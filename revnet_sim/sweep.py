#!/usr/bin/env python3

"""
Sweep the Revnet model across random seeds, aggregating end-of-run metrics.

Parameters are supplied via a YAML configuration with a `seed_sweep` mapping that
points at a base simulation config. Every run uses the base parameters with a
different seed; the script reports the mean ± SEM of each end-of-run metric.
"""

import argparse
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
import yaml
from tqdm import tqdm

from .config import SimulationConfig, load_simulation_config
from .router import ExecutionSource
from .run import simulate
from .utils import ensure_parent

METRICS = (
    "pool_token_price",
    "price_ceiling",
    "price_floor",
    "reserve_balance",
    "token_supply",
    "unfulfilled_sales",
)


@dataclass
class SweepConfig:
    runs: int
    seed: int
    workers: int
    csv: Path
    base_simulation_config: Path


def load_sweep_config(config_path: Path) -> SweepConfig:
    """Load and validate the seed sweep configuration from YAML."""
    resolved = Path(config_path).expanduser().resolve()
    if not resolved.exists():
        raise FileNotFoundError(f"Seed sweep configuration file not found: {resolved}")

    with resolved.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)

    if not isinstance(data, dict):
        raise ValueError(f"Root of {resolved} must be a mapping.")

    sweep_cfg = data.get("seed_sweep")
    if not isinstance(sweep_cfg, dict):
        raise ValueError(f"Configuration must contain a 'seed_sweep' mapping in {resolved}.")

    required_keys = ["runs", "seed", "workers", "csv", "base_simulation_config"]
    missing = [key for key in required_keys if key not in sweep_cfg]
    if missing:
        raise ValueError(f"Missing required seed sweep keys in {resolved}: {missing}")

    try:
        runs = int(sweep_cfg["runs"])
        seed = int(sweep_cfg["seed"])
        workers = int(sweep_cfg["workers"])
    except (TypeError, ValueError) as exc:
        raise ValueError("runs, seed, and workers must be integers.") from exc
    if runs <= 0:
        raise ValueError("Seed sweep must perform at least one run.")

    cfg_dir = resolved.parent
    csv_path = (cfg_dir / Path(sweep_cfg["csv"])).resolve()
    base_sim_path = (cfg_dir / Path(sweep_cfg["base_simulation_config"])).resolve()
    if not base_sim_path.exists():
        raise FileNotFoundError(f"Base simulation configuration not found: {base_sim_path}")

    return SweepConfig(
        runs=runs,
        seed=seed,
        workers=workers,
        csv=csv_path,
        base_simulation_config=base_sim_path,
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run seed sweeps of the Revnet model using a YAML configuration."
    )
    parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to the YAML configuration file describing the sweep.",
    )
    return parser.parse_args(argv)


def simulate_once(base: SimulationConfig, seed: int) -> Tuple[int, Dict[str, float]]:
    """Run a single simulation with `seed` and return its end-of-run metrics."""
    config = replace(base, simulation=replace(base.simulation, random_seed=int(seed)))
    result = simulate(config)
    if not result.snapshots:
        return seed, {name: float("nan") for name in METRICS}
    last = result.snapshots[-1]
    unfulfilled = sum(
        1 for tr in result.traders
        if tr.sale is not None and tr.sale.source is ExecutionSource.UNFULFILLED
    )
    return seed, {
        "pool_token_price": last.pool_token_price,
        "price_ceiling": last.price_ceiling,
        "price_floor": last.price_floor,
        "reserve_balance": last.reserve_balance,
        "token_supply": last.token_supply,
        "unfulfilled_sales": float(unfulfilled),
    }


def summarise(samples: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Return (mean, SEM) along axis 0."""
    mean = samples.mean(axis=0)
    if samples.shape[0] > 1:
        sem = samples.std(axis=0, ddof=1) / np.sqrt(samples.shape[0])
    else:
        sem = np.zeros_like(mean)
    return mean, sem


def run_sweep(base: SimulationConfig, seeds: List[int], workers: int,
              progress_bar: Optional[tqdm] = None) -> pd.DataFrame:
    """Run every seed (in parallel) and return one row of metrics per seed, sorted by seed."""
    results = []
    with ProcessPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(simulate_once, base, seed): seed for seed in seeds}
        for future in as_completed(futures):
            seed, metrics = future.result()
            results.append({"seed": seed, **metrics})
            if progress_bar is not None:
                progress_bar.update(1)
    return pd.DataFrame(results).sort_values("seed").reset_index(drop=True)


def summary_frame(per_seed: pd.DataFrame, scenario: str) -> pd.DataFrame:
    samples = per_seed[list(METRICS)].to_numpy(dtype=float)
    mean, sem = summarise(samples)
    seeds_str = "|".join(str(s) for s in per_seed["seed"])
    return pd.DataFrame({
        "scenario": scenario,
        "metric": list(METRICS),
        "mean": mean,
        "sem": sem,
        "num_runs": len(per_seed),
        "seeds": seeds_str,
    })


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    sweep_cfg = load_sweep_config(args.config)
    scenario_label, base = load_simulation_config(sweep_cfg.base_simulation_config)

    rng = np.random.default_rng(sweep_cfg.seed)
    seeds = [int(s) for s in rng.integers(0, 1_000_000, size=sweep_cfg.runs, dtype=np.int64)]

    print(f"[config] {args.config}")
    print(f"[scenario] {scenario_label}")

    progress = tqdm(total=len(seeds), desc="Running simulations", unit="run")
    try:
        per_seed = run_sweep(base, seeds, sweep_cfg.workers, progress)
    finally:
        progress.close()

    summary = summary_frame(per_seed, scenario_label)
    ensure_parent(sweep_cfg.csv)
    summary.to_csv(sweep_cfg.csv, index=False)
    print(summary[["metric", "mean", "sem"]].to_string(index=False))
    print(f"[RESULT] CSV saved to {sweep_cfg.csv}")


if __name__ == "__main__":
    main()
