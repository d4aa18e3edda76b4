"""
Seeded random sources for the daily trading-activity generator.
"""
from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd


class SeededSampler:
    """
    Explicit, injectable random source.

    Every draw comes from a single numpy Generator (PCG64 seeded with `seed`), in
    call order, so the same seed always reproduces the same sequence of trades.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def random(self) -> float:
        """Uniform draw in [0, 1)."""
        return float(self._rng.random())

    def poisson(self, lam: float) -> int:
        if lam < 0:
            raise ValueError(f"Poisson rate must be non-negative, got {lam}")
        return int(self._rng.poisson(lam))

    def normal(self) -> float:
        return float(self._rng.normal())

    def lognormal(self, mu: float = 0.0, sigma: float = 1.5) -> float:
        return float(self._rng.lognormal(mu, sigma))

    def bernoulli(self, p: float) -> bool:
        return self.random() < p


def sampler_trial(sampler: SeededSampler, n: int = 100) -> pd.DataFrame:
    """Table of draws from every sampler, one row per index i (Poisson rate = i)."""
    rows = []
    for i in range(n):
        rows.append({
            "index": i,
            "poisson": sampler.poisson(i),
            "normal": sampler.normal(),
            "lognormal_1_1": sampler.lognormal(1.0, 1.0),
            "lognormal_0_1": sampler.lognormal(0.0, 1.0),
            "lognormal_0_15": sampler.lognormal(0.0, 1.5),
        })
    return pd.DataFrame(rows)
