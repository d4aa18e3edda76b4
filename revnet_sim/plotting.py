"""
Figures for a finished run: token price bands and Revnet / pool balances.
"""
from __future__ import annotations

from itertools import count
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt

from .run import SimulationResult

# =============================================================================
# Chart styling
# =============================================================================
TITLE_FONT_SIZE = 15
LABEL_FONT_SIZE = 13
LEGEND_FONT_SIZE = 11

CHART_STYLE = {
    "axes.grid": True,
    "grid.alpha": 0.35,
    "axes.spines.top": False,
}

# Gruvbox palette
GRUV = {
    "light": "#fbf1c7",
    "dark": "#282828",
    "red": "#fb4934",
    "green": "#b8bb26",
    "yellow": "#fabd2f",
    "blue": "#83a598",
    "purple": "#d3869b",
    "aqua": "#8ec07c",
    "orange": "#fe8019",
}


def unused_figure_path(out_dir: Path, name: str, suffix: str = ".png") -> Path:
    """First `out_dir/{name}_{n}{suffix}` not on disk yet; creates `out_dir`."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    candidates = (out_dir / f"{name}_{n}{suffix}" for n in count())
    return next(p for p in candidates if not p.exists())


def plot_price_bands(result: SimulationResult, ax: Optional[plt.Axes] = None) -> plt.Figure:
    """Pool token price against the step-shaped ceiling and the floor."""
    df = result.to_dataframe()
    if ax is None:
        fig, ax = plt.subplots(figsize=(12, 4.5))
    else:
        fig = ax.figure
    ax.axhline(0.0, color=GRUV["dark"], lw=1.0, alpha=0.3)
    ax.plot(df["day"], df["pool_token_price"], color=GRUV["blue"], lw=1.8, label="Pool token price")
    ax.step(df["day"], df["price_ceiling"], where="post", color=GRUV["green"], lw=1.8, label="Price ceiling")
    ax.plot(df["day"], df["price_floor"], color=GRUV["red"], lw=1.8, label="Price floor")
    ax.set_xlabel("Day", fontsize=LABEL_FONT_SIZE)
    ax.set_ylabel("Currency per token", fontsize=LABEL_FONT_SIZE)
    ax.set_title("Revnet Token Price", fontsize=TITLE_FONT_SIZE)
    ax.legend(fontsize=LEGEND_FONT_SIZE, loc="upper left")
    return fig


def plot_balances(result: SimulationResult) -> plt.Figure:
    """Revnet reserve and supply (top), pool reserves (bottom)."""
    df = result.to_dataframe()
    fig, (ax_top, ax_bottom) = plt.subplots(2, 1, figsize=(12, 6.5), sharex=True)

    ax_top.plot(df["day"], df["reserve_balance"], color=GRUV["orange"], lw=1.8, label="Revnet reserve")
    ax_supply = ax_top.twinx()
    ax_supply.plot(df["day"], df["token_supply"], color=GRUV["purple"], lw=1.5, ls="--", label="Token supply")
    ax_supply.plot(df["day"], df["tokens_sent_to_boost"], color=GRUV["aqua"], lw=1.2, ls=":", label="Boost tokens")
    ax_top.set_ylabel("Currency", fontsize=LABEL_FONT_SIZE)
    ax_supply.set_ylabel("Tokens", fontsize=LABEL_FONT_SIZE)
    h1, l1 = ax_top.get_legend_handles_labels()
    h2, l2 = ax_supply.get_legend_handles_labels()
    ax_top.legend(h1 + h2, l1 + l2, fontsize=LEGEND_FONT_SIZE, loc="upper left")

    ax_bottom.plot(df["day"], df["pool_reserve_a"], color=GRUV["yellow"], lw=1.8, label="Pool currency")
    ax_bottom.plot(df["day"], df["pool_reserve_b"], color=GRUV["blue"], lw=1.8, label="Pool tokens")
    deploy_day = result.config.pool.deployment_day
    if deploy_day > 0:
        ax_bottom.axvline(deploy_day, color=GRUV["red"], lw=1.0, ls="--", alpha=0.7, label="Pool deployed")
    ax_bottom.set_xlabel("Day", fontsize=LABEL_FONT_SIZE)
    ax_bottom.set_ylabel("Pool reserves", fontsize=LABEL_FONT_SIZE)
    ax_bottom.legend(fontsize=LEGEND_FONT_SIZE, loc="upper left")
    return fig


def save_figures(result: SimulationResult, out_dir: Path, prefix: str = "revnet") -> List[Path]:
    out_dir = Path(out_dir)
    paths = []
    with plt.rc_context(CHART_STYLE):
        figures = (("price", plot_price_bands(result)), ("balances", plot_balances(result)))
    for name, fig in figures:
        fig.tight_layout()
        path = unused_figure_path(out_dir, f"{prefix}_{name}")
        fig.savefig(path, dpi=150)
        plt.close(fig)
        paths.append(path)
    return paths
