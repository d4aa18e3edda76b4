"""
Configuration records for a Revnet simulation run and their YAML loader.
"""
from __future__ import annotations

from dataclasses import Field, asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

import yaml

SECTIONS = ("revnet", "pool", "simulation")


@dataclass(frozen=True)
class RevnetParams:
    ceiling_step_percentage: float = 0.02
    ceiling_step_frequency_days: int = 1
    floor_tax_intensity: float = 0.33
    premint_amount: float = 0.0
    boost_percent: float = 0.1
    boost_duration_days: int = 100


@dataclass(frozen=True)
class PoolParams:
    initial_reserve_a: float = 10.0
    initial_reserve_b: float = 10.0
    deployment_day: int = 0
    fee_rate: float = 0.0


@dataclass(frozen=True)
class SimulationParams:
    total_days: int = 100
    random_seed: int = 7
    daily_purchase_mean_count: float = 5.0
    purchase_size_log_mean: float = 0.0
    purchase_size_log_sigma: float = 1.5
    token_liquidity_feed_ratio: float = 0.1
    currency_liquidity_feed_ratio: float = 0.1
    sale_probability: float = 0.05
    minimum_holding_days: int = 10


def _cast(f: Field, value: Any, section: str) -> Any:
    # annotations are strings under `from __future__ import annotations`
    try:
        if f.type == "int":
            as_float = float(value)
            if not as_float.is_integer():
                raise ValueError
            return int(as_float)
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"'{section}.{f.name}' must be a {f.type}, got {value!r}") from exc


def _check_fraction(name: str, value: float) -> None:
    if not (0.0 <= value <= 1.0):
        raise ValueError(f"{name} must be within [0, 1], got {value}")


def _check_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


@dataclass(frozen=True)
class SimulationConfig:
    revnet: RevnetParams = field(default_factory=RevnetParams)
    pool: PoolParams = field(default_factory=PoolParams)
    simulation: SimulationParams = field(default_factory=SimulationParams)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationConfig":
        """Build a config from nested mappings; every section and key must be present."""
        missing_sections = [name for name in SECTIONS if name not in data]
        if missing_sections:
            raise ValueError(f"Missing configuration sections: {missing_sections}")

        built = {}
        for name, record in (("revnet", RevnetParams), ("pool", PoolParams), ("simulation", SimulationParams)):
            block = data[name]
            if not isinstance(block, Mapping):
                raise ValueError(f"Section '{name}' must be a mapping.")
            expected = [f.name for f in fields(record)]
            missing = [key for key in expected if key not in block]
            if missing:
                raise ValueError(f"Missing keys in '{name}' section: {missing}")
            extra = sorted(set(block) - set(expected))
            if extra:
                raise ValueError(f"Unexpected keys in '{name}' section: {extra}")
            built[name] = record(**{f.name: _cast(f, block[f.name], name) for f in fields(record)})
        return cls(**built)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return asdict(self)

    def validate(self) -> "SimulationConfig":
        """Range checks; raise ValueError on the first offending field."""
        r, p, s = self.revnet, self.pool, self.simulation

        _check_fraction("revnet.ceiling_step_percentage", r.ceiling_step_percentage)
        if r.ceiling_step_percentage >= 1.0:
            raise ValueError("revnet.ceiling_step_percentage must be below 1")
        if r.ceiling_step_frequency_days < 1:
            raise ValueError(
                f"revnet.ceiling_step_frequency_days must be a positive integer, got {r.ceiling_step_frequency_days}"
            )
        _check_fraction("revnet.floor_tax_intensity", r.floor_tax_intensity)
        _check_non_negative("revnet.premint_amount", r.premint_amount)
        _check_fraction("revnet.boost_percent", r.boost_percent)
        _check_non_negative("revnet.boost_duration_days", r.boost_duration_days)

        if not (0.0 <= p.fee_rate < 1.0):
            raise ValueError(f"pool.fee_rate must be within [0, 1), got {p.fee_rate}")
        if p.initial_reserve_a <= 0 or p.initial_reserve_b <= 0:
            raise ValueError("pool.initial_reserve_a and pool.initial_reserve_b must be positive")
        _check_non_negative("pool.deployment_day", p.deployment_day)

        _check_non_negative("simulation.total_days", s.total_days)
        _check_non_negative("simulation.daily_purchase_mean_count", s.daily_purchase_mean_count)
        _check_non_negative("simulation.purchase_size_log_sigma", s.purchase_size_log_sigma)
        _check_fraction("simulation.token_liquidity_feed_ratio", s.token_liquidity_feed_ratio)
        _check_fraction("simulation.currency_liquidity_feed_ratio", s.currency_liquidity_feed_ratio)
        _check_fraction("simulation.sale_probability", s.sale_probability)
        _check_non_negative("simulation.minimum_holding_days", s.minimum_holding_days)
        return self


# =============================================================================
# Configuration loading
# =============================================================================

def load_simulation_config(config_path: Path) -> Tuple[str, SimulationConfig]:
    """
    Load and validate a simulation configuration from a YAML file.

    The file must contain `revnet`, `pool` and `simulation` mappings with every
    parameter of the corresponding record. An optional `scenario` key labels
    outputs; it defaults to "baseline".
    """
    config_path = Path(config_path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Missing configuration file: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        config_data = yaml.safe_load(handle)

    if not isinstance(config_data, dict):
        raise ValueError(f"Configuration root must be a mapping: {config_path}")

    extra_sections = sorted(set(config_data) - set(SECTIONS) - {"scenario"})
    if extra_sections:
        raise ValueError(f"Unexpected top-level keys in {config_path}: {extra_sections}")

    scenario_label = str(config_data.get("scenario") or "baseline")
    config = SimulationConfig.from_dict(config_data).validate()
    return scenario_label, config
