from pathlib import Path

import pytest
import yaml

from revnet_sim.config import SimulationConfig, load_simulation_config

SHIPPED = Path(__file__).resolve().parents[1] / "revnet_config.yml"


def _write(tmp_path: Path, data) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump(data))
    return path


def test_shipped_config_loads_with_defaults():
    label, config = load_simulation_config(SHIPPED)

    assert label == "baseline"
    assert config == SimulationConfig()


def test_round_trip_through_yaml(tmp_path):
    data = SimulationConfig().to_dict()
    data["scenario"] = "slow_ceiling"
    data["revnet"]["ceiling_step_frequency_days"] = 7

    label, config = load_simulation_config(_write(tmp_path, data))

    assert label == "slow_ceiling"
    assert config.revnet.ceiling_step_frequency_days == 7
    assert isinstance(config.revnet.ceiling_step_frequency_days, int)


def test_missing_and_unexpected_keys_are_listed(tmp_path):
    data = SimulationConfig().to_dict()
    del data["pool"]["fee_rate"]
    with pytest.raises(ValueError, match="fee_rate"):
        load_simulation_config(_write(tmp_path, data))

    data = SimulationConfig().to_dict()
    data["simulation"]["demand_trend"] = 0.6
    with pytest.raises(ValueError, match="demand_trend"):
        load_simulation_config(_write(tmp_path, data))

    data = SimulationConfig().to_dict()
    del data["revnet"]
    with pytest.raises(ValueError, match="revnet"):
        load_simulation_config(_write(tmp_path, data))


@pytest.mark.parametrize(
    "section, key, value",
    [
        ("pool", "fee_rate", 1.0),
        ("pool", "fee_rate", -0.1),
        ("pool", "initial_reserve_a", 0.0),
        ("revnet", "ceiling_step_frequency_days", 0),
        ("revnet", "floor_tax_intensity", 1.5),
        ("simulation", "sale_probability", 2.0),
        ("simulation", "total_days", -1),
    ],
)
def test_out_of_range_values_are_rejected(tmp_path, section, key, value):
    data = SimulationConfig().to_dict()
    data[section][key] = value
    with pytest.raises(ValueError, match=key):
        load_simulation_config(_write(tmp_path, data))


def test_non_integer_days_are_rejected():
    data = SimulationConfig().to_dict()
    data["simulation"]["total_days"] = 10.5
    with pytest.raises(ValueError, match="total_days"):
        SimulationConfig.from_dict(data)


def test_missing_file_and_bad_root(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_simulation_config(tmp_path / "nope.yml")
    with pytest.raises(ValueError):
        load_simulation_config(_write(tmp_path, [1, 2, 3]))
