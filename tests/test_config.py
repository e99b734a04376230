import json

import pytest

from config import SimConfig, config_from_dict, load_config


def test_defaults_without_file():
    config = load_config()
    assert isinstance(config, SimConfig)
    assert config.turret.fire_rate == 2.0
    assert config.turrets == [[0.0, 0.0, 0.0]]


def test_partial_overrides(tmp_path):
    path = tmp_path / "sim.json"
    path.write_text(json.dumps({
        "turret": {"range": 40},
        "spawn": {"interval_s": 1.5, "speed_range": [1, 2]},
        "turrets": [[0, 0, 0], [12, -4, 0]],
        "seed": 7,
    }))

    config = load_config(str(path))

    assert config.turret.range == 40
    assert config.turret.fire_rate == 2.0
    assert config.spawn.speed_range == (1.0, 2.0)
    assert len(config.turrets) == 2
    assert config.seed == 7


def test_round_trips_through_dict():
    config = config_from_dict({"server": {"api_port": 9000}})
    assert config.to_dict()["server"]["api_port"] == 9000


@pytest.mark.parametrize("data", [
    {"bogus": 1},
    {"turret": {"fire_rte": 3}},
    {"turret": {"fire_rate": 0}},
    {"max_dt": 0},
    {"max_dt": -0.05},
])
def test_bad_config_rejected(data):
    with pytest.raises(ValueError):
        config_from_dict(data)


def test_top_level_must_be_object(tmp_path):
    path = tmp_path / "sim.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(ValueError):
        load_config(str(path))
