from config import config_from_dict
from main import parse_args, run_headless


def test_parse_args_defaults():
    args = parse_args([])
    assert args.config is None
    assert not args.headless
    assert args.duration is None
    assert args.log_level == "INFO"


def test_parse_args_headless():
    args = parse_args(["--headless", "-d", "2.5", "--log-level", "DEBUG"])
    assert args.headless
    assert args.duration == 2.5


def test_headless_run_resolves_muzzles_and_fires():
    config = config_from_dict({
        "spawn": {"enabled": False},
        "server": {"enabled": False},
        "turrets": [[0, 0, 0], [10, 0, 0]],
    })

    manager = run_headless(config, duration=0.0)

    assert all(t.ready for t in manager.turrets)
    manager.spawn_hostile([0.0, 20.0, 0.0])
    manager.update(0.02)
    assert manager.turrets[0].shots_fired == 1
