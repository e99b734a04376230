"""
Simulation configuration

Defaults live in the dataclasses next to the code they tune
(TurretConfig, SpawnConfig, ProjectileConfig); SimConfig gathers them
and a JSON file can override any field:

    {
      "max_dt": 0.05,
      "turret": {"fire_rate": 3, "range": 40},
      "spawn": {"interval_s": 1.5},
      "turrets": [[0, 0, 0], [12, -4, 0]]
    }
"""

import json
import logging
from dataclasses import dataclass, field, fields, asdict
from typing import List, Optional

from turret.model import TurretConfig
from world.hostiles import SpawnConfig
from world.projectiles import ProjectileConfig

logger = logging.getLogger("turret_sim")


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    api_port: int = 8420
    ws_port: int = 8421
    enabled: bool = True


@dataclass
class SimConfig:
    turret: TurretConfig = field(default_factory=TurretConfig)
    spawn: SpawnConfig = field(default_factory=SpawnConfig)
    projectile: ProjectileConfig = field(default_factory=ProjectileConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    # Turret placements (world positions)
    turrets: List[List[float]] = field(default_factory=lambda: [[0.0, 0.0, 0.0]])
    defended_point: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])

    max_dt: float = 0.05                  # Frame delta cap (seconds)
    seed: Optional[int] = None
    asset_path: str = "assets/turret/scene.gltf"

    def __post_init__(self):
        if self.max_dt <= 0:
            raise ValueError(f"max_dt must be positive, got {self.max_dt}")

    def to_dict(self) -> dict:
        return asdict(self)


_SECTIONS = {
    "turret": TurretConfig,
    "spawn": SpawnConfig,
    "projectile": ProjectileConfig,
    "server": ServerConfig,
}


def _build_section(cls, overrides: dict):
    known = {f.name for f in fields(cls)}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")
    return cls(**overrides)


def config_from_dict(data: dict) -> SimConfig:
    """Build a SimConfig from (possibly partial) overrides."""
    known = {f.name for f in fields(SimConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown config keys: {sorted(unknown)}")

    kwargs = {}
    for key, value in data.items():
        if key in _SECTIONS:
            kwargs[key] = _build_section(_SECTIONS[key], value or {})
        else:
            kwargs[key] = value
    return SimConfig(**kwargs)


def load_config(path: Optional[str] = None) -> SimConfig:
    """Load configuration from a JSON file, or defaults if no path given."""
    if path is None:
        return SimConfig()
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a JSON object")
    logger.info(f"Loaded config from {path}")
    return config_from_dict(data)
