"""
Projectiles — straight-line shots handed off by the turrets

Turrets only create projectiles; advancing and removing them is done
here by the simulation loop. There is no hit detection.
"""

import numpy as np
from dataclasses import dataclass
from typing import List


@dataclass
class ProjectileConfig:
    speed: float = 80.0          # Units per second
    max_lifetime_s: float = 3.0
    max_distance: float = 250.0

    def __post_init__(self):
        if self.speed <= 0:
            raise ValueError(f"speed must be positive, got {self.speed}")


@dataclass
class Projectile:
    """A live projectile."""
    projectile_id: int
    position: np.ndarray
    direction: np.ndarray      # Unit vector
    speed: float
    origin: np.ndarray
    time_alive: float = 0.0
    alive: bool = True

    @property
    def velocity(self) -> np.ndarray:
        return self.direction * self.speed

    @property
    def distance_travelled(self) -> float:
        return float(np.linalg.norm(self.position - self.origin))

    def to_dict(self) -> dict:
        return {
            "id": self.projectile_id,
            "position": [round(float(c), 3) for c in self.position],
            "direction": [round(float(c), 4) for c in self.direction],
            "time_alive": round(self.time_alive, 3),
        }


class ProjectileFactory:
    """Builds projectiles from a spawn origin and a unit direction."""

    def __init__(self, config: ProjectileConfig = None):
        self.config = config or ProjectileConfig()
        self._next_id = 0

    def create(self, origin, direction) -> Projectile:
        origin = np.asarray(origin, dtype=float)
        direction = np.asarray(direction, dtype=float)
        proj = Projectile(
            projectile_id=self._next_id,
            position=origin.copy(),
            direction=direction.copy(),
            speed=self.config.speed,
            origin=origin.copy(),
        )
        self._next_id += 1
        return proj


def advance_projectiles(projectiles: List[Projectile], dt: float,
                        config: ProjectileConfig) -> int:
    """
    Move live projectiles and drop expired ones in place.
    Returns how many were removed.
    """
    for p in projectiles:
        p.position += p.velocity * dt
        p.time_alive += dt
        if (p.time_alive > config.max_lifetime_s
                or p.distance_travelled > config.max_distance):
            p.alive = False

    before = len(projectiles)
    projectiles[:] = [p for p in projectiles if p.alive]
    return before - len(projectiles)
