"""
Hostile Spawner — ground hostiles converging on the defended point

  - Spawn on a ring around the defended point at a fixed interval
  - Walk in a straight line toward the point at constant speed
  - Removed on reaching the point (breach) or when their lifetime runs out

Turrets only ever read `position` from a hostile.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Optional, List

logger = logging.getLogger("turret_world")


@dataclass
class SpawnConfig:
    """Hostile wave parameters."""
    interval_s: float = 2.0                  # Seconds between spawns
    ring_radius: float = 60.0                # Spawn distance from the defended point
    speed_range: tuple = (3.0, 6.0)          # Units per second (min, max)
    max_alive: int = 25                      # Spawner pauses above this
    lifetime_s: float = 120.0                # Hostile despawns after this
    breach_radius: float = 1.5               # Reaching this close counts as a breach
    enabled: bool = True

    def __post_init__(self):
        if self.interval_s <= 0:
            raise ValueError(f"interval_s must be positive, got {self.interval_s}")
        lo, hi = self.speed_range
        if lo < 0 or hi < lo:
            raise ValueError(f"bad speed_range {self.speed_range}")
        self.speed_range = (float(lo), float(hi))


@dataclass
class Hostile:
    """Active hostile instance."""
    hostile_id: int
    position: np.ndarray       # [x, y, z]
    velocity: np.ndarray       # Constant velocity vector
    alive: bool = True
    time_alive: float = 0.0

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    def to_dict(self) -> dict:
        return {
            "id": self.hostile_id,
            "position": [round(float(c), 3) for c in self.position],
            "velocity": [round(float(c), 3) for c in self.velocity],
            "speed": round(self.speed, 2),
            "time_alive": round(self.time_alive, 2),
        }


class HostileSpawner:
    """Spawns and moves hostiles; owns the live hostile list."""

    def __init__(self, config: SpawnConfig = None,
                 defended_point=(0.0, 0.0, 0.0),
                 seed: Optional[int] = None):
        self.config = config or SpawnConfig()
        self.defended_point = np.asarray(defended_point, dtype=float)
        self.rng = np.random.default_rng(seed)
        self.hostiles: List[Hostile] = []
        self._next_id = 0
        self._spawn_timer = 0.0

        # Statistics
        self.total_spawned = 0
        self.total_breached = 0
        self.total_expired = 0

    def spawn(self, position, velocity=None) -> Hostile:
        """Spawn a hostile at an explicit position (default: standing still)."""
        pos = np.asarray(position, dtype=float).copy()
        vel = np.zeros(3) if velocity is None else np.asarray(velocity, dtype=float).copy()
        if pos.shape != (3,) or vel.shape != (3,):
            raise ValueError("position and velocity must be 3-vectors")

        hostile = Hostile(hostile_id=self._next_id, position=pos, velocity=vel)
        self._next_id += 1
        self.total_spawned += 1
        self.hostiles.append(hostile)
        logger.debug(f"Hostile {hostile.hostile_id} spawned at {pos.tolist()}")
        return hostile

    def spawn_random(self) -> Hostile:
        """Spawn on the ring at a random bearing, heading for the defended point."""
        bearing = self.rng.uniform(0, 2 * np.pi)
        offset = self.config.ring_radius * np.array([np.sin(bearing), np.cos(bearing), 0.0])
        spawn_pos = self.defended_point + offset

        speed = self.rng.uniform(*self.config.speed_range)
        flight_dir = -offset / np.linalg.norm(offset)
        return self.spawn(spawn_pos, flight_dir * speed)

    def update(self, dt: float) -> List[dict]:
        """Advance hostiles and the wave timer. Returns events."""
        events = []

        if self.config.enabled:
            self._spawn_timer += dt
            while self._spawn_timer >= self.config.interval_s:
                self._spawn_timer -= self.config.interval_s
                if len(self.hostiles) >= self.config.max_alive:
                    continue
                h = self.spawn_random()
                events.append({"type": "hostile_spawned", **h.to_dict()})

        breach_sq = self.config.breach_radius ** 2
        for h in self.hostiles:
            h.position += h.velocity * dt
            h.time_alive += dt

            d = h.position - self.defended_point
            d[2] = 0.0
            if float(np.dot(d, d)) <= breach_sq and h.speed > 0:
                h.alive = False
                self.total_breached += 1
                events.append({"type": "hostile_breached", "id": h.hostile_id})
            elif h.time_alive > self.config.lifetime_s:
                h.alive = False
                self.total_expired += 1
                events.append({"type": "hostile_expired", "id": h.hostile_id})

        # Rebuild in place so holders of the list see the removals
        self.hostiles[:] = [h for h in self.hostiles if h.alive]
        return events

    def remove(self, hostile_id: int) -> bool:
        for h in self.hostiles:
            if h.hostile_id == hostile_id:
                h.alive = False
                self.hostiles.remove(h)
                return True
        return False

    def clear(self):
        for h in self.hostiles:
            h.alive = False
        self.hostiles.clear()
