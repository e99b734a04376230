"""
Defense Manager — owns the world and drives every turret each frame.

Orchestrates:
  - HostileSpawner (world/hostiles.py)
  - Turret pipeline (turret/model.py)
  - Projectile advance/cleanup (world/projectiles.py)

Tick order:
  spawner → turrets (placement order) → projectiles → events

The API threads read status while the frame loop ticks, so update()
and status snapshots share one (re-entrant) lock.
"""

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional, Callable, Dict

from config import SimConfig
from turret.model import Turret, TurretState
from world.context import WorldContext
from world.hostiles import HostileSpawner, Hostile
from world.projectiles import ProjectileFactory, advance_projectiles

logger = logging.getLogger("turret_sim")


@dataclass
class SimStats:
    ticks: int = 0
    sim_time: float = 0.0
    shots_fired: int = 0
    projectiles_expired: int = 0


class DefenseManager:
    """
    Main simulation controller.
    Manages hostiles, turrets, projectiles and event dispatch.
    """

    def __init__(self, config: SimConfig = None):
        self.config = config or SimConfig()

        self.spawner = HostileSpawner(
            self.config.spawn,
            defended_point=self.config.defended_point,
            seed=self.config.seed,
        )
        self.world = WorldContext(
            hostiles=self.spawner.hostiles,
            projectiles=[],
            projectile_factory=ProjectileFactory(self.config.projectile),
        )

        self.turrets: List[Turret] = []
        self.paused = False
        self.stats = SimStats()

        self._lock = threading.RLock()

        # Event system
        self._event_listeners: List[Callable] = []
        # Collects events only while update() runs
        self._pending_events: Optional[List[dict]] = None

        for pos in self.config.turrets:
            self.add_turret(pos)

    # ---- Event system ----

    def add_event_listener(self, callback: Callable):
        self._event_listeners.append(callback)

    def _emit_event(self, event: dict):
        # Callers hold the lock so listeners never run concurrently
        if self._pending_events is not None:
            self._pending_events.append(event)
        for listener in self._event_listeners:
            try:
                listener(event)
            except Exception:
                logger.warning(f"Event listener failed on {event.get('type')}", exc_info=True)

    def _turret_event_handler(self, turret_id: int) -> Callable:
        def handler(event_type, data):
            self._emit_event({"type": event_type, "turret_id": turret_id, **data})
        return handler

    # ---- Placement ----

    def add_turret(self, position, heading_rad: float = 0.0) -> Turret:
        """Place a new turret at a fixed world position."""
        with self._lock:
            turret = Turret(
                position,
                config=self.config.turret,
                turret_id=len(self.turrets),
                heading_rad=heading_rad,
            )
            turret.set_event_callback(self._turret_event_handler(turret.turret_id))
            self.turrets.append(turret)
            self._emit_event({
                "type": "turret_placed",
                "turret_id": turret.turret_id,
                "position": turret.position.tolist(),
            })

        logger.info(f"Turret {turret.turret_id} placed at {turret.position.tolist()}")
        return turret

    def get_turret(self, turret_id: int) -> Optional[Turret]:
        if 0 <= turret_id < len(self.turrets):
            return self.turrets[turret_id]
        return None

    # ---- Hostiles ----

    def spawn_hostile(self, position, velocity=None) -> Hostile:
        with self._lock:
            hostile = self.spawner.spawn(position, velocity)
            self._emit_event({"type": "hostile_spawned", **hostile.to_dict()})
        return hostile

    def spawn_random_hostile(self) -> Hostile:
        """Spawn one hostile on the wave ring, outside the wave timer."""
        with self._lock:
            hostile = self.spawner.spawn_random()
            self._emit_event({"type": "hostile_spawned", **hostile.to_dict()})
        return hostile

    # ---- Flow control ----

    def pause(self):
        with self._lock:
            self.paused = True

    def resume(self):
        with self._lock:
            self.paused = False

    # ---- Main update ----

    def update(self, dt: float) -> List[dict]:
        """
        Main simulation step. Called every frame.
        Returns list of events raised during the step.
        """
        events = []
        dt = min(max(dt, 0.0), self.config.max_dt)

        with self._lock:
            if self.paused:
                return events
            self._pending_events = events
            try:
                # Hostiles move first so turrets aim at this frame's positions
                for event in self.spawner.update(dt):
                    self._emit_event(event)

                for turret in self.turrets:
                    result = turret.update(dt, self.world)
                    if result.fired:
                        self.stats.shots_fired += 1

                self.stats.projectiles_expired += advance_projectiles(
                    self.world.projectiles, dt, self.config.projectile
                )

                self.stats.ticks += 1
                self.stats.sim_time += dt
            finally:
                self._pending_events = None

        return events

    # ---- API helpers ----

    def get_turret_statuses(self) -> List[dict]:
        with self._lock:
            return [t.get_status() for t in self.turrets]

    def get_hostiles(self) -> List[dict]:
        with self._lock:
            return [h.to_dict() for h in self.world.hostiles]

    def get_projectiles(self) -> List[dict]:
        with self._lock:
            return [p.to_dict() for p in self.world.projectiles]

    def get_full_status(self) -> dict:
        """Complete simulation status for API."""
        with self._lock:
            states: Dict[str, int] = {s.value: 0 for s in TurretState}
            for t in self.turrets:
                states[t.state.value] += 1

            return {
                "paused": self.paused,
                "sim_time": round(self.stats.sim_time, 3),
                "ticks": self.stats.ticks,
                "turrets": len(self.turrets),
                "turrets_ready": sum(1 for t in self.turrets if t.ready),
                "turret_states": states,
                "hostiles": len(self.world.hostiles),
                "projectiles": len(self.world.projectiles),
                "stats": {
                    "shots_fired": self.stats.shots_fired,
                    "projectiles_expired": self.stats.projectiles_expired,
                    "hostiles_spawned": self.spawner.total_spawned,
                    "hostiles_breached": self.spawner.total_breached,
                    "hostiles_expired": self.spawner.total_expired,
                },
            }
