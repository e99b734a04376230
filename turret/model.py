"""
Turret Model — stationary autonomous defense turret

Per-tick pipeline (re-run from scratch every frame):
  1. Target Selector      — nearest hostile strictly inside range
  2. Orientation Controller — yaw toward the target bearing, rate-limited
  3. Fire Controller      — cooldown + alignment/range/muzzle gate

The only state carried between ticks is facing, cooldown and the
write-once muzzle reference. There is no locked target: a closer
hostile takes over on the very next tick.

Coordinate system:
  ENU, Z up, +Y is the canonical forward axis.
  Heading: 0 = +Y, increases counterclockwise (Panda3D H).
"""

import logging
import math
import numpy as np
from dataclasses import dataclass
from typing import Optional, Callable, Any
from enum import Enum

from .targeting import select_nearest
from .orientation import (
    ALIGN_EPSILON, orient_toward, forward_vector,
    quat_identity, quat_heading, quat_from_heading,
)
from .fire_control import FireController, FireDecision, HoldReason
from .muzzle import MuzzleMount

logger = logging.getLogger("turret_core")


class TurretState(Enum):
    IDLE = "idle"           # No hostile in range
    TRACKING = "tracking"   # Target selected, still turning
    ALIGNED = "aligned"     # Facing the target within epsilon


@dataclass
class TurretConfig:
    """Turret tuning constants."""
    fire_rate: float = 2.0          # Shots per second
    range: float = 5000.0           # Firing radius (compared squared)
    turn_speed: float = 2.0         # Radians per second
    align_epsilon: float = ALIGN_EPSILON  # Radians

    def __post_init__(self):
        if self.fire_rate <= 0:
            raise ValueError(f"fire_rate must be positive, got {self.fire_rate}")
        if self.range < 0:
            raise ValueError(f"range must be non-negative, got {self.range}")
        if self.turn_speed < 0:
            raise ValueError(f"turn_speed must be non-negative, got {self.turn_speed}")
        if self.align_epsilon <= 0:
            raise ValueError(f"align_epsilon must be positive, got {self.align_epsilon}")


@dataclass
class TickResult:
    """Outcome of one turret update."""
    state: TurretState
    target: Optional[Any] = None
    dist_sq: float = float("inf")
    angle: Optional[float] = None
    projectile: Optional[Any] = None
    hold: Optional[HoldReason] = None

    @property
    def fired(self) -> bool:
        return self.projectile is not None


class Turret:
    """
    Autonomous turret: picks, turns toward and shoots at the nearest
    hostile in range.
    """

    def __init__(self, position, config: TurretConfig = None,
                 turret_id: int = 0, heading_rad: float = 0.0):
        self.config = config or TurretConfig()
        self.turret_id = turret_id

        # Fixed world placement
        self.position = np.asarray(position, dtype=float).copy()

        # Facing (yaw-only unit quaternion)
        self.orientation = quat_identity() if heading_rad == 0.0 \
                           else quat_from_heading(heading_rad)

        # Seconds until the next shot is allowed
        self.cooldown = 0.0

        self.state = TurretState.IDLE
        self.muzzle = MuzzleMount()
        self.fire_control = FireController(
            self.config.fire_rate,
            self.config.range,
            self.config.align_epsilon,
        )

        # Last tick, for status read-out only
        self.last_angle: Optional[float] = None
        self.last_hold: Optional[HoldReason] = None
        self.current_target = None

        # Statistics
        self.shots_fired = 0

        # Callbacks
        self._on_event_callback: Optional[Callable] = None

    def set_event_callback(self, callback: Callable):
        """Set callback for events. callback(event_type, data)"""
        self._on_event_callback = callback

    def _emit_event(self, event_type: str, data: dict = None):
        if self._on_event_callback:
            self._on_event_callback(event_type, data or {})

    @property
    def heading(self) -> float:
        """Facing heading in radians."""
        return quat_heading(self.orientation)

    @property
    def ready(self) -> bool:
        """True once the muzzle has been resolved."""
        return self.muzzle.ready

    def resolve_muzzle(self, handle) -> bool:
        """Attach the muzzle handle once the model has loaded."""
        if not self.muzzle.resolve(handle):
            return False
        logger.info(f"Turret {self.turret_id} muzzle resolved, ready to fire")
        self._emit_event("muzzle_resolved", {})
        return True

    def update(self, dt: float, world) -> TickResult:
        """
        Run one select → orient → fire cycle.

        *world* supplies the shared hostile collection (read only) and
        the projectile factory/collection (at most one append per tick).
        """
        # ---- Select ----
        target, dist_sq = select_nearest(
            self.position, self.config.range, world.hostiles
        )
        target_pos = None if target is None else np.asarray(target.position, dtype=float)

        # ---- Orient ----
        self.orientation, angle = orient_toward(
            self.orientation,
            self.position,
            target_pos,
            self.config.turn_speed,
            dt,
            self.config.align_epsilon,
        )

        # ---- Fire ----
        decision: FireDecision = self.fire_control.step(
            self.cooldown, dt, angle, dist_sq,
            self.muzzle, target_pos, world,
            fallback_direction=forward_vector(self.orientation),
        )
        self.cooldown = decision.cooldown

        # ---- State machine ----
        if angle is None:
            new_state = TurretState.IDLE
        elif angle > self.config.align_epsilon:
            new_state = TurretState.TRACKING
        else:
            new_state = TurretState.ALIGNED

        if new_state != self.state:
            logger.debug(f"Turret {self.turret_id}: {self.state.value} -> {new_state.value}")
            self._emit_event("turret_state", {
                "from": self.state.value,
                "to": new_state.value,
            })
            self.state = new_state

        self.last_angle = angle
        self.last_hold = decision.hold
        self.current_target = target

        if decision.fired:
            self.shots_fired += 1
            self._emit_event("shot_fired", {
                "origin": decision.origin.tolist(),
                "direction": decision.direction.tolist(),
                "total_fired": self.shots_fired,
            })

        return TickResult(
            state=self.state,
            target=target,
            dist_sq=dist_sq,
            angle=angle,
            projectile=decision.projectile,
            hold=decision.hold,
        )

    def get_status(self) -> dict:
        """Get current turret status for API/HUD."""
        target_id = getattr(self.current_target, "hostile_id", None)
        return {
            "id": self.turret_id,
            "state": self.state.value,
            "position": self.position.tolist(),
            "heading_deg": round(math.degrees(self.heading), 2),
            "orientation": [round(float(c), 6) for c in self.orientation],
            "cooldown": round(self.cooldown, 3),
            "ready": self.ready,
            "target_id": target_id,
            "alignment_deg": None if self.last_angle is None
                             else round(math.degrees(self.last_angle), 3),
            "hold": None if self.last_hold is None else self.last_hold.value,
            "shots_fired": self.shots_fired,
            "fire_rate": self.config.fire_rate,
            "range": self.config.range,
            "turn_speed": self.config.turn_speed,
        }
