"""
Fire Controller — cooldown timer and fire gate

A shot goes out only when all of these hold on the same tick:
  - a target was selected
  - alignment angle is below epsilon
  - target is inside range (squared distance < range^2)
  - cooldown has run out
  - the muzzle has been resolved
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Any

from .orientation import ALIGN_EPSILON


class HoldReason(str, Enum):
    """Why the turret did not fire this tick. None of these are errors."""
    NO_TARGET = "no_target"
    MISALIGNED = "misaligned"
    OUT_OF_RANGE = "out_of_range"
    COOLDOWN = "cooldown"
    NOT_READY = "not_ready"


@dataclass
class FireDecision:
    cooldown: float
    projectile: Optional[Any] = None
    hold: Optional[HoldReason] = None
    origin: Optional[np.ndarray] = None
    direction: Optional[np.ndarray] = None

    @property
    def fired(self) -> bool:
        return self.projectile is not None


def decay_cooldown(cooldown: float, dt: float) -> float:
    return max(0.0, cooldown - dt)


def fire_gate(angle: Optional[float],
              dist_sq: float,
              range_limit: float,
              cooldown: float,
              epsilon: float = ALIGN_EPSILON) -> Optional[HoldReason]:
    """Return the first reason to hold fire, or None if clear to shoot."""
    if angle is None:
        return HoldReason.NO_TARGET
    if not angle < epsilon:
        return HoldReason.MISALIGNED
    if not dist_sq < range_limit * range_limit:
        return HoldReason.OUT_OF_RANGE
    if cooldown > 0:
        return HoldReason.COOLDOWN
    return None


class FireController:
    """Cooldown bookkeeping and projectile spawn for one turret."""

    def __init__(self, fire_rate: float, range_limit: float,
                 epsilon: float = ALIGN_EPSILON):
        self.fire_rate = fire_rate
        self.range_limit = range_limit
        self.epsilon = epsilon

    @property
    def fire_interval(self) -> float:
        return 1.0 / self.fire_rate

    def step(self, cooldown: float, dt: float,
             angle: Optional[float], dist_sq: float,
             muzzle, target_position: Optional[np.ndarray],
             world, fallback_direction: Optional[np.ndarray] = None) -> FireDecision:
        """
        Decay the cooldown and fire if the gate is open.

        The shot direction points from the muzzle straight at the target's
        current position rather than along the turret's facing.
        """
        cooldown = decay_cooldown(cooldown, max(dt, 0.0))

        hold = fire_gate(angle, dist_sq, self.range_limit, cooldown, self.epsilon)
        if hold is not None:
            return FireDecision(cooldown=cooldown, hold=hold)

        origin = muzzle.world_position()
        if origin is None:
            return FireDecision(cooldown=cooldown, hold=HoldReason.NOT_READY)

        to_target = np.asarray(target_position, dtype=float) - origin
        n = float(np.linalg.norm(to_target))
        if n < 1e-9:
            if fallback_direction is None:
                return FireDecision(cooldown=cooldown, hold=HoldReason.MISALIGNED)
            direction = np.asarray(fallback_direction, dtype=float)
        else:
            direction = to_target / n

        projectile = world.spawn_projectile(origin, direction)
        return FireDecision(cooldown=self.fire_interval, projectile=projectile,
                            origin=origin, direction=direction)
