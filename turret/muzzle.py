"""
Muzzle point — projectile spawn origin resolved after the model loads

The turret model arrives asynchronously, so the muzzle starts out
unresolved. Until it is set the turret keeps tracking but cannot fire.
Resolution happens at most once; later attempts are ignored.
"""

import logging
import numpy as np
from typing import Optional, Tuple

from .orientation import quat_rotate

logger = logging.getLogger("turret_core")

# Muzzle sits this far in front of the model's forward-most point
MUZZLE_CLEARANCE = 0.2


def resting_lift(bounds_min: np.ndarray) -> float:
    """Vertical shift that puts the model's lowest point on z = 0."""
    return -float(bounds_min[2])


def muzzle_offset_from_bounds(bounds_min: np.ndarray,
                              bounds_max: np.ndarray,
                              clearance: float = MUZZLE_CLEARANCE) -> np.ndarray:
    """
    Muzzle position relative to the turret root, derived from the model's
    bounding box (model space, +Y forward, +Z up).

    Laterally centred on the pivot, half the model's height above the
    ground once it has been lifted to rest on z = 0, and just past the
    model's maximum forward depth.
    """
    bounds_min = np.asarray(bounds_min, dtype=float)
    bounds_max = np.asarray(bounds_max, dtype=float)
    z_mid = 0.5 * (bounds_max[2] + bounds_min[2]) + resting_lift(bounds_min)
    y_front = bounds_max[1] + clearance
    return np.array([0.0, y_front, z_mid])


class OffsetMuzzle:
    """
    Muzzle handle fixed to the turret body at a local offset.

    World position follows the turret's live orientation, so the spawn
    point swings with the turret between frames.
    """

    def __init__(self, turret, local_offset: np.ndarray):
        self._turret = turret
        self.local_offset = np.asarray(local_offset, dtype=float)

    def world_position(self) -> np.ndarray:
        return self._turret.position + quat_rotate(
            self._turret.orientation, self.local_offset
        )


class MuzzleMount:
    """Write-once holder for the muzzle handle."""

    def __init__(self):
        self._handle = None

    @property
    def ready(self) -> bool:
        return self._handle is not None

    @property
    def handle(self):
        return self._handle

    def resolve(self, handle) -> bool:
        """
        Attach the muzzle handle. Returns False (and keeps the first
        handle) if one was already attached.
        """
        if handle is None:
            return False
        if self._handle is not None:
            logger.warning("Muzzle already resolved, ignoring second handle")
            return False
        self._handle = handle
        return True

    def world_position(self) -> Optional[np.ndarray]:
        """Current muzzle world position, or None while still loading."""
        if self._handle is None:
            return None
        return np.asarray(self._handle.world_position(), dtype=float)
