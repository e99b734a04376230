"""
World context — the shared state every turret sees during a tick

Owned by the simulation loop and passed into each turret update:
  hostiles     — read during target selection, never mutated by turrets
  projectiles  — turrets append at most one projectile per tick
"""

import numpy as np
from typing import List, Sequence, Any

from .projectiles import ProjectileFactory


class WorldContext:

    def __init__(self, hostiles: Sequence[Any] = None,
                 projectiles: List[Any] = None,
                 projectile_factory=None):
        self.hostiles = hostiles if hostiles is not None else []
        self.projectiles = projectiles if projectiles is not None else []
        self.projectile_factory = projectile_factory or ProjectileFactory()

    def spawn_projectile(self, origin: np.ndarray, direction: np.ndarray):
        """Create a projectile through the factory and hand it to the live list."""
        projectile = self.projectile_factory.create(origin, direction)
        self.projectiles.append(projectile)
        return projectile
