"""
Turret asset loading

The model loads asynchronously (fire-and-forget). Ticks keep running
in the meantime; the turret tracks but cannot fire until the load
callback resolves its muzzle. When it lands:

  1. lift the model so its lowest point rests on the ground
  2. derive the muzzle offset from the model's bounds
  3. resolve the turret's muzzle at that offset, following the
     turret's live orientation

A model that fails to load is replaced by the procedural body so the
turret still becomes ready.
"""

import logging
import os
import numpy as np
from panda3d.core import NodePath, Filename

from turret.model import Turret
from turret.muzzle import OffsetMuzzle, muzzle_offset_from_bounds, resting_lift
from .models import build_turret_body

logger = logging.getLogger("turret_assets")


class TurretAssetLoader:
    """Loads turret models and wires their muzzles into the turret core."""

    def __init__(self, loader, asset_path: str, fallback: bool = True):
        """
        Args:
            loader: Panda3D Loader (ShowBase.loader)
            asset_path: model file (glTF/egg/bam)
            fallback: use the procedural body if the file is missing/broken
        """
        self.loader = loader
        self.asset_path = asset_path
        self.fallback = fallback
        self.pending = 0

    def load(self, turret: Turret, turret_np: NodePath):
        """Start loading the model for *turret* under *turret_np*."""
        if not os.path.isfile(self.asset_path):
            logger.info(f"Asset {self.asset_path} not found, using procedural turret")
            self._on_loaded(turret, turret_np, None)
            return

        self.pending += 1

        def callback(model):
            self.pending -= 1
            self._on_loaded(turret, turret_np, model)

        self.loader.loadModel(
            Filename.fromOsSpecific(self.asset_path),
            callback=callback,
        )

    def _on_loaded(self, turret: Turret, turret_np: NodePath, model):
        if turret.ready:
            return

        if model is None or model.isEmpty():
            if self.asset_path and os.path.isfile(self.asset_path):
                logger.warning(f"Failed to load {self.asset_path} for turret {turret.turret_id}")
            if not self.fallback:
                return
            model = build_turret_body(NodePath("detached"))

        bounds = model.getTightBounds()
        if bounds is None:
            logger.warning(f"Turret {turret.turret_id} model has no geometry, muzzle unresolved")
            return
        lo, hi = bounds
        bounds_min = np.array([lo.x, lo.y, lo.z])
        bounds_max = np.array([hi.x, hi.y, hi.z])

        # Rest on the ground
        model.setZ(model.getZ() + resting_lift(bounds_min))
        model.reparentTo(turret_np)

        offset = muzzle_offset_from_bounds(bounds_min, bounds_max)
        turret.resolve_muzzle(OffsetMuzzle(turret, offset))
