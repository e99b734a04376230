from .model import Turret, TurretConfig, TurretState, TickResult
from .targeting import select_nearest, distance_sq
from .orientation import ALIGN_EPSILON, FORWARD, UP, orient_toward
from .fire_control import FireController, FireDecision, HoldReason
from .muzzle import MuzzleMount, OffsetMuzzle, muzzle_offset_from_bounds
