"""
Orientation Controller — rate-limited yaw toward a target bearing

Facing is stored as a unit quaternion [w, x, y, z]. The turret only ever
rotates about the vertical axis, so the quaternion never picks up a roll
or pitch component.

Coordinate system (ENU, same as Panda3D):
  X = East, Y = North (canonical forward), Z = Up
"""

import math
import numpy as np
from typing import Optional, Tuple

FORWARD = np.array([0.0, 1.0, 0.0])
UP = np.array([0.0, 0.0, 1.0])

# Below this the alignment angle counts as zero
ALIGN_EPSILON = 0.001


# =========================================================
# Quaternion helpers
# =========================================================

def quat_identity() -> np.ndarray:
    return np.array([1.0, 0.0, 0.0, 0.0])


def quat_from_axis_angle(axis: np.ndarray, angle: float) -> np.ndarray:
    """Quaternion for a rotation of *angle* radians about unit *axis*."""
    half = 0.5 * angle
    s = math.sin(half)
    return np.array([math.cos(half), axis[0] * s, axis[1] * s, axis[2] * s])


def quat_from_heading(heading_rad: float) -> np.ndarray:
    """Yaw-only quaternion, counterclockwise about +Z (Panda3D H)."""
    return quat_from_axis_angle(UP, heading_rad)


def quat_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Hamilton product a * b (apply b first, then a)."""
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array([
        aw * bw - ax * bx - ay * by - az * bz,
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
    ])


def quat_normalize(q: np.ndarray) -> np.ndarray:
    n = float(np.linalg.norm(q))
    if n < 1e-12:
        return quat_identity()
    return q / n


def quat_rotate(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Rotate vector *v* by unit quaternion *q*."""
    w = q[0]
    u = q[1:]
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


def quat_heading(q: np.ndarray) -> float:
    """Heading of the forward axis in radians (0 = +Y, CCW positive)."""
    fwd = quat_rotate(q, FORWARD)
    return math.atan2(-fwd[0], fwd[1])


# =========================================================
# Bearing / alignment
# =========================================================

def horizontal_bearing(origin: np.ndarray, target: np.ndarray) -> Optional[np.ndarray]:
    """
    Unit direction from origin to target in the XY plane.
    Returns None when the target sits directly above/below the origin.
    """
    d = np.asarray(target, dtype=float) - np.asarray(origin, dtype=float)
    d[2] = 0.0
    n = float(np.linalg.norm(d))
    if n < 1e-9:
        return None
    return d / n


def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """Angle between two unit vectors, clamped against rounding."""
    return float(np.arccos(np.clip(np.dot(a, b), -1.0, 1.0)))


def forward_vector(q: np.ndarray) -> np.ndarray:
    return quat_rotate(q, FORWARD)


def orient_toward(orientation: np.ndarray,
                  position: np.ndarray,
                  target_position: Optional[np.ndarray],
                  turn_speed: float,
                  dt: float,
                  epsilon: float = ALIGN_EPSILON) -> Tuple[np.ndarray, Optional[float]]:
    """
    Turn the facing toward the target's horizontal bearing.

    Rotation per call is limited to turn_speed * dt and never exceeds the
    remaining angle, so the turret cannot overshoot.

    Returns (new_orientation, angle) where angle is the misalignment
    measured *before* this call's rotation, or None with no target.
    """
    if target_position is None:
        return orientation, None

    bearing = horizontal_bearing(position, target_position)
    if bearing is None:
        # Straight overhead: no bearing to turn toward
        return orientation, 0.0

    current = forward_vector(orientation)
    angle = angle_between(current, bearing)

    if angle <= epsilon:
        return orientation, angle

    axis = np.cross(current, bearing)
    axis_len = float(np.linalg.norm(axis))
    if axis_len < 1e-9:
        # Bearing directly behind: any yaw direction is shortest
        axis = UP
    else:
        axis = axis / axis_len

    step = min(turn_speed * max(dt, 0.0), angle)
    delta = quat_from_axis_angle(axis, step)
    return quat_normalize(quat_multiply(delta, orientation)), angle
