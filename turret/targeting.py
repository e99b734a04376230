"""
Target Selector — nearest hostile inside firing range

Distances are compared squared to skip a sqrt per candidate per tick.
"""

import numpy as np
from typing import Iterable, Optional, Tuple, Any


def distance_sq(a: np.ndarray, b: np.ndarray) -> float:
    d = np.asarray(a, dtype=float) - np.asarray(b, dtype=float)
    return float(np.dot(d, d))


def select_nearest(origin: np.ndarray,
                   range_limit: float,
                   hostiles: Iterable[Any]) -> Tuple[Optional[Any], float]:
    """
    Pick the closest hostile whose squared distance is strictly below
    range_limit**2.

    Ties keep the first hostile seen, so callers that need deterministic
    picks must pass a stably ordered collection.

    Returns (hostile, dist_sq); hostile is None when nothing qualifies,
    in which case dist_sq is inf.
    """
    closest = None
    closest_dist_sq = range_limit * range_limit

    for hostile in hostiles:
        d_sq = distance_sq(hostile.position, origin)
        if d_sq < closest_dist_sq:
            closest = hostile
            closest_dist_sq = d_sq

    if closest is None:
        return None, float("inf")
    return closest, closest_dist_sq
