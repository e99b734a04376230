"""Target selection: nearest hostile strictly inside range."""

import numpy as np

from turret.targeting import select_nearest, distance_sq


ORIGIN = np.zeros(3)


def test_empty_collection_yields_none():
    target, d_sq = select_nearest(ORIGIN, 100.0, [])
    assert target is None
    assert d_sq == float("inf")


def test_picks_closer_of_two(make_hostile):
    near = make_hostile([0, 10, 0])    # d^2 = 100
    far = make_hostile([20, 0, 0])     # d^2 = 400

    target, d_sq = select_nearest(ORIGIN, 5000.0, [far, near])

    assert target is near
    assert d_sq == 100.0


def test_out_of_range_hostile_ignored(make_hostile):
    target, _ = select_nearest(ORIGIN, 5.0, [make_hostile([0, 10, 0])])
    assert target is None


def test_range_boundary_is_exclusive(make_hostile):
    on_edge = make_hostile([0, 5, 0])
    target, _ = select_nearest(ORIGIN, 5.0, [on_edge])
    assert target is None


def test_tie_keeps_first_seen(make_hostile):
    a = make_hostile([3, 4, 0])
    b = make_hostile([-4, 3, 0])

    assert select_nearest(ORIGIN, 50.0, [a, b])[0] is a
    assert select_nearest(ORIGIN, 50.0, [b, a])[0] is b


def test_vertical_offset_counts_toward_distance(make_hostile):
    high = make_hostile([0, 3, 10])
    low = make_hostile([0, 6, 0])
    target, d_sq = select_nearest(ORIGIN, 50.0, [high, low])
    assert target is low
    assert d_sq == 36.0


def test_uses_turret_position_as_origin(make_hostile):
    a = make_hostile([100, 100, 0])
    b = make_hostile([0, 0, 0])
    target, _ = select_nearest(np.array([95.0, 100.0, 0.0]), 10.0, [a, b])
    assert target is a


def test_selection_matches_brute_force(make_hostile):
    rng = np.random.default_rng(7)
    for _ in range(50):
        hostiles = [make_hostile(rng.uniform(-30, 30, size=3))
                    for _ in range(rng.integers(0, 12))]
        range_limit = rng.uniform(5, 40)

        target, d_sq = select_nearest(ORIGIN, range_limit, hostiles)

        in_range = [h for h in hostiles
                    if distance_sq(h.position, ORIGIN) < range_limit ** 2]
        if not in_range:
            assert target is None
            continue
        best = min(distance_sq(h.position, ORIGIN) for h in in_range)
        assert target in in_range
        assert d_sq == best


def test_selection_does_not_move_hostiles(make_hostile):
    h = make_hostile([1, 2, 3])
    select_nearest(ORIGIN, 10.0, [h])
    np.testing.assert_array_equal(h.position, [1, 2, 3])
