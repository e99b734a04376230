import numpy as np
import pytest

from turret.model import Turret, TurretConfig
from world.context import WorldContext
from world.hostiles import Hostile


class FixedMuzzle:
    """Muzzle handle pinned to one world position."""

    def __init__(self, position):
        self.position = np.asarray(position, dtype=float)

    def world_position(self):
        return self.position


class RecordingFactory:
    """Projectile factory that just remembers what it was asked for."""

    def __init__(self):
        self.calls = []

    def create(self, origin, direction):
        handle = {"origin": np.array(origin), "direction": np.array(direction)}
        self.calls.append(handle)
        return handle


@pytest.fixture
def make_hostile():
    counter = {"n": 0}

    def _make(pos, vel=(0.0, 0.0, 0.0)) -> Hostile:
        h = Hostile(
            hostile_id=counter["n"],
            position=np.array(pos, dtype=float),
            velocity=np.array(vel, dtype=float),
        )
        counter["n"] += 1
        return h
    return _make


@pytest.fixture
def factory():
    return RecordingFactory()


@pytest.fixture
def make_world(factory):
    def _make(hostiles=()):
        return WorldContext(hostiles=list(hostiles), projectiles=[],
                            projectile_factory=factory)
    return _make


@pytest.fixture
def make_turret():
    def _make(pos=(0.0, 0.0, 0.0), muzzle=True, **cfg) -> Turret:
        turret = Turret(np.array(pos, dtype=float), config=TurretConfig(**cfg))
        if muzzle:
            turret.resolve_muzzle(FixedMuzzle(turret.position))
        return turret
    return _make
