"""World collaborators: context, projectiles, hostile spawner."""

import numpy as np
import pytest

from world.context import WorldContext
from world.hostiles import HostileSpawner, SpawnConfig
from world.projectiles import ProjectileConfig, ProjectileFactory, advance_projectiles


class TestWorldContext:

    def test_spawn_projectile_appends_factory_output(self, factory):
        world = WorldContext(projectile_factory=factory)
        handle = world.spawn_projectile(np.zeros(3), np.array([0.0, 1.0, 0.0]))
        assert world.projectiles == [handle]
        assert factory.calls == [handle]

    def test_defaults(self):
        world = WorldContext()
        assert world.hostiles == []
        assert world.projectiles == []
        assert isinstance(world.projectile_factory, ProjectileFactory)


class TestProjectiles:

    def test_factory_copies_inputs_and_numbers_projectiles(self):
        f = ProjectileFactory(ProjectileConfig(speed=10.0))
        origin = np.array([1.0, 2.0, 3.0])
        a = f.create(origin, [0.0, 1.0, 0.0])
        b = f.create(origin, [1.0, 0.0, 0.0])

        origin[0] = 99.0
        assert a.position[0] == 1.0
        assert (a.projectile_id, b.projectile_id) == (0, 1)
        assert a.speed == 10.0

    def test_advance_moves_in_straight_line(self):
        cfg = ProjectileConfig(speed=10.0)
        p = ProjectileFactory(cfg).create([0, 0, 1], [0, 1, 0])
        live = [p]
        removed = advance_projectiles(live, 0.5, cfg)
        assert removed == 0
        np.testing.assert_allclose(p.position, [0, 5, 1])
        assert p.time_alive == 0.5

    def test_expires_by_lifetime(self):
        cfg = ProjectileConfig(speed=1.0, max_lifetime_s=1.0, max_distance=100.0)
        live = [ProjectileFactory(cfg).create([0, 0, 0], [1, 0, 0])]
        advance_projectiles(live, 0.6, cfg)
        assert len(live) == 1
        advance_projectiles(live, 0.6, cfg)
        assert live == []

    def test_expires_by_distance_in_place(self):
        cfg = ProjectileConfig(speed=50.0, max_lifetime_s=10.0, max_distance=20.0)
        f = ProjectileFactory(cfg)
        live = [f.create([0, 0, 0], [1, 0, 0])]
        same_list = live
        advance_projectiles(live, 0.5, cfg)
        assert same_list is live
        assert live == []

    def test_bad_speed_rejected(self):
        with pytest.raises(ValueError):
            ProjectileConfig(speed=0)


class TestHostileSpawner:

    def make(self, **cfg):
        cfg.setdefault("enabled", True)
        return HostileSpawner(SpawnConfig(**cfg), seed=3)

    def test_random_spawn_on_ring_heading_inward(self):
        spawner = self.make(ring_radius=40.0, speed_range=(2.0, 2.0))
        h = spawner.spawn_random()

        assert np.linalg.norm(h.position[:2]) == pytest.approx(40.0)
        assert h.speed == pytest.approx(2.0)
        inward = -h.position / np.linalg.norm(h.position)
        np.testing.assert_allclose(h.velocity / h.speed, inward)

    def test_interval_spawning(self):
        spawner = self.make(interval_s=1.0)
        events = spawner.update(2.5)
        assert len(spawner.hostiles) == 2
        assert [e["type"] for e in events] == ["hostile_spawned"] * 2

    def test_disabled_spawner_stays_empty(self):
        spawner = self.make(enabled=False, interval_s=0.1)
        spawner.update(5.0)
        assert spawner.hostiles == []

    def test_max_alive_caps_waves(self):
        spawner = self.make(interval_s=0.1, max_alive=3, speed_range=(0.0, 0.0))
        spawner.update(1.0)
        assert len(spawner.hostiles) == 3

    def test_breach_removes_hostile(self):
        spawner = self.make(enabled=False, breach_radius=1.0)
        spawner.spawn([0.0, 3.0, 0.0], [0.0, -2.0, 0.0])
        live = spawner.hostiles

        events = spawner.update(1.5)

        assert live is spawner.hostiles
        assert live == []
        assert events == [{"type": "hostile_breached", "id": 0}]
        assert spawner.total_breached == 1

    def test_lifetime_expiry(self):
        spawner = self.make(enabled=False, lifetime_s=2.0)
        spawner.spawn([30.0, 0.0, 0.0])
        spawner.update(1.5)
        assert len(spawner.hostiles) == 1
        events = spawner.update(1.0)
        assert spawner.hostiles == []
        assert events[0]["type"] == "hostile_expired"

    def test_seeded_runs_repeat(self):
        a = HostileSpawner(SpawnConfig(), seed=11).spawn_random()
        b = HostileSpawner(SpawnConfig(), seed=11).spawn_random()
        np.testing.assert_array_equal(a.position, b.position)
        np.testing.assert_array_equal(a.velocity, b.velocity)

    def test_spawn_rejects_bad_vectors(self):
        spawner = self.make()
        with pytest.raises(ValueError):
            spawner.spawn([1.0, 2.0])

    def test_remove(self):
        spawner = self.make(enabled=False)
        h = spawner.spawn([5.0, 0.0, 0.0])
        assert spawner.remove(h.hostile_id)
        assert not h.alive
        assert not spawner.remove(h.hostile_id)

    @pytest.mark.parametrize("kwargs", [
        {"interval_s": 0},
        {"speed_range": (5.0, 1.0)},
        {"speed_range": (-1.0, 1.0)},
    ])
    def test_invalid_config(self, kwargs):
        with pytest.raises(ValueError):
            SpawnConfig(**kwargs)
