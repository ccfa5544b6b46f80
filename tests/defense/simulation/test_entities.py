"""Unit tests for Defender, Projectile and Adversary behaviour."""

from __future__ import annotations

import math

import pytest

from defense.simulation.adversary import VOLLEY_SPREAD, Adversary
from defense.simulation.archetypes import DEFAULT_ARCHETYPES, ArchetypeConfig
from defense.simulation.entities import (
    DEFENDER_SHOT_DAMAGE,
    DEFENDER_SHOT_SPEED,
    Defender,
    Projectile,
)


pytestmark = pytest.mark.unit


def _gunner(**overrides) -> ArchetypeConfig:
    fields = dict(
        tag="gunner", wave=2, health=50, speed=3, sprite="",
        width=50, height=50, can_shoot=True, shoot_interval=2000,
    )
    fields.update(overrides)
    return ArchetypeConfig(**fields)


class TestDefender:
    def test_for_play_area_centres_vertically(self):
        base = Defender.for_play_area(800, 600)
        assert base.x == 50
        assert base.y == 270
        assert base.health == base.max_health == 100

    def test_move_up_clamps_at_top(self):
        base = Defender(x=50, y=5)
        base.move_up()
        assert base.y == 0
        base.move_up()
        assert base.y == 0

    def test_move_down_clamps_at_bottom(self):
        base = Defender(x=50, y=535)
        base.move_down(600)
        assert base.y == 540
        base.move_down(600)
        assert base.y == 540

    def test_move_by_speed(self):
        base = Defender(x=50, y=270)
        base.move_up()
        assert base.y == 260
        base.move_down(600)
        base.move_down(600)
        assert base.y == 280

    def test_damage_clamps_at_zero(self):
        base = Defender(x=0, y=0)
        base.take_damage(30)
        assert base.health == 70
        assert base.is_alive()
        base.take_damage(500)
        assert base.health == 0
        assert not base.is_alive()

    def test_center(self):
        assert Defender(x=50, y=270).center() == (80, 300)


class TestProjectile:
    def test_defender_shot_profile(self):
        shot = Projectile.defender_shot((80, 300))
        assert (shot.x, shot.y) == (80, 300)
        assert shot.vx == DEFENDER_SHOT_SPEED
        assert shot.vy == 0
        assert shot.from_defender
        assert shot.damage == DEFENDER_SHOT_DAMAGE

    def test_advance(self):
        shot = Projectile(x=0, y=0, vx=2, vy=-1, width=8, height=8,
                          from_defender=False, damage=10)
        shot.advance()
        assert (shot.x, shot.y) == (2, -1)

    def test_within_margin_is_strict(self):
        shot = Projectile.defender_shot((849.9, 300))
        assert shot.within(800, 600, 50)
        shot.x = 850
        assert not shot.within(800, 600, 50)
        shot.x = -50
        assert not shot.within(800, 600, 50)


class TestAdversary:
    def test_starts_with_archetype_health_and_leftward_velocity(self):
        adv = Adversary(DEFAULT_ARCHETYPES.get("linea", 2), x=800, y=100)
        assert adv.health == 50
        assert adv.vx == -3
        assert adv.tag == "linea"

    def test_update_moves_by_speed(self):
        adv = Adversary(DEFAULT_ARCHETYPES.get("arb", 3), x=800, y=100)
        adv.update()
        adv.update()
        assert adv.x == 797
        assert adv.y == 100

    def test_melee_archetype_never_fires(self):
        adv = Adversary(DEFAULT_ARCHETYPES.get("taiko", 1), x=800, y=100)
        assert not adv.can_fire(1_000_000)
        assert adv.shoot((0, 0), 1_000_000) is None
        assert adv.volley((0, 0), 1_000_000) == []

    def test_fire_readiness_boundary(self):
        adv = Adversary(_gunner(), x=800, y=100, last_shot_at=1000)
        assert not adv.can_fire(2999)
        assert adv.can_fire(3000)

    def test_shoot_records_time_and_aims(self):
        adv = Adversary(_gunner(), x=500, y=275, last_shot_at=0)
        shot = adv.shoot((80, 300), 2000)
        assert shot is not None
        assert adv.last_shot_at == 2000
        assert not shot.from_defender
        assert (shot.x, shot.y) == adv.center()
        assert math.hypot(shot.vx, shot.vy) == pytest.approx(4.0)
        assert shot.vx < 0
        assert not adv.can_fire(2001)

    def test_custom_bullet_speed(self):
        adv = Adversary(_gunner(bullet_speed=7.5), x=500, y=100)
        shot = adv.shoot((0, 0), 5000)
        assert math.hypot(shot.vx, shot.vy) == pytest.approx(7.5)

    def test_volley_fans_around_aim_line(self):
        adv = Adversary(_gunner(bullets_per_shot=3), x=500, y=275)
        centre = adv.center()
        shots = adv.volley((0, centre[1]), 5000)
        assert len(shots) == 3
        assert shots[1].vx == pytest.approx(-4.0)
        assert shots[1].vy == pytest.approx(0.0)
        for side in (shots[0], shots[2]):
            cos_gap = (side.vx * shots[1].vx + side.vy * shots[1].vy) / 16.0
            assert math.acos(min(1.0, cos_gap)) == pytest.approx(VOLLEY_SPREAD)
        assert shots[0].vy * shots[2].vy < 0
        assert all(math.hypot(s.vx, s.vy) == pytest.approx(4.0) for s in shots)

    def test_volley_single_shot(self):
        adv = Adversary(_gunner(), x=500, y=100)
        assert len(adv.volley((0, 0), 5000)) == 1
        assert adv.volley((0, 0), 5001) == []

    def test_damage_and_liveness(self):
        adv = Adversary(DEFAULT_ARCHETYPES.get("starkent", 1), x=800, y=100)
        adv.take_damage(20)
        assert adv.is_alive()
        adv.take_damage(10)
        assert not adv.is_alive()

    def test_off_screen_after_fully_crossing_left_edge(self):
        adv = Adversary(DEFAULT_ARCHETYPES.get("starkent", 1), x=-50, y=100)
        assert not adv.is_off_screen()
        adv.x = -50.5
        assert adv.is_off_screen()
