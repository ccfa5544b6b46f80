"""Shared fixtures for API tests: a real engine behind a stopped GameLoop."""
from __future__ import annotations

import pytest
from fastapi import FastAPI

from defense.achievements import AchievementService, MintConfig, MintReceipt
from defense.input.controls import InputController
from defense.simulation import AdversaryFactory, ArchetypeTable, GameLoop, SimulationEngine
from defense.simulation.entities import Projectile


class FakeMinter:
    def __init__(self):
        self.calls: list[str] = []

    def mint(self, address: str) -> MintReceipt:
        self.calls.append(address)
        return MintReceipt(tx_hash="0xdeadbeef")


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_app(clock):
    """Factory: FastAPI app with the given routers and a non-spawning engine."""

    def _make_app(*routers, achievements=None) -> FastAPI:
        factory = AdversaryFactory(800, 600, table=ArchetypeTable())
        engine = SimulationEngine(800, 600, factory=factory, clock=clock)
        app = FastAPI()
        for router in routers:
            app.include_router(router)
        app.state.game_loop = GameLoop(engine)
        app.state.controls = InputController(engine, clock=clock)
        app.state.achievements = achievements
        return app

    return _make_app


@pytest.fixture
def win_game():
    def _win(engine: SimulationEngine) -> None:
        for now in (30_000, 90_000, 130_000):
            engine.advance(now)

    return _win


@pytest.fixture
def lose_game():
    def _lose(engine: SimulationEngine) -> None:
        engine.base.health = 10
        engine.add_projectile(Projectile(x=100, y=290, vx=-4, vy=0, width=8,
                                         height=8, from_defender=False, damage=10))
        engine.advance(16)

    return _lose


@pytest.fixture
def minter():
    return FakeMinter()


@pytest.fixture
def achievement_service(minter):
    config = MintConfig(
        contract_address="0x" + "11" * 20,
        relay_url="http://relay",
        minter_key="key",
    )
    return AchievementService(config, minter=minter)
