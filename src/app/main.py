"""BASE-DEFENSE - wave survival arcade service.

Main FastAPI application.
"""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.config import Settings, settings
from app.routers.achievements import router as achievements_router
from app.routers.game import router as game_router
from app.routers.ws import router as ws_router
from app.routers.ws import start_event_bridge
from defense import __version__


# ---------------------------------------------------------------------------
# Subsystem startup helpers
# ---------------------------------------------------------------------------

def create_engine(config: Settings):
    """Build the engine from settings. Raises if a configured table is bad."""
    from defense.comms.event_bus import EventBus
    from defense.simulation import (
        AdversaryFactory,
        SimulationEngine,
        load_archetype_table,
    )

    table = None
    if config.archetypes_path:
        table = load_archetype_table(config.archetypes_path)
        logger.info(f"Archetypes: loaded {len(table.wave_numbers)} waves from {config.archetypes_path}")

    factory = AdversaryFactory(config.play_width, config.play_height, table=table)
    engine = SimulationEngine(
        config.play_width,
        config.play_height,
        factory=factory,
        event_bus=EventBus(),
    )
    logger.info(f"Simulation engine created ({config.play_width}x{config.play_height})")
    return engine


def create_achievement_service(config: Settings):
    """Achievement service; its minter is only wired when a relay is configured."""
    from defense.achievements import AchievementService, HttpRelayMinter, MintConfig

    mint_config = MintConfig(
        contract_address=config.sbt_contract_address,
        relay_url=config.sbt_relay_url,
        minter_key=config.sbt_minter_private_key,
    )
    minter = HttpRelayMinter(mint_config) if config.sbt_relay_url else None
    if minter is None:
        logger.info("Achievement relay not configured; mint requests will be refused")
    return AchievementService(mint_config, minter=minter)


def install_game(app: FastAPI, config: Settings) -> None:
    """Attach engine, loop, input controls and achievements to app.state."""
    from defense.input.controls import InputController
    from defense.simulation import GameLoop

    engine = create_engine(config)
    app.state.game_loop = GameLoop(engine, tick_rate=config.tick_rate)
    app.state.controls = InputController(engine, fire_cooldown_ms=config.fire_cooldown_ms)
    app.state.achievements = create_achievement_service(config)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("=" * 60)
    logger.info(f"  BASE-DEFENSE v{__version__} - INITIALIZING")
    logger.info("=" * 60)

    install_game(app, settings)
    loop = app.state.game_loop
    bridge_stop = start_event_bridge(loop.engine.event_bus, asyncio.get_running_loop())
    if settings.autostart_loop:
        loop.start()

    logger.info("BASE-DEFENSE ONLINE")

    yield

    bridge_stop.set()
    loop.stop()
    logger.info("BASE-DEFENSE shutting down...")


# Create FastAPI app
app = FastAPI(
    title="BASE-DEFENSE",
    description="Wave survival arcade simulation",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(game_router)
app.include_router(ws_router)
app.include_router(achievements_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "operational",
        "version": __version__,
        "system": "BASE-DEFENSE",
    }


def run() -> None:
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
