"""Game control API — state, frames, player input, pause, reset."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from defense.input.controls import Action, parse_action

router = APIRouter(prefix="/api/game", tags=["game"])


class InputEvent(BaseModel):
    action: str  # key name (ArrowUp, ArrowRight, ...) or up/down/fire/pause/reset


def _get_loop(request: Request):
    """Retrieve the GameLoop from app state."""
    loop = getattr(request.app.state, "game_loop", None)
    if loop is None:
        raise HTTPException(503, "Game engine not available")
    return loop


def _get_controls(request: Request):
    controls = getattr(request.app.state, "controls", None)
    if controls is None:
        raise HTTPException(503, "Game engine not available")
    return controls


@router.get("/state")
async def get_game_state(request: Request):
    """Current GameState (score, wave, health, phase, outcome)."""
    with _get_loop(request).locked() as engine:
        return engine.snapshot()["state"]


@router.get("/frame")
async def get_frame(request: Request):
    """Full render frame: defender, adversaries, projectiles and state."""
    with _get_loop(request).locked() as engine:
        return engine.snapshot()


@router.get("/archetypes/{wave}")
async def get_archetypes(wave: int, request: Request):
    """Archetype definitions available in a wave (empty for unknown waves)."""
    with _get_loop(request).locked() as engine:
        table = engine.factory.table
        return [table.get(tag, wave).to_dict() for tag in table.tags(wave)]


@router.post("/input")
async def send_input(event: InputEvent, request: Request):
    """Apply one player input, subject to the fire cooldown and pause state."""
    action = parse_action(event.action)
    if action is None:
        raise HTTPException(400, f"Unknown action: {event.action}")
    controls = _get_controls(request)
    with _get_loop(request).locked() as engine:
        applied = controls.handle(action)
        state = engine.game_state
    return {"action": action.value, "applied": applied, "phase": state.phase}


@router.post("/pause")
async def toggle_pause(request: Request):
    """Toggle pause. Rejected once the game is over."""
    with _get_loop(request).locked() as engine:
        if engine.game_state.game_over:
            raise HTTPException(400, "Cannot pause a finished game")
        paused = engine.toggle_pause()
    return {"paused": paused}


@router.post("/reset")
async def reset_game(request: Request):
    """Reset to wave 1 with full health and an empty field."""
    controls = _get_controls(request)
    with _get_loop(request).locked() as engine:
        controls.handle(Action.RESET)
        state = engine.game_state
    return {"status": "reset", "wave": state.wave, "phase": state.phase}
