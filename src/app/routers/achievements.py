"""Achievement API — mint a victory token to the player's wallet."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

from defense.achievements.mint import MintConfigurationError, MintError

router = APIRouter(prefix="/api/achievements", tags=["achievements"])


class MintRequest(BaseModel):
    address: str = ""


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"success": False, "error": message})


@router.post("/mint")
async def mint_achievement(body: MintRequest, request: Request):
    """Mint the victory achievement to ``body.address``.

    Only a finished game that ended in victory can be claimed.  The relay
    call blocks, so it runs in a worker thread.
    """
    service = getattr(request.app.state, "achievements", None)
    if service is None:
        return _error(500, str(MintConfigurationError("Achievement service not configured")))

    loop = getattr(request.app.state, "game_loop", None)
    if loop is None:
        return _error(503, "Game engine not available")
    with loop.locked() as engine:
        state = engine.game_state
    if not state.victory:
        return _error(409, "No victory to claim")

    try:
        receipt = await asyncio.to_thread(service.issue, body.address)
    except MintError as e:
        logger.warning(f"Mint rejected for {body.address!r}: {e}")
        return _error(e.status_code, str(e))

    return {
        "success": True,
        "message": "Achievement minted successfully!",
        "tx_hash": receipt.tx_hash,
    }
