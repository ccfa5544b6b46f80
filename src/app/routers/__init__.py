"""API routers for BASE-DEFENSE."""

from app.routers.achievements import router as achievements_router
from app.routers.game import router as game_router
from app.routers.ws import router as ws_router

__all__ = ["achievements_router", "game_router", "ws_router"]
