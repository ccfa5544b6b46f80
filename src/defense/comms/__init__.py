"""In-process messaging between the engine and its observers."""
from .event_bus import EventBus

__all__ = ["EventBus"]
