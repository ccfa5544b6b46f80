"""Input translation: device events to engine actions."""
from .controls import Action, InputController

__all__ = ["Action", "InputController"]
