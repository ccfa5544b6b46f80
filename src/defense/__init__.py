"""Base Defense — wave-survival arcade simulation core."""

__version__ = "0.1.0"
