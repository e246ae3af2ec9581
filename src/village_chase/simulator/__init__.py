"""Desktop pygame host for the village chase."""

from .window import GameWindow, WindowConfig

__all__ = ["GameWindow", "WindowConfig"]
