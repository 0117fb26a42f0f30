"""Sprite animation data, sound effect mixing, audio control and drawing constants for a retro side-scrolling game engine."""

__version__ = "1.3.2"

__all__ = ["animation", "audio", "graphics", "mixer"]