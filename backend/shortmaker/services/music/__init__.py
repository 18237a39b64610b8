"""Background music lookup."""

from .library import MusicLibrary

__all__ = ["MusicLibrary"]
