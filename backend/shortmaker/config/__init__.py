"""
Application configuration and settings
"""

from .constants import (
    API_TITLE,
    API_DESCRIPTION,
    API_VERSION,
    TRANSITION_SECONDS,
    ENTRANCE_SECONDS,
    CAPTION_EDGE_OFFSET_PX,
    DEFAULT_CAPTION_BACKGROUND_COLOR,
    DEFAULT_MUSIC_VOLUME,
    DEFAULT_TRANSITION_TYPE,
    MIN_FOOTAGE_SECONDS,
)
from .settings import Settings

__all__ = [
    "Settings",
    "API_TITLE",
    "API_DESCRIPTION",
    "API_VERSION",
    "TRANSITION_SECONDS",
    "ENTRANCE_SECONDS",
    "CAPTION_EDGE_OFFSET_PX",
    "DEFAULT_CAPTION_BACKGROUND_COLOR",
    "DEFAULT_MUSIC_VOLUME",
    "DEFAULT_TRANSITION_TYPE",
    "MIN_FOOTAGE_SECONDS",
]
