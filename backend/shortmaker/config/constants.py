"""
Constants configuration

API metadata and fixed rendering constants.
"""

# API settings
API_TITLE = "Short Video Maker API"
API_DESCRIPTION = "Assemble narrated short-form videos from a list of scenes"
API_VERSION = "1.0.0"

# Scene boundaries are cross-faded for half a second
TRANSITION_SECONDS = 0.5

# Entrance animation length inside each scene
ENTRANCE_SECONDS = 0.7

# Caption placement offsets in pixels
CAPTION_EDGE_OFFSET_PX = 100

DEFAULT_CAPTION_BACKGROUND_COLOR = "blue"
DEFAULT_MUSIC_VOLUME = 0.1
DEFAULT_TRANSITION_TYPE = "fade"

# Footage clips must cover at least this much narration when no audio length is known
MIN_FOOTAGE_SECONDS = 2.5

__all__ = [
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
