"""Composition timing - seconds and milliseconds to frames."""

from .timer import (
    CompositionTimer,
    OrientationProfile,
    ENTRANCE_PALETTE,
    PROFILES,
    build_composition,
    profile_for,
    resolve_caption_placement,
    round_half_up,
    transition_duration_frames,
)

__all__ = [
    "CompositionTimer",
    "OrientationProfile",
    "ENTRANCE_PALETTE",
    "PROFILES",
    "build_composition",
    "profile_for",
    "resolve_caption_placement",
    "round_half_up",
    "transition_duration_frames",
]
