"""Per-scene resolution through the collaborators."""

from .scene_pipeline import (
    ScenePipeline,
    STAGE_SYNTHESIS,
    STAGE_TRANSCRIPTION,
    STAGE_FOOTAGE_SEARCH,
)

__all__ = [
    "ScenePipeline",
    "STAGE_SYNTHESIS",
    "STAGE_TRANSCRIPTION",
    "STAGE_FOOTAGE_SEARCH",
]
