"""
Pydantic models for job submission and the HTTP request/response schemas.

Field aliases follow the camelCase wire format used by content pipelines
(``searchTerms``, ``paddingBack``); Python code uses the snake_case names.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config.constants import (
    DEFAULT_CAPTION_BACKGROUND_COLOR,
    DEFAULT_MUSIC_VOLUME,
    DEFAULT_TRANSITION_TYPE,
)


class CaptionPosition(str, Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class MusicMood(str, Enum):
    SAD = "sad"
    MELANCHOLIC = "melancholic"
    HAPPY = "happy"
    EUPHORIC = "euphoric"
    EXCITED = "excited"
    CHILL = "chill"
    UNEASY = "uneasy"
    ANGRY = "angry"
    DARK = "dark"
    HOPEFUL = "hopeful"
    CONTEMPLATIVE = "contemplative"
    FUNNY = "funny"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SceneInput(_WireModel):
    """One narrated scene as submitted by the client"""
    text: str
    search_terms: List[str] = Field(default_factory=list, alias="searchTerms")
    video: Optional[str] = None  # pre-supplied footage URL or path


class RenderConfig(_WireModel):
    """Per-job rendering options"""
    padding_back: int = Field(default=0, ge=0, alias="paddingBack")  # milliseconds
    music: Optional[MusicMood] = None
    caption_position: CaptionPosition = Field(default=CaptionPosition.CENTER, alias="captionPosition")
    caption_background_color: Optional[str] = Field(default=None, alias="captionBackgroundColor")
    voice: Optional[str] = None
    orientation: Orientation = Orientation.PORTRAIT
    music_volume: float = Field(default=DEFAULT_MUSIC_VOLUME, ge=0.0, le=1.0, alias="musicVolume")
    transition_type: Optional[str] = Field(default=None, alias="transitionType")

    def with_defaults(self, default_voice: str) -> "RenderConfig":
        """Fill unset options the way the submission endpoint does."""
        return self.model_copy(update={
            "voice": self.voice or default_voice,
            "transition_type": self.transition_type or DEFAULT_TRANSITION_TYPE,
            "caption_background_color": self.caption_background_color or DEFAULT_CAPTION_BACKGROUND_COLOR,
        })


# === Request Models ===

class CreateVideoRequest(_WireModel):
    scenes: List[SceneInput]
    config: RenderConfig = Field(default_factory=RenderConfig)


# === Response Models ===

class CreateVideoResponse(_WireModel):
    video_id: str = Field(serialization_alias="videoId")


class JobError(BaseModel):
    stage: str
    message: str


class VideoStatusResponse(BaseModel):
    status: str
    error: Optional[JobError] = None


class VideoSummary(BaseModel):
    id: str
    status: str


class VideoListResponse(BaseModel):
    videos: List[VideoSummary]


class DeleteVideoResponse(BaseModel):
    success: bool = True
