"""
Data models: API schemas (pydantic) and pipeline records (dataclasses)
"""

from .status import JobStatus
from .video import (
    CaptionPosition,
    Orientation,
    MusicMood,
    SceneInput,
    RenderConfig,
    CreateVideoRequest,
    CreateVideoResponse,
    JobError,
    VideoStatusResponse,
    VideoSummary,
    VideoListResponse,
    DeleteVideoResponse,
)
from .composition import (
    Word,
    CaptionLine,
    CaptionPage,
    NarrationAudio,
    ResolvedScene,
    EntranceAnimation,
    TransitionKind,
    CaptionAnchor,
    CaptionPlacement,
    CaptionStyle,
    CaptionPageFrames,
    SceneComposition,
    MusicDescriptor,
    CompositionSpec,
)

__all__ = [
    "JobStatus",
    "CaptionPosition",
    "Orientation",
    "MusicMood",
    "SceneInput",
    "RenderConfig",
    "CreateVideoRequest",
    "CreateVideoResponse",
    "JobError",
    "VideoStatusResponse",
    "VideoSummary",
    "VideoListResponse",
    "DeleteVideoResponse",
    "Word",
    "CaptionLine",
    "CaptionPage",
    "NarrationAudio",
    "ResolvedScene",
    "EntranceAnimation",
    "TransitionKind",
    "CaptionAnchor",
    "CaptionPlacement",
    "CaptionStyle",
    "CaptionPageFrames",
    "SceneComposition",
    "MusicDescriptor",
    "CompositionSpec",
]
