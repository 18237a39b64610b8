"""
Internal data model flowing through the pipeline.

Scenes are resolved into audio, footage and word timings, paginated into
caption pages, and finally converted into a frame-accurate ``CompositionSpec``
that is handed to the renderer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Word:
    """A transcribed word with millisecond timestamps"""
    text: str
    start_ms: int
    end_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "startMs": self.start_ms, "endMs": self.end_ms}


@dataclass
class CaptionLine:
    words: List[Word] = field(default_factory=list)

    @property
    def text(self) -> str:
        return " ".join(word.text for word in self.words)


@dataclass
class CaptionPage:
    lines: List[CaptionLine] = field(default_factory=list)

    @property
    def words(self) -> List[Word]:
        return [word for line in self.lines for word in line.words]

    @property
    def start_ms(self) -> int:
        return self.lines[0].words[0].start_ms

    @property
    def end_ms(self) -> int:
        return self.lines[-1].words[-1].end_ms


@dataclass
class NarrationAudio:
    data: bytes
    duration_seconds: float
    path: Optional[str] = None  # where the orchestrator stored the bytes for rendering


@dataclass
class ResolvedScene:
    index: int
    audio: NarrationAudio
    footage: str
    words: List[Word]


class EntranceAnimation(str, Enum):
    """Entrance animation played at the start of each scene"""
    FADE = "fade"
    SLIDE_LEFT = "slide-left"
    SLIDE_RIGHT = "slide-right"
    SLIDE_UP = "slide-up"
    SLIDE_DOWN = "slide-down"
    ZOOM_IN = "zoom-in"
    ZOOM_OUT = "zoom-out"
    ROTATE_IN = "rotate-in"


class TransitionKind(str, Enum):
    CROSS_FADE = "fade"


class CaptionAnchor(str, Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


@dataclass(frozen=True)
class CaptionPlacement:
    anchor: CaptionAnchor
    offset_px: int  # distance from the anchored edge; 0 when centered


@dataclass(frozen=True)
class CaptionStyle:
    placement: CaptionPlacement
    highlight_color: str
    font_size: int


@dataclass
class CaptionPageFrames:
    from_frame: int
    duration_frames: int
    lines: List[str]


@dataclass
class SceneComposition:
    duration_frames: int
    entrance: EntranceAnimation
    captions: List[CaptionPageFrames]
    footage: str
    audio: List[str]
    transition_kind: Optional[TransitionKind] = None  # boundary into the next scene
    transition_duration_frames: int = 0


@dataclass
class MusicDescriptor:
    file: str
    start_frame: int
    end_frame: int
    loop: bool = True
    volume: float = 0.1


@dataclass
class CompositionSpec:
    fps: int
    width: int
    height: int
    scenes: List[SceneComposition]
    caption_style: CaptionStyle
    music: Optional[MusicDescriptor] = None

    @property
    def total_frames(self) -> int:
        overlap = sum(scene.transition_duration_frames for scene in self.scenes)
        return sum(scene.duration_frames for scene in self.scenes) - overlap
