"""
Composition timing

Converts resolved scenes (seconds) and caption pages (milliseconds) into a
frame-accurate ``CompositionSpec``:

- scene length: round(audio seconds * fps), plus round(padding ms / 1000 * fps)
  on the last scene
- scene boundaries: cross-fade of floor(fps * 0.5) frames between every
  adjacent pair
- caption pages: from = round(start ms * fps / 1000),
  duration = round((end ms - start ms) * fps / 1000)
- each scene gets an entrance animation drawn from a fixed palette with an
  injectable random source
"""

import math
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ...config.constants import (
    CAPTION_EDGE_OFFSET_PX,
    DEFAULT_CAPTION_BACKGROUND_COLOR,
    TRANSITION_SECONDS,
)
from ...models.composition import (
    CaptionAnchor,
    CaptionPage,
    CaptionPageFrames,
    CaptionPlacement,
    CaptionStyle,
    CompositionSpec,
    EntranceAnimation,
    MusicDescriptor,
    ResolvedScene,
    SceneComposition,
    TransitionKind,
)
from ...models.video import CaptionPosition, Orientation, RenderConfig

ENTRANCE_PALETTE: tuple[EntranceAnimation, ...] = tuple(EntranceAnimation)


@dataclass(frozen=True)
class OrientationProfile:
    width: int
    height: int
    line_max_length: int
    line_count: int
    max_distance_ms: int
    font_size: int


PROFILES: Dict[Orientation, OrientationProfile] = {
    Orientation.PORTRAIT: OrientationProfile(
        width=1080, height=1920, line_max_length=20, line_count=2, max_distance_ms=1000, font_size=72,
    ),
    Orientation.LANDSCAPE: OrientationProfile(
        width=1920, height=1080, line_max_length=30, line_count=1, max_distance_ms=1000, font_size=96,
    ),
}

CAPTION_PLACEMENTS: Dict[CaptionPosition, CaptionPlacement] = {
    CaptionPosition.TOP: CaptionPlacement(CaptionAnchor.TOP, CAPTION_EDGE_OFFSET_PX),
    CaptionPosition.BOTTOM: CaptionPlacement(CaptionAnchor.BOTTOM, CAPTION_EDGE_OFFSET_PX),
    CaptionPosition.CENTER: CaptionPlacement(CaptionAnchor.CENTER, 0),
}


def profile_for(orientation: Orientation) -> OrientationProfile:
    return PROFILES[orientation]


def resolve_caption_placement(position: Optional[CaptionPosition]) -> CaptionPlacement:
    return CAPTION_PLACEMENTS[position or CaptionPosition.CENTER]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (frame counts never go negative)."""
    return int(math.floor(value + 0.5))


def transition_duration_frames(fps: int) -> int:
    return int(math.floor(fps * TRANSITION_SECONDS))


class CompositionTimer:
    """Frame arithmetic for a single composition."""

    def __init__(self, fps: int, rng: Optional[random.Random] = None):
        if fps <= 0:
            raise ValueError("fps must be positive")
        self.fps = fps
        self.rng = rng or random.Random()

    @property
    def transition_frames(self) -> int:
        return transition_duration_frames(self.fps)

    def seconds_to_frames(self, seconds: float) -> int:
        return round_half_up(seconds * self.fps)

    def ms_to_frames(self, milliseconds: float) -> int:
        return round_half_up(milliseconds * self.fps / 1000)

    def caption_frames(self, page: CaptionPage) -> CaptionPageFrames:
        return CaptionPageFrames(
            from_frame=self.ms_to_frames(page.start_ms),
            duration_frames=self.ms_to_frames(page.end_ms - page.start_ms),
            lines=[line.text for line in page.lines],
        )

    def pick_entrance(self) -> EntranceAnimation:
        return self.rng.choice(ENTRANCE_PALETTE)

    def compose(
        self,
        scenes: Sequence[ResolvedScene],
        pages: Sequence[List[CaptionPage]],
        config: RenderConfig,
        music_file: Optional[str] = None,
    ) -> CompositionSpec:
        """
        Build the frame-accurate spec for an ordered list of scenes.

        Args:
            scenes: Resolved scenes in submission order
            pages: Caption pages for each scene, aligned with ``scenes``
            config: The job's render options
            music_file: Background track, or None for a silent bed
        """
        if len(scenes) != len(pages):
            raise ValueError("every scene needs its caption pages")

        profile = profile_for(config.orientation)
        padding_frames = self.ms_to_frames(config.padding_back) if config.padding_back else 0
        last_index = len(scenes) - 1

        compositions: List[SceneComposition] = []
        for i, (scene, scene_pages) in enumerate(zip(scenes, pages)):
            duration_frames = self.seconds_to_frames(scene.audio.duration_seconds)
            if i == last_index:
                duration_frames += padding_frames

            is_boundary = i < last_index
            compositions.append(SceneComposition(
                duration_frames=duration_frames,
                entrance=self.pick_entrance(),
                captions=[self.caption_frames(page) for page in scene_pages],
                footage=scene.footage,
                audio=[scene.audio.path] if scene.audio.path else [],
                transition_kind=TransitionKind.CROSS_FADE if is_boundary else None,
                transition_duration_frames=self.transition_frames if is_boundary else 0,
            ))

        spec = CompositionSpec(
            fps=self.fps,
            width=profile.width,
            height=profile.height,
            scenes=compositions,
            caption_style=CaptionStyle(
                placement=resolve_caption_placement(config.caption_position),
                highlight_color=config.caption_background_color or DEFAULT_CAPTION_BACKGROUND_COLOR,
                font_size=profile.font_size,
            ),
        )

        if music_file:
            spec.music = MusicDescriptor(
                file=music_file,
                start_frame=0,
                end_frame=spec.total_frames,
                loop=True,
                volume=config.music_volume,
            )
        return spec


def build_composition(
    scenes: Sequence[ResolvedScene],
    pages: Sequence[List[CaptionPage]],
    config: RenderConfig,
    fps: int,
    rng: Optional[random.Random] = None,
    music_file: Optional[str] = None,
) -> CompositionSpec:
    """Convenience wrapper around ``CompositionTimer.compose``."""
    return CompositionTimer(fps, rng).compose(scenes, pages, config, music_file=music_file)
