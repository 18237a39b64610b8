"""
Scene Pipeline - resolves submitted scenes into audio, words and footage

Stages per scene, in order:
    1. synthesis       narration text -> audio bytes + duration
    2. transcription   audio -> ordered word timestamps
    3. footage_search  keywords (optionally enhanced) -> media reference,
                       skipped when the scene already carries footage

A collaborator failure aborts the scene with an ExternalServiceError naming
the stage. Prompt enhancement is best-effort and never fails a scene.
"""

from typing import List, Optional, Sequence

from ...config.constants import MIN_FOOTAGE_SECONDS
from ...core import EnhancementFailure, ExternalServiceError, LogTimer, get_logger
from ...models.composition import NarrationAudio, ResolvedScene
from ...models.video import RenderConfig, SceneInput
from ..collaborators.base import FootageSearch, NarrationSynthesizer, PromptEnhancer, Transcriber

logger = get_logger(__name__, component="scene_pipeline")

STAGE_SYNTHESIS = "synthesis"
STAGE_TRANSCRIPTION = "transcription"
STAGE_FOOTAGE_SEARCH = "footage_search"


class ScenePipeline:
    """Runs the collaborators for each scene of a job."""

    def __init__(
        self,
        synthesizer: NarrationSynthesizer,
        transcriber: Transcriber,
        footage_search: FootageSearch,
        enhancer: Optional[PromptEnhancer] = None,
    ):
        self.synthesizer = synthesizer
        self.transcriber = transcriber
        self.footage_search = footage_search
        self.enhancer = enhancer

    async def resolve(self, scenes: Sequence[SceneInput], config: RenderConfig) -> List[ResolvedScene]:
        """Resolve every scene in submission order; the first failure aborts the rest."""
        resolved: List[ResolvedScene] = []
        for index, scene in enumerate(scenes):
            resolved.append(await self.resolve_scene(index, scene, config))
        return resolved

    async def resolve_scene(self, index: int, scene: SceneInput, config: RenderConfig) -> ResolvedScene:
        voice = config.voice
        if not voice:
            raise ValueError("render config has no voice; apply defaults before processing")

        with LogTimer(logger, f"scene {index} {STAGE_SYNTHESIS}"):
            try:
                speech = await self.synthesizer.synthesize(scene.text, voice)
            except Exception as exc:
                raise ExternalServiceError(STAGE_SYNTHESIS, str(exc)) from exc

        with LogTimer(logger, f"scene {index} {STAGE_TRANSCRIPTION}"):
            try:
                words = await self.transcriber.transcribe(speech.audio)
            except Exception as exc:
                raise ExternalServiceError(STAGE_TRANSCRIPTION, str(exc)) from exc

        footage = scene.video
        if not footage:
            footage = await self._find_footage(index, scene, config, speech.duration_seconds)

        return ResolvedScene(
            index=index,
            audio=NarrationAudio(data=speech.audio, duration_seconds=speech.duration_seconds),
            footage=footage,
            words=list(words),
        )

    async def footage_terms(self, scene: SceneInput) -> List[str]:
        """Search terms for a scene, led by the enhanced query when an enhancer is wired in."""
        keywords = [term for term in scene.search_terms if term and term.strip()]
        if not keywords:
            keywords = [scene.text]
        if self.enhancer is None:
            return keywords

        try:
            query = await self.enhancer.enhance(scene.text, keywords)
        except Exception as exc:
            logger.warning("Prompt enhancement failed, using keywords", extra={
                "error": str(exc),
                "expected": isinstance(exc, EnhancementFailure),
            })
            query = " ".join(keywords)

        return [query] + [term for term in keywords if term != query]

    async def _find_footage(self, index: int, scene: SceneInput, config: RenderConfig, audio_seconds: float) -> str:
        min_duration = max(audio_seconds, MIN_FOOTAGE_SECONDS)
        terms = await self.footage_terms(scene)

        with LogTimer(logger, f"scene {index} {STAGE_FOOTAGE_SEARCH}"):
            try:
                footage = await self.footage_search.search(terms, min_duration, config.orientation)
            except Exception as exc:
                raise ExternalServiceError(STAGE_FOOTAGE_SEARCH, str(exc)) from exc

        if not footage:
            raise ExternalServiceError(
                STAGE_FOOTAGE_SEARCH,
                f"no footage of at least {min_duration:.1f}s for: {', '.join(terms)}",
            )
        return footage
