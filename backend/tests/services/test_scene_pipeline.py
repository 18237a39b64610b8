"""
Tests for ScenePipeline stage handling
"""

from unittest.mock import AsyncMock

import pytest

from shortmaker.core import EnhancementFailure, ExternalServiceError
from shortmaker.models import Orientation, RenderConfig, SceneInput
from shortmaker.services.collaborators import PromptEnhancer, SynthesizedSpeech
from shortmaker.services.pipeline import ScenePipeline

FOOTAGE_URL = "https://videos.example.com/clip.mp4"


def _config(**overrides) -> RenderConfig:
    return RenderConfig(**overrides).with_defaults("en-US-GuyNeural")


@pytest.mark.asyncio
async def test_resolves_scenes_in_order(pipeline, synthesizer, transcriber, footage_search):
    scenes = [
        SceneInput(text="First scene", searchTerms=["ocean"]),
        SceneInput(text="Second scene", searchTerms=["forest"]),
    ]

    resolved = await pipeline.resolve(scenes, _config())

    assert [s.index for s in resolved] == [0, 1]
    assert [c.args[0] for c in synthesizer.synthesize.call_args_list] == ["First scene", "Second scene"]
    assert synthesizer.synthesize.call_args_list[0].args[1] == "en-US-GuyNeural"
    transcriber.transcribe.assert_awaited_with(b"narration-mp3")
    assert resolved[0].footage == FOOTAGE_URL
    assert resolved[0].audio.duration_seconds == 2.0
    assert [w.text for w in resolved[0].words] == ["hello", "world"]


@pytest.mark.asyncio
async def test_footage_search_arguments(pipeline, synthesizer, footage_search):
    synthesizer.synthesize.return_value = SynthesizedSpeech(audio=b"x", duration_seconds=6.4)
    scene = SceneInput(text="Waves", searchTerms=["ocean", "waves"])

    await pipeline.resolve_scene(0, scene, _config(orientation=Orientation.LANDSCAPE))

    footage_search.search.assert_awaited_once_with(["ocean", "waves"], 6.4, Orientation.LANDSCAPE)


@pytest.mark.asyncio
async def test_short_narration_still_asks_for_minimum_clip(pipeline, synthesizer, footage_search):
    synthesizer.synthesize.return_value = SynthesizedSpeech(audio=b"x", duration_seconds=1.0)

    await pipeline.resolve_scene(0, SceneInput(text="Hi", searchTerms=["sun"]), _config())

    assert footage_search.search.call_args.args[1] == 2.5


@pytest.mark.asyncio
async def test_supplied_footage_skips_search(pipeline, footage_search):
    scene = SceneInput(text="Own clip", video="https://cdn.example.com/mine.mp4")

    resolved = await pipeline.resolve_scene(0, scene, _config())

    assert resolved.footage == "https://cdn.example.com/mine.mp4"
    footage_search.search.assert_not_awaited()


@pytest.mark.asyncio
async def test_scene_without_terms_searches_by_text(pipeline, footage_search):
    await pipeline.resolve_scene(0, SceneInput(text="Mountain sunrise"), _config())

    assert footage_search.search.call_args.args[0] == ["Mountain sunrise"]


@pytest.mark.asyncio
async def test_missing_voice_is_rejected(pipeline):
    with pytest.raises(ValueError):
        await pipeline.resolve_scene(0, SceneInput(text="x"), RenderConfig())


class TestStageErrors:

    @pytest.mark.asyncio
    async def test_synthesis_failure(self, pipeline, synthesizer, transcriber):
        synthesizer.synthesize.side_effect = RuntimeError("tts offline")

        with pytest.raises(ExternalServiceError) as exc_info:
            await pipeline.resolve_scene(0, SceneInput(text="x"), _config())

        assert exc_info.value.stage == "synthesis"
        assert exc_info.value.message == "tts offline"
        transcriber.transcribe.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transcription_failure(self, pipeline, transcriber, footage_search):
        transcriber.transcribe.side_effect = RuntimeError("model missing")

        with pytest.raises(ExternalServiceError) as exc_info:
            await pipeline.resolve_scene(0, SceneInput(text="x"), _config())

        assert exc_info.value.stage == "transcription"
        footage_search.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_error(self, pipeline, footage_search):
        footage_search.search.side_effect = RuntimeError("HTTP 500")

        with pytest.raises(ExternalServiceError) as exc_info:
            await pipeline.resolve_scene(0, SceneInput(text="x", searchTerms=["a"]), _config())

        assert exc_info.value.stage == "footage_search"

    @pytest.mark.asyncio
    async def test_no_footage_found(self, pipeline, footage_search):
        footage_search.search.return_value = None

        with pytest.raises(ExternalServiceError) as exc_info:
            await pipeline.resolve_scene(0, SceneInput(text="x", searchTerms=["nothing"]), _config())

        assert exc_info.value.stage == "footage_search"
        assert "nothing" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_first_failure_stops_remaining_scenes(self, pipeline, synthesizer):
        synthesizer.synthesize.side_effect = [
            SynthesizedSpeech(audio=b"x", duration_seconds=1.0),
            RuntimeError("boom"),
            SynthesizedSpeech(audio=b"x", duration_seconds=1.0),
        ]
        scenes = [SceneInput(text=t) for t in ("a", "b", "c")]

        with pytest.raises(ExternalServiceError):
            await pipeline.resolve(scenes, _config())

        assert synthesizer.synthesize.await_count == 2


class TestEnhancement:

    @pytest.mark.asyncio
    async def test_enhanced_query_leads_search(self, synthesizer, transcriber, footage_search):
        enhancer = AsyncMock(spec=PromptEnhancer)
        enhancer.enhance.return_value = "aerial shot of waves at sunset"
        pipeline = ScenePipeline(synthesizer, transcriber, footage_search, enhancer=enhancer)

        await pipeline.resolve_scene(0, SceneInput(text="The sea", searchTerms=["ocean", "sunset"]), _config())

        enhancer.enhance.assert_awaited_once_with("The sea", ["ocean", "sunset"])
        assert footage_search.search.call_args.args[0] == ["aerial shot of waves at sunset", "ocean", "sunset"]

    @pytest.mark.asyncio
    async def test_enhancement_failure_falls_back_to_keyword_join(self, synthesizer, transcriber, footage_search):
        enhancer = AsyncMock(spec=PromptEnhancer)
        enhancer.enhance.side_effect = EnhancementFailure("quota exceeded")
        pipeline = ScenePipeline(synthesizer, transcriber, footage_search, enhancer=enhancer)

        resolved = await pipeline.resolve_scene(0, SceneInput(text="x", searchTerms=["ocean", "sunset"]), _config())

        assert resolved.footage == FOOTAGE_URL
        assert footage_search.search.call_args.args[0] == ["ocean sunset", "ocean", "sunset"]

    @pytest.mark.asyncio
    async def test_unexpected_enhancer_error_does_not_fail_scene(self, synthesizer, transcriber, footage_search):
        enhancer = AsyncMock(spec=PromptEnhancer)
        enhancer.enhance.side_effect = TimeoutError()
        pipeline = ScenePipeline(synthesizer, transcriber, footage_search, enhancer=enhancer)

        resolved = await pipeline.resolve_scene(0, SceneInput(text="x", searchTerms=["ocean"]), _config())

        assert resolved.footage == FOOTAGE_URL
        assert footage_search.search.call_args.args[0] == ["ocean"]
