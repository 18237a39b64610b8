"""
Shared fixtures: settings rooted in tmp_path and mocked collaborators.
"""

import random
from typing import List, Tuple
from unittest.mock import AsyncMock

import pytest

from shortmaker.config import Settings
from shortmaker.models import Word
from shortmaker.services.collaborators import (
    FootageSearch,
    NarrationSynthesizer,
    Renderer,
    SynthesizedSpeech,
    Transcriber,
)
from shortmaker.services.music import MusicLibrary
from shortmaker.services.orchestration import StatusStore, VideoOrchestrator
from shortmaker.services.pipeline import ScenePipeline

FOOTAGE_URL = "https://videos.example.com/clip.mp4"


def make_words(*items: Tuple[str, int, int]) -> List[Word]:
    return [Word(text=text, start_ms=start, end_ms=end) for text, start, end in items]


@pytest.fixture
def settings(tmp_path):
    settings = Settings(data_dir=tmp_path / "data", fps=30, persist_jobs=False)
    settings.ensure_directories()
    return settings


@pytest.fixture
def synthesizer():
    mock = AsyncMock(spec=NarrationSynthesizer)
    mock.synthesize.return_value = SynthesizedSpeech(audio=b"narration-mp3", duration_seconds=2.0)
    return mock


@pytest.fixture
def transcriber():
    mock = AsyncMock(spec=Transcriber)
    mock.transcribe.return_value = make_words(("hello", 0, 400), ("world", 450, 900))
    return mock


@pytest.fixture
def footage_search():
    mock = AsyncMock(spec=FootageSearch)
    mock.search.return_value = FOOTAGE_URL
    return mock


@pytest.fixture
def renderer():
    mock = AsyncMock(spec=Renderer)
    mock.render.return_value = b"rendered-mp4"
    return mock


@pytest.fixture
def pipeline(synthesizer, transcriber, footage_search):
    return ScenePipeline(synthesizer, transcriber, footage_search)


@pytest.fixture
def store():
    return StatusStore()


@pytest.fixture
def orchestrator(settings, store, pipeline, renderer):
    return VideoOrchestrator(
        settings=settings,
        store=store,
        pipeline=pipeline,
        renderer=renderer,
        music_library=MusicLibrary(settings.music_dir),
        rng=random.Random(7),
    )
