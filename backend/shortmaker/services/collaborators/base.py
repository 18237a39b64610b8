"""
Collaborator interfaces

The pipeline only depends on these abstract contracts; concrete adapters
(edge-tts, faster-whisper, Pexels, Gemini, ffmpeg) implement them and tests
replace them with mocks.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ...models.composition import CompositionSpec, Word
from ...models.video import Orientation


@dataclass
class SynthesizedSpeech:
    audio: bytes
    duration_seconds: float


class NarrationSynthesizer(ABC):
    @abstractmethod
    async def synthesize(self, text: str, voice: str) -> SynthesizedSpeech:
        """Turn narration text into audio bytes and their duration."""


class Transcriber(ABC):
    @abstractmethod
    async def transcribe(self, audio: bytes) -> List[Word]:
        """Return ordered, non-overlapping word timestamps for ``audio``."""


class FootageSearch(ABC):
    @abstractmethod
    async def search(
        self,
        keywords: Sequence[str],
        min_duration_seconds: float,
        orientation: Orientation = Orientation.PORTRAIT,
    ) -> Optional[str]:
        """Return a media URL for the keywords, or None when nothing fits."""


class PromptEnhancer(ABC):
    @abstractmethod
    async def enhance(self, text: str, keywords: Sequence[str]) -> str:
        """Return an improved footage query; raises EnhancementFailure."""


class Renderer(ABC):
    @abstractmethod
    async def render(self, spec: CompositionSpec) -> bytes:
        """Encode the composition and return the video bytes."""


__all__ = [
    "SynthesizedSpeech",
    "NarrationSynthesizer",
    "Transcriber",
    "FootageSearch",
    "PromptEnhancer",
    "Renderer",
]
