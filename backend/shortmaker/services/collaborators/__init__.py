"""
Collaborators - external capabilities the pipeline depends on

Interfaces live in base.py. Concrete adapters are imported from their own
modules so their heavy libraries load only when they are actually wired in:
    - edge_tts_synthesizer.EdgeTTSSynthesizer: narration (edge-tts)
    - whisper_transcriber.WhisperTranscriber: word timestamps (faster-whisper)
    - pexels.PexelsFootageSearch: stock footage (httpx)
    - gemini_enhancer.GeminiPromptEnhancer: footage query rewriting (google-genai)
    - ffmpeg_renderer.FFmpegRenderer: MP4 encoding (ffmpeg)
"""

from .base import (
    SynthesizedSpeech,
    NarrationSynthesizer,
    Transcriber,
    FootageSearch,
    PromptEnhancer,
    Renderer,
)

__all__ = [
    "SynthesizedSpeech",
    "NarrationSynthesizer",
    "Transcriber",
    "FootageSearch",
    "PromptEnhancer",
    "Renderer",
]
