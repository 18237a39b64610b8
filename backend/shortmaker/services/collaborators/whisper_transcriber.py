"""
Word-level transcription with faster-whisper.
"""

import asyncio
import io
import threading
from typing import Iterable, List, Optional, Tuple

from faster_whisper import WhisperModel

from ...core import get_logger
from ...models.composition import Word
from .base import Transcriber

logger = get_logger(__name__, component="whisper")


def normalize_words(raw_words: Iterable[Tuple[str, float, float]]) -> List[Word]:
    """Convert (text, start_s, end_s) tuples into ordered, non-overlapping words.

    Whisper occasionally emits a word that starts before the previous one
    ended; its start is clamped to the previous end. Blank tokens are dropped.
    """
    words: List[Word] = []
    previous_end = 0
    for text, start, end in raw_words:
        text = text.strip()
        if not text:
            continue
        start_ms = max(int(round(start * 1000)), previous_end)
        end_ms = max(int(round(end * 1000)), start_ms)
        words.append(Word(text=text, start_ms=start_ms, end_ms=end_ms))
        previous_end = end_ms
    return words


class WhisperTranscriber(Transcriber):
    """Runs faster-whisper in a worker thread; the model is loaded on first use."""

    def __init__(self, model: str = "base.en", language: Optional[str] = "en", device: str = "auto"):
        self.model_name = model
        self.language = language
        self.device = device
        self._model: Optional[WhisperModel] = None
        self._model_lock = threading.Lock()

    def _get_model(self) -> WhisperModel:
        with self._model_lock:
            if self._model is None:
                logger.info("Loading whisper model", extra={"model": self.model_name})
                self._model = WhisperModel(self.model_name, device=self.device)
            return self._model

    def _transcribe_sync(self, audio: bytes) -> List[Word]:
        segments, _info = self._get_model().transcribe(
            io.BytesIO(audio),
            language=self.language,
            word_timestamps=True,
        )
        raw = [
            (w.word, w.start, w.end)
            for segment in segments
            if segment.words
            for w in segment.words
        ]
        return normalize_words(raw)

    async def transcribe(self, audio: bytes) -> List[Word]:
        return await asyncio.to_thread(self._transcribe_sync, audio)
