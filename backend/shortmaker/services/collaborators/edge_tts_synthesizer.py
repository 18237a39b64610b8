"""
Narration synthesis using Microsoft Edge TTS (free, high quality)
"""

import asyncio
import tempfile
from pathlib import Path

import edge_tts

from ...core import get_logger
from .base import NarrationSynthesizer, SynthesizedSpeech

logger = get_logger(__name__, component="edge_tts")


class EdgeTTSSynthesizer(NarrationSynthesizer):
    """Text-to-speech through edge-tts; audio is returned as MP3 bytes."""

    def __init__(self, rate: str = "+0%", pitch: str = "+0Hz"):
        self.rate = rate
        self.pitch = pitch

    async def synthesize(self, text: str, voice: str) -> SynthesizedSpeech:
        communicate = edge_tts.Communicate(text, voice, rate=self.rate, pitch=self.pitch)

        chunks = []
        async for chunk in communicate.stream():
            if chunk["type"] == "audio":
                chunks.append(chunk["data"])

        audio = b"".join(chunks)
        if not audio:
            raise RuntimeError(f"edge-tts returned no audio for voice {voice}")

        duration = await self._get_audio_duration(audio)
        logger.debug("Narration synthesized", extra={"voice": voice, "duration_seconds": duration})
        return SynthesizedSpeech(audio=audio, duration_seconds=duration)

    async def _get_audio_duration(self, audio: bytes) -> float:
        """Measure MP3 duration with ffprobe"""
        with tempfile.TemporaryDirectory() as work_dir:
            audio_path = Path(work_dir) / "narration.mp3"
            audio_path.write_bytes(audio)

            cmd = [
                "ffprobe",
                "-v", "error",
                "-show_entries", "format=duration",
                "-of", "default=noprint_wrappers=1:nokey=1",
                str(audio_path),
            ]
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await process.communicate()

        if process.returncode != 0:
            raise RuntimeError(f"ffprobe failed: {stderr.decode()[:300]}")
        return float(stdout.decode().strip())
