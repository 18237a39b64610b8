"""
Background music catalogue

Tracks are plain MP3 files grouped by mood: ``<music_dir>/<mood>/*.mp3``.
"""

import random
from pathlib import Path
from typing import Dict, List, Optional

from ...core import get_logger
from ...models.video import MusicMood

logger = get_logger(__name__, component="music_library")

MUSIC_EXTENSIONS = (".mp3",)


class MusicLibrary:
    """Looks up background tracks by mood."""

    def __init__(self, music_dir: Path):
        self.music_dir = Path(music_dir)

    @staticmethod
    def list_tags() -> List[str]:
        return [mood.value for mood in MusicMood]

    def tracks(self, mood: Optional[MusicMood] = None) -> List[Path]:
        """Tracks for ``mood``, or for every mood when none is given, sorted by path."""
        moods = [mood] if mood else list(MusicMood)
        found: List[Path] = []
        for item in moods:
            mood_dir = self.music_dir / item.value
            if not mood_dir.is_dir():
                continue
            found.extend(
                path for path in mood_dir.iterdir()
                if path.is_file() and path.suffix.lower() in MUSIC_EXTENSIONS
            )
        return sorted(found)

    def catalog(self) -> Dict[str, int]:
        return {mood.value: len(self.tracks(mood)) for mood in MusicMood}

    def pick(self, mood: Optional[MusicMood], rng: random.Random) -> Optional[str]:
        candidates = self.tracks(mood)
        if not candidates:
            logger.warning("No background music available", extra={"mood": mood.value if mood else None})
            return None
        return str(rng.choice(candidates))
