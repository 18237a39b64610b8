"""
Service settings

Settings are built once at bootstrap with ``Settings.from_env()`` and handed
to the components that need them. Nothing in the package reads the
environment after that point.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from ..core.voice_catalog import DEFAULT_TTS_VOICE

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent.parent / "data"

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]


def _env_int(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(int(raw), minimum)
    except (TypeError, ValueError):
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Process-level configuration for the service."""
    data_dir: Path = DEFAULT_DATA_DIR
    fps: int = 25
    port: int = 3123
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    json_logs: bool = False
    persist_jobs: bool = True
    strict_runtime_checks: bool = False
    pexels_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    whisper_model: str = "base.en"
    default_voice: str = DEFAULT_TTS_VOICE
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    @property
    def videos_dir(self) -> Path:
        return self.data_dir / "videos"

    @property
    def temp_dir(self) -> Path:
        return self.data_dir / "temp"

    @property
    def job_data_dir(self) -> Path:
        return self.data_dir / "job_data"

    @property
    def music_dir(self) -> Path:
        return self.data_dir / "music"

    def ensure_directories(self) -> None:
        for path in (self.videos_dir, self.temp_dir, self.job_data_dir, self.music_dir):
            path.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """Load a .env file (if present) and build settings from the environment."""
        load_dotenv(env_file)

        data_dir = os.getenv("DATA_DIR_PATH")
        log_file = os.getenv("LOG_FILE")
        cors = os.getenv("CORS_ORIGINS")

        return cls(
            data_dir=Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
            fps=_env_int("VIDEO_FPS", 25, 1),
            port=_env_int("PORT", 3123, 1),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=Path(log_file) if log_file else None,
            json_logs=_env_bool("JSON_LOGS"),
            persist_jobs=_env_bool("PERSIST_JOBS", default=True),
            strict_runtime_checks=_env_bool(
                "STARTUP_STRICT_RUNTIME_CHECKS",
                default=os.getenv("ENV", "").lower() == "production",
            ),
            pexels_api_key=os.getenv("PEXELS_API_KEY"),
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
            whisper_model=os.getenv("WHISPER_MODEL", "base.en"),
            default_voice=os.getenv("DEFAULT_VOICE", DEFAULT_TTS_VOICE),
            cors_origins=[o.strip() for o in cors.split(",") if o.strip()] if cors else list(DEFAULT_CORS_ORIGINS),
        )
