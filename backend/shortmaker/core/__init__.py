"""
Core Module - Cross-cutting concerns and shared infrastructure

Organization:
    - logging.py: Structured logging configuration and utilities
    - exceptions.py: Error taxonomy shared by services and routes
    - runtime.py: Render host readiness report
    - security.py: Job id and path validation
    - voice_catalog.py: Narration voices

Usage:
    from shortmaker.core import get_logger, NotFoundError
"""

from .logging import (
    setup_logging,
    get_logger,
    set_request_id,
    set_job_id,
    clear_context,
    LogTimer,
)

from .exceptions import (
    ShortMakerError,
    ValidationError,
    NotFoundError,
    JobConflictError,
    ExternalServiceError,
    EnhancementFailure,
)

from .runtime import (
    RENDER_TOOLS,
    locate_render_tools,
    check_data_directory,
    inspect_render_host,
)

from .security import (
    validate_job_id,
    validate_path_within_directory,
)

from .voice_catalog import (
    TTS_VOICES_BY_LANGUAGE,
    DEFAULT_TTS_VOICE,
    get_tts_available_voices_flat,
    is_known_voice,
    list_voices,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "set_request_id",
    "set_job_id",
    "clear_context",
    "LogTimer",
    # Errors
    "ShortMakerError",
    "ValidationError",
    "NotFoundError",
    "JobConflictError",
    "ExternalServiceError",
    "EnhancementFailure",
    # Runtime readiness
    "RENDER_TOOLS",
    "locate_render_tools",
    "check_data_directory",
    "inspect_render_host",
    # Security
    "validate_job_id",
    "validate_path_within_directory",
    # Voice catalog
    "TTS_VOICES_BY_LANGUAGE",
    "DEFAULT_TTS_VOICE",
    "get_tts_available_voices_flat",
    "is_known_voice",
    "list_voices",
]
