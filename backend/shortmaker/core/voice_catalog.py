"""
Voice catalog for narration synthesis.

Single source of truth for the edge-tts voices exposed by ``GET /api/voices``
and accepted in a job's ``config.voice``.
"""

from __future__ import annotations

from typing import Any, Dict, List

TTS_VOICES_BY_LANGUAGE: Dict[str, Dict[str, Any]] = {
    "en": {
        "name": "English",
        "voices": {
            "en-US-GuyNeural": {"name": "Guy (US)", "gender": "male"},
            "en-US-AriaNeural": {"name": "Aria (US)", "gender": "female"},
            "en-US-JennyNeural": {"name": "Jenny (US)", "gender": "female"},
            "en-US-ChristopherNeural": {"name": "Christopher (US)", "gender": "male"},
            "en-GB-RyanNeural": {"name": "Ryan (UK)", "gender": "male"},
            "en-GB-SoniaNeural": {"name": "Sonia (UK)", "gender": "female"},
        },
        "default": "en-US-GuyNeural",
    },
    "auto": {
        "name": "Multilingual (Auto-detect)",
        "voices": {
            "en-US-EmmaMultilingualNeural": {"name": "Emma (Multilingual)", "gender": "female"},
            "en-US-BrianMultilingualNeural": {"name": "Brian (Multilingual)", "gender": "male"},
            "fr-FR-VivienneMultilingualNeural": {"name": "Vivienne (Multilingual)", "gender": "female"},
        },
        "default": "en-US-EmmaMultilingualNeural",
        "note": "Multilingual voices that can speak multiple languages naturally",
    },
}

DEFAULT_TTS_LANGUAGE = "en"
DEFAULT_TTS_VOICE = TTS_VOICES_BY_LANGUAGE[DEFAULT_TTS_LANGUAGE]["default"]


def get_tts_available_voices_flat() -> Dict[str, str]:
    """Return flattened voice_id -> display_name map."""
    return {
        voice_id: info["name"]
        for lang_data in TTS_VOICES_BY_LANGUAGE.values()
        for voice_id, info in lang_data["voices"].items()
    }


def is_known_voice(voice: str) -> bool:
    return voice in get_tts_available_voices_flat()


def list_voices() -> List[Dict[str, str]]:
    """Return every voice with its language code, in catalog order."""
    return [
        {"id": voice_id, "name": info["name"], "gender": info["gender"], "language": code}
        for code, lang_data in TTS_VOICES_BY_LANGUAGE.items()
        for voice_id, info in lang_data["voices"].items()
    ]
