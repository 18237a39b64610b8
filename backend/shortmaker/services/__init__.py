"""
Services package - the job pipeline and its integrations

    - captions: word timestamps -> caption pages
    - composition: frame timing of scenes, transitions and captions
    - pipeline: per-scene synthesis, transcription and footage lookup
    - orchestration: job records and the serial render worker
    - collaborators: interfaces and adapters for external capabilities
    - music: background track lookup
"""

from .orchestration import VideoOrchestrator, StatusStore
from .pipeline import ScenePipeline

__all__ = [
    "VideoOrchestrator",
    "StatusStore",
    "ScenePipeline",
]
