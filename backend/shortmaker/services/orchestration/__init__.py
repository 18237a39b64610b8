"""Job orchestration - intake, worker loop and job records."""

from .status_store import StatusStore, VideoJob
from .orchestrator import VideoOrchestrator, STAGE_RENDER, STAGE_INTERNAL

__all__ = ["StatusStore", "VideoJob", "VideoOrchestrator", "STAGE_RENDER", "STAGE_INTERNAL"]
