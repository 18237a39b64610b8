"""
Video Orchestrator - job intake and the serial render worker.

``submit`` validates a scene list, records a queued job and returns its id
immediately. A single worker task pulls job ids FIFO from an asyncio queue
and drives each job through the scene pipeline, caption pagination,
composition timing and rendering. A failure at any stage fails that job only.
"""

import asyncio
import random
import shutil
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import pydantic

from ...config.settings import Settings
from ...core import (
    ExternalServiceError,
    LogTimer,
    NotFoundError,
    ShortMakerError,
    ValidationError,
    get_logger,
    set_job_id,
    validate_job_id,
    validate_path_within_directory,
)
from ...models.composition import CaptionPage, CompositionSpec, ResolvedScene
from ...models.status import JobStatus
from ...models.video import RenderConfig, SceneInput
from ..captions import paginate
from ..collaborators.base import Renderer
from ..composition import CompositionTimer, profile_for
from ..music import MusicLibrary
from ..pipeline import ScenePipeline
from .status_store import StatusStore, VideoJob

logger = get_logger(__name__, component="orchestrator")

STAGE_RENDER = "render"
STAGE_INTERNAL = "internal"


def _validate_scenes(scenes: Any) -> List[SceneInput]:
    if not isinstance(scenes, list):
        raise ValidationError("scenes must be a list", ["scenes"])
    if not scenes:
        raise ValidationError("scenes must contain at least one scene", ["scenes"])

    validated: List[SceneInput] = []
    missing: List[str] = []
    for i, raw in enumerate(scenes):
        try:
            scene = raw if isinstance(raw, SceneInput) else SceneInput.model_validate(raw)
        except pydantic.ValidationError as exc:
            for err in exc.errors():
                loc = ".".join(str(part) for part in err["loc"])
                missing.append(f"scenes[{i}].{loc}" if loc else f"scenes[{i}]")
            continue
        if not scene.text or not scene.text.strip():
            missing.append(f"scenes[{i}].text")
            continue
        validated.append(scene)

    if missing:
        raise ValidationError("every scene needs narration text", missing)
    return validated


def _validate_config(config: Any) -> RenderConfig:
    if config is None:
        return RenderConfig()
    if isinstance(config, RenderConfig):
        return config
    try:
        return RenderConfig.model_validate(config)
    except pydantic.ValidationError as exc:
        fields = [".".join(str(part) for part in ("config",) + tuple(err["loc"])) for err in exc.errors()]
        raise ValidationError("invalid render config", fields) from exc


class VideoOrchestrator:
    """Owns the job lifecycle: submission, the worker loop, and artifact storage."""

    def __init__(
        self,
        settings: Settings,
        store: StatusStore,
        pipeline: ScenePipeline,
        renderer: Renderer,
        music_library: Optional[MusicLibrary] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings
        self.store = store
        self.pipeline = pipeline
        self.renderer = renderer
        self.music_library = music_library
        self.rng = rng or random.Random()

        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None

    # === Paths ===

    @staticmethod
    def _contained(directory: Path, name: str) -> Path:
        path = directory / name
        if path.resolve() == directory.resolve() or not validate_path_within_directory(path, directory):
            raise ValueError(f"job id {name!r} does not map to a path inside {directory}")
        return path

    def artifact_path(self, job_id: str) -> Path:
        return self._contained(self.settings.videos_dir, f"{job_id}.mp4")

    def scratch_dir(self, job_id: str) -> Path:
        return self._contained(self.settings.temp_dir, job_id)

    # === Public operations ===

    def submit(self, scenes: Any, config: Any = None) -> str:
        """Validate and queue a job; returns the new job id without waiting for processing."""
        validated = _validate_scenes(scenes)
        render_config = _validate_config(config).with_defaults(self.settings.default_voice)

        job_id = uuid.uuid4().hex
        self.store.create(job_id, validated, render_config)
        self._queue.put_nowait(job_id)

        logger.info("Video job queued", extra={
            "video_id": job_id,
            "scenes": len(validated),
            "orientation": render_config.orientation.value,
        })
        return job_id

    def status(self, job_id: str) -> VideoJob:
        job = self.store.get(job_id)
        if not job:
            raise NotFoundError(f"Video {job_id} not found")
        return job

    def list(self) -> List[VideoJob]:
        return self.store.list()

    def artifact_file(self, job_id: str) -> Path:
        """Path of a ready job's video; NotFoundError for malformed, unknown or unfinished ids."""
        if not validate_job_id(job_id):
            raise NotFoundError(f"Video {job_id} not found")
        job = self.store.get(job_id)
        if not job or job.status != JobStatus.READY:
            raise NotFoundError(f"Video {job_id} not found or not ready")

        path = self.artifact_path(job_id)
        if not path.exists():
            raise NotFoundError(f"Video {job_id} artifact is missing")
        return path

    def fetch(self, job_id: str) -> bytes:
        """Artifact bytes of a ready job."""
        return self.artifact_file(job_id).read_bytes()

    def delete(self, job_id: str) -> None:
        """
        Remove a job and its files.

        Unknown or malformed ids are a no-op and files are only touched for
        a job the store actually removed. Processing jobs raise JobConflictError.
        """
        if not validate_job_id(job_id):
            return
        removed = self.store.delete(job_id)
        if not removed:
            return

        self.artifact_path(job_id).unlink(missing_ok=True)
        shutil.rmtree(self.scratch_dir(job_id), ignore_errors=True)
        logger.info("Video job deleted", extra={"video_id": job_id, "status": removed.status.value})

    # === Worker ===

    def recover(self) -> int:
        """Fail jobs interrupted mid-render and enqueue the ones that never started."""
        pending = self.store.recover_interrupted()
        for job in pending:
            self._queue.put_nowait(job.id)
        return len(pending)

    def start(self) -> None:
        if self._worker and not self._worker.done():
            return
        self._worker = asyncio.create_task(self._run(), name="video-worker")
        logger.info("Video worker started")

    async def stop(self) -> None:
        if not self._worker:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        logger.info("Video worker stopped")

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            job_id = await self._queue.get()
            try:
                await self.process(job_id)
            except Exception as exc:
                logger.error("Worker failed to settle job", extra={"video_id": job_id, "error": str(exc)}, exc_info=True)
            finally:
                self._queue.task_done()

    async def process(self, job_id: str) -> None:
        """Run one job end to end and record its terminal status."""
        job = self.store.get(job_id)
        if not job or job.status != JobStatus.QUEUED:
            logger.debug("Skipping job that is no longer queued", extra={"video_id": job_id})
            return

        set_job_id(job_id)
        try:
            self.store.update_status(job_id, JobStatus.PROCESSING)
            with LogTimer(logger, f"video job {job_id}"):
                artifact = await self._produce(job)
            self.store.update_status(job_id, JobStatus.READY, output=str(artifact))
            logger.info("Video job ready", extra={"video_id": job_id, "output": str(artifact)})
        except ExternalServiceError as exc:
            logger.warning("Video job failed", extra={"stage": exc.stage, "error": exc.message})
            self._fail(job_id, exc.to_dict())
        except Exception as exc:
            logger.error("Video job failed unexpectedly", extra={"error": str(exc)}, exc_info=True)
            self._fail(job_id, {"stage": STAGE_INTERNAL, "message": str(exc)})
        finally:
            shutil.rmtree(self.scratch_dir(job_id), ignore_errors=True)
            set_job_id(None)

    def _fail(self, job_id: str, error: Dict[str, str]) -> None:
        try:
            self.store.update_status(job_id, JobStatus.FAILED, error=error)
        except ShortMakerError as exc:
            # already terminal, or deleted while failing
            logger.warning("Could not record job failure", extra={"video_id": job_id, "error": str(exc)})

    async def _produce(self, job: VideoJob) -> Path:
        resolved = await self.pipeline.resolve(job.scenes, job.config)
        self._store_narration(job.id, resolved)
        spec = self.compose(resolved, job.config)

        try:
            video = await self.renderer.render(spec)
        except Exception as exc:
            raise ExternalServiceError(STAGE_RENDER, str(exc)) from exc

        path = self.artifact_path(job.id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(video)
        return path

    def _store_narration(self, job_id: str, scenes: List[ResolvedScene]) -> None:
        scratch = self.scratch_dir(job_id)
        scratch.mkdir(parents=True, exist_ok=True)
        for scene in scenes:
            audio_path = scratch / f"scene_{scene.index}.mp3"
            audio_path.write_bytes(scene.audio.data)
            scene.audio.path = str(audio_path)

    def compose(self, scenes: List[ResolvedScene], config: RenderConfig) -> CompositionSpec:
        """Paginate captions per scene and build the frame-accurate composition."""
        profile = profile_for(config.orientation)
        pages: List[List[CaptionPage]] = [
            paginate(scene.words, profile.line_max_length, profile.line_count, profile.max_distance_ms)
            for scene in scenes
        ]

        music_file = self.music_library.pick(config.music, self.rng) if self.music_library else None
        timer = CompositionTimer(self.settings.fps, self.rng)
        return timer.compose(scenes, pages, config, music_file=music_file)

    def queue_depth(self) -> int:
        return self._queue.qsize()

    def summary(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in JobStatus}
        for job in self.store.list():
            counts[job.status.value] += 1
        return counts
