"""
Status Store - job records with optional file-based persistence.

Records are kept in insertion order behind a single RLock. Readers always get
a deep copy, so a record can never be observed half-updated. When a storage
directory is given, every mutation is written to ``<storage_dir>/<id>.json``.
"""

import copy
import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Optional

from ...core import JobConflictError, NotFoundError, get_logger
from ...models.status import JobStatus
from ...models.video import RenderConfig, SceneInput

logger = get_logger(__name__, component="status_store")

INTERRUPTED_STAGE = "worker"
INTERRUPTED_MESSAGE = "Job was interrupted by server restart"


@dataclass
class VideoJob:
    id: str
    scenes: List[SceneInput]
    config: RenderConfig
    status: JobStatus = JobStatus.QUEUED
    error: Optional[Dict[str, str]] = None
    output: Optional[str] = None
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "scenes": [scene.model_dump(mode="json", by_alias=True) for scene in self.scenes],
            "config": self.config.model_dump(mode="json", by_alias=True),
            "status": self.status.value,
            "error": self.error,
            "output": self.output,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VideoJob":
        return cls(
            id=data["id"],
            scenes=[SceneInput.model_validate(scene) for scene in data.get("scenes", [])],
            config=RenderConfig.model_validate(data.get("config") or {}),
            status=JobStatus(data["status"]),
            error=data.get("error"),
            output=data.get("output"),
            created_at=data.get("created_at", datetime.now().isoformat()),
            updated_at=data.get("updated_at", datetime.now().isoformat()),
        )


class StatusStore:
    """Job id -> VideoJob map, mutated one record per operation."""

    def __init__(self, storage_dir: Optional[Path] = None):
        self._storage_dir = Path(storage_dir) if storage_dir else None
        self._jobs: Dict[str, VideoJob] = {}
        self._lock = RLock()

        if self._storage_dir:
            self._storage_dir.mkdir(parents=True, exist_ok=True)
            self._load_jobs()

    @property
    def persistent(self) -> bool:
        return self._storage_dir is not None

    def _job_file(self, job_id: str) -> Path:
        return self._storage_dir / f"{job_id}.json"

    def _load_jobs(self) -> None:
        loaded: List[VideoJob] = []
        for job_file in self._storage_dir.glob("*.json"):
            try:
                with open(job_file, "r", encoding="utf-8") as f:
                    loaded.append(VideoJob.from_dict(json.load(f)))
            except (OSError, ValueError, KeyError) as exc:
                logger.error("Skipping unreadable job file", extra={"file": str(job_file), "error": str(exc)})

        loaded.sort(key=lambda job: (job.created_at, job.id))
        with self._lock:
            for job in loaded:
                self._jobs[job.id] = job
        if loaded:
            logger.info("Loaded persisted jobs", extra={"count": len(loaded)})

    def _save_job(self, job: VideoJob) -> None:
        if not self._storage_dir:
            return
        with open(self._job_file(job.id), "w", encoding="utf-8") as f:
            json.dump(job.to_dict(), f, indent=2, ensure_ascii=False)

    def _remove_job_file(self, job_id: str) -> None:
        if self._storage_dir:
            self._job_file(job_id).unlink(missing_ok=True)

    def create(self, job_id: str, scenes: List[SceneInput], config: RenderConfig) -> VideoJob:
        """Store a new queued job."""
        with self._lock:
            if job_id in self._jobs:
                raise JobConflictError(f"Job {job_id} already exists")
            job = VideoJob(id=job_id, scenes=list(scenes), config=config)
            self._save_job(job)
            self._jobs[job_id] = job
            return copy.deepcopy(job)

    def get(self, job_id: str) -> Optional[VideoJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            return copy.deepcopy(job) if job else None

    def list(self) -> List[VideoJob]:
        """Snapshot of all jobs in insertion order."""
        with self._lock:
            return [copy.deepcopy(job) for job in self._jobs.values()]

    def update_status(
        self,
        job_id: str,
        status: JobStatus,
        error: Optional[Dict[str, str]] = None,
        output: Optional[str] = None,
    ) -> VideoJob:
        """Move a job to ``status``; backward or skipped transitions are rejected."""
        with self._lock:
            job = self._jobs.get(job_id)
            if not job:
                raise NotFoundError(f"Video {job_id} not found")
            if not job.status.can_transition_to(status):
                raise JobConflictError(
                    f"Job {job_id} cannot move from {job.status.value} to {status.value}"
                )

            updated = copy.deepcopy(job)
            updated.status = status
            if error is not None:
                updated.error = error
            if output is not None:
                updated.output = output
            updated.updated_at = datetime.now().isoformat()

            # memory is committed first; a failed write is logged, not raised
            self._jobs[job_id] = updated
            try:
                self._save_job(updated)
            except OSError as exc:
                logger.error("Failed to persist job status", extra={
                    "job_id": job_id,
                    "status": status.value,
                    "error": str(exc),
                })
            return copy.deepcopy(updated)

    def delete(self, job_id: str) -> Optional[VideoJob]:
        """Remove a job; unknown ids are a no-op. Processing jobs cannot be deleted."""
        with self._lock:
            job = self._jobs.get(job_id)
            if not job:
                return None
            if job.status == JobStatus.PROCESSING:
                raise JobConflictError(f"Video {job_id} is being processed and cannot be deleted")

            del self._jobs[job_id]
            self._remove_job_file(job_id)
            return job

    def recover_interrupted(self) -> List[VideoJob]:
        """
        Settle jobs left over from a previous run.

        Processing jobs are marked failed; queued jobs are returned in
        creation order so the caller can enqueue them again.
        """
        with self._lock:
            pending: List[VideoJob] = []
            for job in list(self._jobs.values()):
                if job.status == JobStatus.PROCESSING:
                    self.update_status(
                        job.id,
                        JobStatus.FAILED,
                        error={"stage": INTERRUPTED_STAGE, "message": INTERRUPTED_MESSAGE},
                    )
                elif job.status == JobStatus.QUEUED:
                    pending.append(copy.deepcopy(job))

        if pending:
            logger.info("Recovered queued jobs", extra={"count": len(pending)})
        return pending
