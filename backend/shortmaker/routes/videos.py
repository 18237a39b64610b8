"""
Short video routes

All handlers delegate to the VideoOrchestrator stored on ``app.state``.
Domain errors (ValidationError, NotFoundError, JobConflictError) are turned
into HTTP responses by the exception handlers registered in main.py.
"""

from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse

from ..core import list_voices
from ..models import (
    CreateVideoRequest,
    CreateVideoResponse,
    DeleteVideoResponse,
    JobError,
    VideoListResponse,
    VideoStatusResponse,
    VideoSummary,
)
from ..services.music import MusicLibrary
from ..services.orchestration import VideoOrchestrator

router = APIRouter(prefix="/api", tags=["videos"])


def get_orchestrator(request: Request) -> VideoOrchestrator:
    return request.app.state.orchestrator


@router.post("/short-video", status_code=201, response_model=CreateVideoResponse, response_model_by_alias=True)
async def create_short_video(body: CreateVideoRequest, orchestrator: VideoOrchestrator = Depends(get_orchestrator)):
    """Queue a new video; processing happens in the background."""
    video_id = orchestrator.submit(body.scenes, body.config)
    return CreateVideoResponse(video_id=video_id)


@router.get("/short-video/{video_id}/status", response_model=VideoStatusResponse, response_model_exclude_none=True)
async def get_video_status(video_id: str, orchestrator: VideoOrchestrator = Depends(get_orchestrator)):
    job = orchestrator.status(video_id)
    error = JobError(**job.error) if job.error else None
    return VideoStatusResponse(status=job.status.value, error=error)


@router.get("/short-videos", response_model=VideoListResponse)
async def list_videos(orchestrator: VideoOrchestrator = Depends(get_orchestrator)):
    return VideoListResponse(videos=[
        VideoSummary(id=job.id, status=job.status.value) for job in orchestrator.list()
    ])


@router.delete("/short-video/{video_id}", response_model=DeleteVideoResponse)
async def delete_video(video_id: str, orchestrator: VideoOrchestrator = Depends(get_orchestrator)):
    """Delete a job and its artifact. Unknown ids succeed as well."""
    orchestrator.delete(video_id)
    return DeleteVideoResponse(success=True)


@router.get("/short-video/{video_id}")
async def get_video(video_id: str, orchestrator: VideoOrchestrator = Depends(get_orchestrator)):
    """Stream a ready video from disk."""
    path = orchestrator.artifact_file(video_id)
    return FileResponse(
        str(path),
        media_type="video/mp4",
        filename=f"{video_id}.mp4",
        content_disposition_type="inline",
    )


@router.get("/music-tags", response_model=List[str])
async def list_music_tags():
    return MusicLibrary.list_tags()


@router.get("/voices")
async def get_voices():
    return list_voices()
