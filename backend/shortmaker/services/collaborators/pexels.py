"""
Stock footage search through the Pexels video API
"""

from typing import Any, Dict, List, Optional, Sequence

import httpx

from ...core import get_logger
from ...models.video import Orientation
from .base import FootageSearch

logger = get_logger(__name__, component="pexels")

PEXELS_VIDEO_SEARCH_URL = "https://api.pexels.com/videos/search"

TARGET_WIDTH = {
    Orientation.PORTRAIT: 1080,
    Orientation.LANDSCAPE: 1920,
}


def _matches_orientation(width: int, height: int, orientation: Orientation) -> bool:
    if orientation == Orientation.PORTRAIT:
        return height > width
    return width > height


def select_video_file(
    videos: List[Dict[str, Any]],
    min_duration_seconds: float,
    orientation: Orientation,
) -> Optional[str]:
    """Pick the first long-enough video and its file closest to the target width."""
    target_width = TARGET_WIDTH[orientation]

    for video in videos:
        if float(video.get("duration") or 0) < min_duration_seconds:
            continue

        files = [
            f for f in video.get("video_files", [])
            if f.get("file_type") == "video/mp4"
            and f.get("link")
            and f.get("width") and f.get("height")
            and _matches_orientation(f["width"], f["height"], orientation)
        ]
        if not files:
            continue

        best = min(files, key=lambda f: abs(f["width"] - target_width))
        return best["link"]

    return None


class PexelsFootageSearch(FootageSearch):
    """Queries Pexels once per keyword until a usable clip is found."""

    def __init__(self, api_key: str, per_page: int = 40, timeout: float = 30.0):
        if not api_key:
            raise ValueError("PEXELS_API_KEY is required for footage search")
        self.api_key = api_key
        self.per_page = per_page
        self.timeout = timeout

    async def _search_term(self, client: httpx.AsyncClient, term: str, orientation: Orientation) -> List[Dict[str, Any]]:
        response = await client.get(
            PEXELS_VIDEO_SEARCH_URL,
            params={
                "query": term,
                "per_page": self.per_page,
                "orientation": orientation.value,
            },
            headers={"Authorization": self.api_key},
        )
        response.raise_for_status()
        return response.json().get("videos", [])

    async def search(
        self,
        keywords: Sequence[str],
        min_duration_seconds: float,
        orientation: Orientation = Orientation.PORTRAIT,
    ) -> Optional[str]:
        terms = [k.strip() for k in keywords if k and k.strip()]
        if not terms:
            return None

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for term in terms:
                videos = await self._search_term(client, term, orientation)
                link = select_video_file(videos, min_duration_seconds, orientation)
                if link:
                    logger.debug("Footage found", extra={"term": term, "candidates": len(videos)})
                    return link
                logger.debug("No footage for term", extra={"term": term, "candidates": len(videos)})

        return None
