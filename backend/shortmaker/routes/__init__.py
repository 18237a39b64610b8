"""
Routes module - contains all API route handlers
"""

from .videos import router as videos_router

__all__ = [
    "videos_router",
]
