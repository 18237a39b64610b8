"""
Core Exceptions
Error taxonomy shared by the orchestrator, the pipeline and the HTTP layer.
"""

from typing import List, Optional


class ShortMakerError(Exception):
    """Base exception for all application errors."""
    pass


class ValidationError(ShortMakerError):
    """A submission was rejected before it was queued."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.missing_fields = missing_fields or []


class NotFoundError(ShortMakerError):
    """Unknown job id, or an artifact that is not ready yet."""
    pass


class JobConflictError(ShortMakerError):
    """The requested operation is not allowed in the job's current state."""
    pass


class ExternalServiceError(ShortMakerError):
    """A collaborator call failed while a job was being processed."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage}: {message}")
        self.stage = stage
        self.message = message

    def to_dict(self) -> dict:
        return {"stage": self.stage, "message": self.message}


class EnhancementFailure(ShortMakerError):
    """Prompt enhancement failed; callers fall back to the raw keywords."""
    pass
