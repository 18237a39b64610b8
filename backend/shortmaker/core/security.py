"""
Input validation for values that end up in filesystem paths.
"""

import re
from pathlib import Path

from .logging import get_logger

logger = get_logger(__name__, component="security")

JOB_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def validate_job_id(job_id: str) -> bool:
    """
    Check that a job id has the shape the orchestrator issues (``uuid4().hex``).

    Job ids become file and directory names under the data directory, so
    anything else (``..``, separators, encoded traversal) is rejected.

    Example:
        >>> validate_job_id("3f1c9a0e5b7d4c2a8e6f0b1d2c3a4e5f")
        True
        >>> validate_job_id("..")
        False
    """
    is_valid = bool(JOB_ID_PATTERN.match(job_id or ""))
    if not is_valid:
        logger.warning("Invalid job ID format", extra={"job_id": job_id})
    return is_valid


def validate_path_within_directory(path: Path, directory: Path) -> bool:
    """True when ``path`` resolves to a location inside ``directory``."""
    try:
        path.resolve().relative_to(directory.resolve())
    except ValueError:
        logger.warning("Path escapes its directory", extra={
            "path": str(path),
            "directory": str(directory),
        })
        return False
    return True
