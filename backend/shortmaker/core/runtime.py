"""
Render host readiness.

Jobs shell out to ffmpeg/ffprobe, write narration and artifacts under the data
directories and look up stock footage on Pexels. ``inspect_render_host`` runs
once at startup and its report is served by ``/health``.
"""

import shutil
from pathlib import Path
from typing import Dict, Mapping, Optional

RENDER_TOOLS = ("ffmpeg", "ffprobe")
WRITE_CHECK_NAME = ".shortmaker-write-check"


def locate_render_tools() -> Dict[str, Optional[str]]:
    """Executable path of each render tool, None when it is not on PATH."""
    return {tool: shutil.which(tool) for tool in RENDER_TOOLS}


def check_data_directory(path: Path) -> Dict[str, object]:
    """Create ``path`` if needed and confirm the service can write into it."""
    status: Dict[str, object] = {"path": str(path), "writable": False}
    marker = path / WRITE_CHECK_NAME
    try:
        path.mkdir(parents=True, exist_ok=True)
        marker.write_text("ok", encoding="utf-8")
        marker.unlink()
    except OSError as exc:
        status["error"] = str(exc)
        return status
    status["writable"] = True
    return status


def inspect_render_host(
    directories: Mapping[str, Path],
    *,
    strict_tools: bool,
    footage_search_configured: bool = True,
    music_tracks: int = 0,
) -> Dict[str, object]:
    """
    Build the startup readiness report.

    Unwritable data directories always abort startup. Missing render tools
    abort only with ``strict_tools``; otherwise the host is reported as
    degraded and jobs fail at the render stage.
    """
    dirs = {name: check_data_directory(path) for name, path in directories.items()}
    unwritable = sorted(name for name, status in dirs.items() if not status["writable"])
    if unwritable:
        raise RuntimeError("Data directories are not writable: " + ", ".join(unwritable))

    tools = locate_render_tools()
    missing = [tool for tool, location in tools.items() if location is None]
    if missing and strict_tools:
        raise RuntimeError("Missing render tools: " + ", ".join(missing))

    return {
        "ok": not missing,
        "directories": dirs,
        "tools": {"found": {t: loc for t, loc in tools.items() if loc}, "missing": missing},
        "footage_search": "configured" if footage_search_configured else "missing PEXELS_API_KEY",
        "music_tracks": music_tracks,
    }
