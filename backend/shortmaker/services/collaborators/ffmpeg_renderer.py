"""
Composition rendering with ffmpeg

Every scene is filtered on its own (cover-scaled looping footage, entrance
animation, caption pages drawn with drawtext) and the scenes are then chained
with xfade/acrossfade so each boundary overlaps by the transition length.
The narration mix is finally laid over the looping background track.
"""

import asyncio
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ...config.constants import ENTRANCE_SECONDS
from ...core import get_logger
from ...models.composition import CaptionAnchor, CompositionSpec, EntranceAnimation, SceneComposition
from .base import Renderer

logger = get_logger(__name__, component="ffmpeg_renderer")

CaptionFiles = Dict[Tuple[int, int, int], str]

ROTATE_IN_RADIANS = 0.2618  # 15 degrees
LINE_HEIGHT_RATIO = 1.2


def escape_filter_value(value: str) -> str:
    """Escape a value embedded in an ffmpeg filter argument."""
    return value.replace("\\", "\\\\").replace(":", "\\:").replace("'", "\\'")


def _seconds(frames: int, fps: int) -> str:
    return f"{frames / fps:.6f}"


def entrance_filter(label_in: str, label_out: str, entrance: EntranceAnimation, scene: SceneComposition,
                    width: int, height: int, fps: int, index: int) -> str:
    """Filter snippet animating the first ENTRANCE_SECONDS of a scene."""
    duration = scene.duration_frames / fps
    e = f"{min(ENTRANCE_SECONDS, duration) or ENTRANCE_SECONDS:.3f}"
    fade = f"fade=t=in:st=0:d={e}"
    progress = f"min(t/{e},1)"

    if entrance == EntranceAnimation.FADE:
        return f"[{label_in}]{fade}[{label_out}]"

    if entrance == EntranceAnimation.ROTATE_IN:
        angle = f"-{ROTATE_IN_RADIANS}*(1-{progress})"
        return f"[{label_in}]rotate=a='{angle}':fillcolor=black,{fade}[{label_out}]"

    if entrance == EntranceAnimation.ZOOM_OUT:
        zoom = f"if(lt(it,{e}),1.1-0.1*it/{e},1)"
        return (
            f"[{label_in}]zoompan=z='{zoom}':d=1:s={width}x{height}:fps={fps}"
            f":x='iw/2-(iw/zoom/2)':y='ih/2-(ih/zoom/2)',{fade}[{label_out}]"
        )

    background = f"bg{index}"
    source = f"color=c=black:s={width}x{height}:r={fps}:d={duration:.6f}[{background}]"

    if entrance == EntranceAnimation.ZOOM_IN:
        scaled = f"zi{index}"
        scale = f"{0.85}+{0.15}*{progress}"
        return (
            f"{source};[{label_in}]scale=w='trunc(iw*({scale})/2)*2':h='trunc(ih*({scale})/2)*2':eval=frame[{scaled}];"
            f"[{background}][{scaled}]overlay=x='(W-w)/2':y='(H-h)/2':shortest=1,{fade}[{label_out}]"
        )

    positions = {
        EntranceAnimation.SLIDE_LEFT: (f"-w*(1-{progress})", "0"),
        EntranceAnimation.SLIDE_RIGHT: (f"w*(1-{progress})", "0"),
        EntranceAnimation.SLIDE_UP: ("0", f"h*(1-{progress})"),
        EntranceAnimation.SLIDE_DOWN: ("0", f"-h*(1-{progress})"),
    }
    x, y = positions[entrance]
    return (
        f"{source};[{background}][{label_in}]overlay=x='{x}':y='{y}':shortest=1,{fade}[{label_out}]"
    )


def caption_y(anchor: CaptionAnchor, offset_px: int, line_index: int, line_total: int, line_height: int) -> str:
    if anchor == CaptionAnchor.TOP:
        return str(offset_px + line_index * line_height)
    if anchor == CaptionAnchor.BOTTOM:
        return f"h-{offset_px + (line_total - line_index) * line_height}"
    return f"(h-{line_total * line_height})/2+{line_index * line_height}"


def caption_filters(spec: CompositionSpec, scene_index: int, caption_files: CaptionFiles,
                    font: Optional[str] = None) -> List[str]:
    """drawtext filters for every caption line of one scene."""
    style = spec.caption_style
    line_height = int(style.font_size * LINE_HEIGHT_RATIO)
    font_option = f":fontfile='{escape_filter_value(font)}'" if font else ""

    filters: List[str] = []
    scene = spec.scenes[scene_index]
    for page_index, page in enumerate(scene.captions):
        first = page.from_frame
        last = page.from_frame + max(page.duration_frames, 1) - 1
        for line_index, _line in enumerate(page.lines):
            text_file = caption_files[(scene_index, page_index, line_index)]
            y = caption_y(style.placement.anchor, style.placement.offset_px, line_index, len(page.lines), line_height)
            filters.append(
                f"drawtext=textfile='{escape_filter_value(text_file)}'{font_option}"
                f":fontsize={style.font_size}:fontcolor=white:borderw=2:bordercolor=black"
                f":box=1:boxcolor={style.highlight_color}:boxborderw=10"
                f":x=(w-text_w)/2:y={y}:enable='between(n,{first},{last})'"
            )
    return filters


def write_caption_files(spec: CompositionSpec, work_dir: Path) -> CaptionFiles:
    """drawtext reads each caption line from its own file to avoid text escaping."""
    files: CaptionFiles = {}
    for scene_index, scene in enumerate(spec.scenes):
        for page_index, page in enumerate(scene.captions):
            for line_index, line in enumerate(page.lines):
                path = work_dir / f"caption_{scene_index}_{page_index}_{line_index}.txt"
                path.write_text(line.upper(), encoding="utf-8")
                files[(scene_index, page_index, line_index)] = str(path)
    return files


def build_ffmpeg_command(spec: CompositionSpec, caption_files: CaptionFiles, output_path: str,
                         font: Optional[str] = None) -> List[str]:
    """Build the complete ffmpeg invocation for a composition."""
    if not spec.scenes:
        raise ValueError("composition has no scenes")

    fps, width, height = spec.fps, spec.width, spec.height
    cmd: List[str] = ["ffmpeg", "-y"]
    graph: List[str] = []

    for i, scene in enumerate(spec.scenes):
        cmd += ["-stream_loop", "-1", "-i", scene.footage]
        if scene.audio:
            cmd += ["-i", scene.audio[0]]
        else:
            cmd += ["-f", "lavfi", "-i", "anullsrc=r=44100:cl=stereo"]

        video_in, audio_in = 2 * i, 2 * i + 1
        scene_seconds = _seconds(scene.duration_frames, fps)

        base = (
            f"[{video_in}:v]scale={width}:{height}:force_original_aspect_ratio=increase,"
            f"crop={width}:{height},setsar=1,fps={fps},trim=end_frame={scene.duration_frames},"
            f"setpts=PTS-STARTPTS,settb=AVTB[s{i}]"
        )
        graph.append(base)
        graph.append(entrance_filter(f"s{i}", f"e{i}", scene.entrance, scene, width, height, fps, i))

        captions = caption_filters(spec, i, caption_files, font)
        chain = ",".join(captions + ["format=yuv420p"])
        graph.append(f"[e{i}]{chain}[v{i}]")

        graph.append(
            f"[{audio_in}:a]aresample=44100,aformat=channel_layouts=stereo,apad,"
            f"atrim=end={scene_seconds},asetpts=PTS-STARTPTS[a{i}]"
        )

    video_label, audio_label = "v0", "a0"
    elapsed = spec.scenes[0].duration_frames
    for i in range(1, len(spec.scenes)):
        boundary = spec.scenes[i - 1]
        overlap = boundary.transition_duration_frames
        offset = _seconds(elapsed - overlap, fps)
        transition = boundary.transition_kind.value if boundary.transition_kind else "fade"
        graph.append(
            f"[{video_label}][v{i}]xfade=transition={transition}:duration={_seconds(overlap, fps)}"
            f":offset={offset}[vx{i}]"
        )
        graph.append(f"[{audio_label}][a{i}]acrossfade=d={_seconds(overlap, fps)}[ax{i}]")
        video_label, audio_label = f"vx{i}", f"ax{i}"
        elapsed += spec.scenes[i].duration_frames - overlap

    if spec.music:
        music_in = 2 * len(spec.scenes)
        if spec.music.loop:
            cmd += ["-stream_loop", "-1"]
        cmd += ["-i", spec.music.file]
        music_start = _seconds(spec.music.start_frame, fps)
        music_end = _seconds(spec.music.end_frame, fps)
        graph.append(
            f"[{music_in}:a]aresample=44100,aformat=channel_layouts=stereo,"
            f"atrim=start={music_start}:end={music_end},asetpts=PTS-STARTPTS,volume={spec.music.volume}[music]"
        )
        graph.append(f"[{audio_label}][music]amix=inputs=2:duration=first:normalize=0[aout]")
        audio_label = "aout"

    cmd += [
        "-filter_complex", ";".join(graph),
        "-map", f"[{video_label}]",
        "-map", f"[{audio_label}]",
        "-frames:v", str(spec.total_frames),
        "-r", str(fps),
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        "-c:a", "aac",
        "-movflags", "+faststart",
        output_path,
    ]
    return cmd


class FFmpegRenderer(Renderer):
    """Renders a CompositionSpec to MP4 bytes with a single ffmpeg run."""

    def __init__(self, font_file: Optional[str] = None, work_root: Optional[Path] = None):
        self.font_file = font_file
        self.work_root = work_root

    async def render(self, spec: CompositionSpec) -> bytes:
        with tempfile.TemporaryDirectory(dir=self.work_root) as work_dir:
            work_path = Path(work_dir)
            caption_files = write_caption_files(spec, work_path)
            output_path = str(work_path / "output.mp4")
            cmd = build_ffmpeg_command(spec, caption_files, output_path, font=self.font_file)

            logger.info("Rendering composition", extra={
                "scenes": len(spec.scenes),
                "total_frames": spec.total_frames,
                "fps": spec.fps,
            })
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            _, stderr = await process.communicate()

            if process.returncode != 0:
                raise RuntimeError(f"ffmpeg exited with {process.returncode}: {stderr.decode(errors='replace')[-500:]}")

            return Path(output_path).read_bytes()
