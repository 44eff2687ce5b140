"""Compile an editor timeline into a single ffmpeg composition command.

Pipeline per export:
1. Parse the output resolution (fails before anything else is built)
2. Base canvas (solid color, full duration)
3. Media items in the given order: overlays, delayed audio branches, text
4. Audio mix, or the placeholder clip when nothing usable was found
5. Codec, quality and timing flags
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from cutroom.config import Settings
from cutroom.exceptions import InvalidIdError, InvalidResolutionError
from cutroom.render.audio_mixer import AudioMixer
from cutroom.render.filter_graph import EngineCommand, EngineInput, FilterGraph, FilterNode, format_number
from cutroom.render.layer_compositor import Canvas, LayerCompositor
from cutroom.render.media import MediaResolver
from cutroom.render.text_renderer import TextRenderer
from cutroom.schemas.export import ExportRequest, ExportSettings, MediaItem

logger = logging.getLogger(__name__)

_RESOLUTION_RE = re.compile(r"^(\d+)x(\d+)$")

PLACEHOLDER_COLOR = "blue"
PLACEHOLDER_TONE_HZ = 440
PLACEHOLDER_CAPTION = "No media files found"

# (video codec, audio codec) per container; anything else gets the default
CONTAINER_CODECS: dict[str, tuple[str, str]] = {
    "webm": ("libvpx-vp9", "libopus"),
}
DEFAULT_CODECS = ("libx264", "aac")


@dataclass
class OutputLocation:
    path: Path
    url: str


def parse_resolution(resolution: str) -> tuple[int, int]:
    """Parse ``"WIDTHxHEIGHT"`` into positive integers."""
    match = _RESOLUTION_RE.match(resolution.strip()) if resolution else None
    if not match:
        raise InvalidResolutionError(resolution)
    width, height = int(match.group(1)), int(match.group(2))
    if width <= 0 or height <= 0:
        raise InvalidResolutionError(resolution)
    return width, height


def _check_path_segment(user_id: str) -> None:
    if not user_id or "/" in user_id or "\\" in user_id or ".." in user_id:
        raise InvalidIdError("user ID", user_id)


def output_location(settings: Settings, user_id: str, filename: str) -> OutputLocation:
    """Where a job's output for ``user_id`` is written and served from."""
    _check_path_segment(user_id)
    path = Path(settings.uploads_root) / user_id / "exports" / filename
    prefix = settings.uploads_url_prefix.rstrip("/")
    return OutputLocation(path=path, url=f"{prefix}/{user_id}/exports/{filename}")


def export_output_location(settings: Settings, user_id: str, job_id: str, fmt: str) -> OutputLocation:
    return output_location(settings, user_id, f"export_{job_id}.{fmt}")


class TimelineCompiler:
    """Builds composition commands from ``ExportRequest`` snapshots."""

    def __init__(self, resolver: MediaResolver, settings: Settings):
        self.resolver = resolver
        self.settings = settings

    def compile(
        self,
        request: ExportRequest,
        export_settings: ExportSettings,
        output: OutputLocation,
    ) -> EngineCommand:
        width, height = parse_resolution(export_settings.resolution)
        duration = request.duration

        graph = FilterGraph()
        compositor = LayerCompositor(graph, Canvas(width, height, duration, self.settings.render_fps))
        mixer = AudioMixer(graph)
        texts = TextRenderer(graph)
        inputs: list[EngineInput] = []
        has_visual = False

        for item in request.media_items:
            if item.type == "text":
                label = texts.draw(
                    compositor.current,
                    text=item.text,
                    x=item.x,
                    y=item.y,
                    start=item.start_time,
                    end=item.end_time,
                    font_size=item.font_size,
                    color=item.color,
                )
                if label:
                    compositor.replace_current(label)
                    has_visual = True
                continue

            if item.type == "audio" and item.is_muted:
                continue

            index = self._add_input(inputs, item)
            if index is None:
                continue

            if item.type in ("video", "image"):
                compositor.overlay(
                    index,
                    x=item.x,
                    y=item.y,
                    width=item.width,
                    height=item.height,
                    start=item.start_time,
                    end=item.end_time,
                )
                has_visual = True

            # Images carry no audio stream
            if item.type in ("video", "audio") and not item.is_muted:
                mixer.add_delayed(index, item.start_time)

        audio_label = mixer.finalize()

        if not has_visual and audio_label is None:
            logger.info("[EXPORT] No usable media in project, rendering placeholder")
            command = self._placeholder(width, height, duration, export_settings, output)
        else:
            maps = [f"[{compositor.current}]"]
            if audio_label:
                maps.append(f"[{audio_label}]")
            command = EngineCommand(
                inputs=inputs,
                filter_graph=graph,
                maps=maps,
                codec_args=self._codec_args(export_settings, has_audio=audio_label is not None),
                output_args=self._output_args(duration),
                output_path=str(output.path),
                output_url=output.url,
            )
            logger.info(f"[EXPORT] Filter graph: {graph.render()}")

        logger.info(
            f"[EXPORT] {len(request.media_items)} items, duration={format_number(duration)}s, "
            f"{width}x{height} {export_settings.format} crf={export_settings.crf}"
        )
        return command

    def _add_input(self, inputs: list[EngineInput], item: MediaItem) -> int | None:
        path = self.resolver.resolve(item.url)
        if path is None:
            logger.warning(f"[EXPORT] Skipping {item.type} item {item.id or '?'}: source not found ({item.url})")
            return None
        inputs.append(EngineInput(str(path)))
        return len(inputs) - 1

    def _placeholder(
        self,
        width: int,
        height: int,
        duration: float,
        export_settings: ExportSettings,
        output: OutputLocation,
    ) -> EngineCommand:
        graph = FilterGraph()
        graph.add(
            FilterNode(
                "drawtext",
                inputs=["0:v"],
                outputs=[graph.reserve("v")],
                options={
                    "text": f"'{PLACEHOLDER_CAPTION}'",
                    "x": "(w-text_w)/2",
                    "y": "(h-text_h)/2",
                    "fontsize": "48",
                    "fontcolor": "white",
                },
            )
        )
        d = format_number(duration)
        return EngineCommand(
            inputs=[
                EngineInput(f"color=c={PLACEHOLDER_COLOR}:s={width}x{height}:d={d}", ["-f", "lavfi"]),
                EngineInput(f"sine=frequency={PLACEHOLDER_TONE_HZ}:duration={d}", ["-f", "lavfi"]),
            ],
            filter_graph=graph,
            maps=["[v]", "1:a"],
            codec_args=self._codec_args(export_settings, has_audio=True),
            output_args=self._output_args(duration),
            output_path=str(output.path),
            output_url=output.url,
        )

    def _codec_args(self, export_settings: ExportSettings, *, has_audio: bool) -> list[str]:
        video_codec, audio_codec = CONTAINER_CODECS.get(export_settings.format.lower(), DEFAULT_CODECS)
        args = ["-c:v", video_codec, "-crf", str(export_settings.crf)]
        if video_codec == "libvpx-vp9":
            # Constant-quality mode for VP9
            args.extend(["-b:v", "0"])
        args.extend(["-pix_fmt", "yuv420p"])
        if has_audio:
            args.extend(["-c:a", audio_codec, "-b:a", self.settings.render_audio_bitrate])
        return args

    def _output_args(self, duration: float) -> list[str]:
        return ["-t", format_number(duration), "-r", str(self.settings.render_fps)]
