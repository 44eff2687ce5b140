"""Single-pass ffmpeg commands for the trim and add_text actions."""

import logging
from pathlib import Path

from cutroom.render.filter_graph import EngineCommand, EngineInput, FilterGraph, format_number
from cutroom.render.text_renderer import drawtext_node
from cutroom.render.timeline_compiler import OutputLocation
from cutroom.schemas.job import AddTextParams, TrimParams

logger = logging.getLogger(__name__)

SINGLE_OPERATION_FORMAT = "mp4"


def operation_filename(action: str, job_id: str) -> str:
    return f"{action}_{job_id}.{SINGLE_OPERATION_FORMAT}"


def build_trim_command(params: TrimParams, input_path: str | Path, output: OutputLocation) -> EngineCommand:
    """Stream-copy cut from ``start_time`` for ``end_time - start_time`` seconds.

    A negative length is passed through as-is; ffmpeg rejects it.
    """
    command = EngineCommand(
        inputs=[EngineInput(str(input_path), ["-ss", format_number(params.start_time)])],
        codec_args=["-c", "copy"],
        output_args=["-to", format_number(params.end_time - params.start_time)],
        output_path=str(output.path),
        output_url=output.url,
    )
    logger.info(f"[TRIM] ffmpeg {' '.join(command.to_args())}")
    return command


def build_add_text_command(params: AddTextParams, input_path: str | Path, output: OutputLocation) -> EngineCommand:
    """Burn one text overlay into the video; audio is copied untouched."""
    graph = FilterGraph()
    graph.add(
        drawtext_node(
            "0:v",
            graph.reserve("v"),
            text=params.text,
            x=params.x,
            y=params.y,
            fontsize=params.fontsize,
            fontcolor=params.fontcolor,
            start=params.start_time,
            end=params.start_time + params.duration,
            fontfile=params.fontfile,
        )
    )
    command = EngineCommand(
        inputs=[EngineInput(str(input_path))],
        filter_graph=graph,
        maps=["[v]", "0:a?"],
        codec_args=["-c:a", "copy"],
        output_path=str(output.path),
        output_url=output.url,
    )
    logger.info(f"[ADD_TEXT] ffmpeg {' '.join(command.to_args())}")
    return command
