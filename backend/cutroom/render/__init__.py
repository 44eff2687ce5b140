from cutroom.render.audio_mixer import AudioMixer
from cutroom.render.engine import MediaEngine
from cutroom.render.filter_graph import EngineCommand, EngineInput, FilterGraph, FilterNode
from cutroom.render.layer_compositor import LayerCompositor
from cutroom.render.media import MediaResolver
from cutroom.render.operations import build_add_text_command, build_trim_command
from cutroom.render.text_renderer import TextRenderer
from cutroom.render.timeline_compiler import TimelineCompiler, parse_resolution

__all__ = [
    "AudioMixer",
    "EngineCommand",
    "EngineInput",
    "FilterGraph",
    "FilterNode",
    "LayerCompositor",
    "MediaEngine",
    "MediaResolver",
    "TextRenderer",
    "TimelineCompiler",
    "build_add_text_command",
    "build_trim_command",
    "parse_resolution",
]
