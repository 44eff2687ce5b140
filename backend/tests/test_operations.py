"""Tests for the trim and add_text single-pass commands."""

import pytest

from cutroom.render.operations import build_add_text_command, build_trim_command, operation_filename
from cutroom.render.text_renderer import escape_drawtext
from cutroom.render.timeline_compiler import output_location
from cutroom.schemas.job import parse_job_params


@pytest.fixture
def trim_output(settings):
    return output_location(settings, "user1", operation_filename("trim", "job-9"))


class TestTrim:
    def test_stream_copy_cut(self, trim_output):
        params = parse_job_params("trim", {"start_time": 2.5, "end_time": 7})
        args = build_trim_command(params, "/media/in.mp4", trim_output).to_args()

        assert args == [
            "-y",
            "-ss", "2.5",
            "-i", "/media/in.mp4",
            "-c", "copy",
            "-to", "4.5",
            str(trim_output.path),
        ]

    def test_negative_length_is_passed_through(self, trim_output):
        params = parse_job_params("trim", {"start_time": 5.0, "end_time": 2.0})
        args = build_trim_command(params, "in.mp4", trim_output).to_args()
        assert args[args.index("-to") + 1] == "-3"

    def test_output_naming(self, trim_output):
        assert trim_output.path.name == "trim_job-9.mp4"
        assert trim_output.url == "/uploads/user1/exports/trim_job-9.mp4"


class TestAddText:
    def test_drawtext_window_and_audio_copy(self, settings):
        params = parse_job_params(
            "add_text",
            {
                "text": "Hello",
                "x": "100",
                "y": "50",
                "fontsize": 36,
                "fontcolor": "white",
                "start_time": 1,
                "duration": 2.5,
                "fontfile": "/fonts/Sans.ttf",
            },
        )
        output = output_location(settings, "user1", operation_filename("add_text", "j"))
        command = build_add_text_command(params, "in.mp4", output)

        assert command.filter_graph.render() == (
            "[0:v]drawtext=fontfile='/fonts/Sans.ttf':text='Hello':x=100:y=50:fontsize=36:"
            "fontcolor=white:enable='gte(t,1)*lt(t,3.5)'[v]"
        )
        args = command.to_args()
        assert args[args.index("-c:a") + 1] == "copy"
        assert ["-map", "[v]", "-map", "0:a?"] == args[args.index("-map"):args.index("-map") + 4]


class TestEscapeDrawtext:
    def test_quotes_and_colons(self):
        assert escape_drawtext("it's 10:30") == "it'\\''s 10\\:30"

    def test_backslash(self):
        assert escape_drawtext("a\\b") == "a\\\\b"

    def test_percent_is_literal(self):
        assert escape_drawtext("50% off") == "50\\% off"
