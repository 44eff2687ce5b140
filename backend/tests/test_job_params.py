"""Tests for typed job parameter parsing."""

import pytest

from cutroom.exceptions import JobParameterError, UnsupportedActionError
from cutroom.schemas.job import AddTextParams, ExportParams, TrimParams, parse_job_params

ADD_TEXT = {
    "text": "Hello",
    "x": "10",
    "y": "(h-text_h)/2",
    "fontsize": 32,
    "fontcolor": "yellow",
    "start_time": 1.0,
    "duration": 2.5,
}


class TestTrimParams:
    def test_valid(self):
        params = parse_job_params("trim", {"start_time": 1.5, "end_time": 4})
        assert isinstance(params, TrimParams)
        assert params.start_time == 1.5
        assert params.end_time == 4.0

    def test_end_before_start_is_accepted(self):
        params = parse_job_params("trim", {"start_time": 5.0, "end_time": 2.0})
        assert params.end_time < params.start_time

    def test_missing_field_is_named(self):
        with pytest.raises(JobParameterError) as exc_info:
            parse_job_params("trim", {"start_time": 1.0})
        assert exc_info.value.field == "end_time"
        assert "end_time" in exc_info.value.message

    @pytest.mark.parametrize("bad", ["5", True, None, [1]])
    def test_non_numeric_rejected(self, bad):
        with pytest.raises(JobParameterError) as exc_info:
            parse_job_params("trim", {"start_time": bad, "end_time": 2.0})
        assert exc_info.value.field == "start_time"


class TestAddTextParams:
    def test_valid(self):
        params = parse_job_params("add_text", ADD_TEXT)
        assert isinstance(params, AddTextParams)
        assert params.fontfile is None
        assert params.y == "(h-text_h)/2"

    def test_numeric_coordinates_accepted(self):
        params = parse_job_params("add_text", {**ADD_TEXT, "x": 100, "y": 12.5})
        assert params.x == "100"
        assert params.y == "12.5"

    def test_text_must_be_string(self):
        with pytest.raises(JobParameterError) as exc_info:
            parse_job_params("add_text", {**ADD_TEXT, "text": 42})
        assert exc_info.value.field == "text"

    def test_missing_duration(self):
        params = dict(ADD_TEXT)
        del params["duration"]
        with pytest.raises(JobParameterError) as exc_info:
            parse_job_params("add_text", params)
        assert exc_info.value.field == "duration"


class TestExportParams:
    def test_defaults_applied(self):
        params = parse_job_params("export", {"projectData": {"mediaItems": [], "duration": 3}, "settings": {}})
        assert isinstance(params, ExportParams)
        assert params.settings.quality == "medium"
        assert params.settings.format == "mp4"
        assert params.settings.resolution == "1920x1080"
        assert params.settings.crf == 23

    def test_empty_strings_use_defaults(self):
        params = parse_job_params(
            "export",
            {"projectData": {"duration": 1}, "settings": {"quality": "", "format": "", "resolution": ""}},
        )
        assert params.settings.format == "mp4"

    def test_camel_case_items(self):
        params = parse_job_params(
            "export",
            {
                "projectData": {
                    "duration": 4,
                    "aspectRatio": "16:9",
                    "mediaItems": [{"type": "video", "url": "/a.mp4", "startTime": 1, "endTime": 3, "isMuted": True}],
                }
            },
        )
        item = params.project_data.media_items[0]
        assert item.start_time == 1
        assert item.is_muted is True

    def test_missing_project_data(self):
        with pytest.raises(JobParameterError) as exc_info:
            parse_job_params("export", {"settings": {}})
        assert exc_info.value.field == "projectData"

    def test_invalid_quality(self):
        with pytest.raises(JobParameterError):
            parse_job_params("export", {"projectData": {}, "settings": {"quality": "ultra"}})


def test_unsupported_action():
    with pytest.raises(UnsupportedActionError):
        parse_job_params("rotate", {})
