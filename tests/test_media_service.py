"""
MediaService tests with ffprobe/ffmpeg replaced by fakes.

`ffmpeg.probe` and `subprocess.run` are patched, so no executable is needed.
"""

import asyncio
import json
import subprocess

import ffmpeg
import pytest

from trimkit.domain.exceptions import (
    CodecNotAllowedException,
    ExternalProcessException,
    InvalidRangeException,
    MissingFieldException,
)
from trimkit.domain.media import MediaInfo
from trimkit.domain.request import ConversionRequest
from trimkit.services import media_service
from trimkit.utils import ffmpeg_utils, tools

PROBE_REPORT = {
    "format": {"duration": "10.000000", "bit_rate": "2000000"},
    "streams": [
        {"codec_type": "video", "width": 1280, "height": 720, "avg_frame_rate": "25/1"},
        {"codec_type": "audio", "bit_rate": "128000"},
    ],
}


@pytest.fixture(autouse=True)
def no_configured_tools(monkeypatch):
    monkeypatch.setattr(tools, "MODULE_PATH", None)
    monkeypatch.setattr(media_service, "ERROR_LOG_DIR", None)


@pytest.fixture
def service():
    with media_service.MediaService(max_workers=2) as svc:
        yield svc


@pytest.fixture
def logged_service(tmp_path):
    with media_service.MediaService(error_log_dir=tmp_path) as svc:
        yield svc


def _request(**overrides):
    values = {"input_path": "in.mov", "output_path": "out.mp4", "start_ms": 0, "end_ms": 4000}
    values.update(overrides)
    return ConversionRequest(**values)


class FakeRun:
    """Records subprocess.run calls and answers with a fixed result."""

    def __init__(self, returncode=0, stderr="", error=None):
        self.returncode = returncode
        self.stderr = stderr
        self.error = error
        self.calls = []

    def __call__(self, cmd_list, **kwargs):
        self.calls.append((cmd_list, kwargs))
        if self.error:
            raise self.error
        return subprocess.CompletedProcess(cmd_list, self.returncode, stdout="", stderr=self.stderr)


class TestAnalyze:
    def test_returns_media_info(self, monkeypatch, service):
        calls = []

        def fake_probe(path, cmd, **kwargs):
            calls.append((path, cmd, kwargs))
            return PROBE_REPORT

        monkeypatch.setattr(media_service.ffmpeg, "probe", fake_probe)
        info = asyncio.run(service.analyze("clip.mov"))
        assert info == MediaInfo(
            duration_seconds=10.0, width=1280, height=720, fps=25.0, bitrate_kbps=2000, has_video=True
        )
        assert calls == [("clip.mov", "ffprobe", {"v": "error"})]

    def test_sync_and_async_agree(self, monkeypatch, service):
        monkeypatch.setattr(media_service.ffmpeg, "probe", lambda path, cmd, **kwargs: PROBE_REPORT)
        assert service.analyze_sync("clip.mov") == asyncio.run(service.analyze("clip.mov"))

    def test_concurrent_calls(self, monkeypatch, service):
        monkeypatch.setattr(media_service.ffmpeg, "probe", lambda path, cmd, **kwargs: PROBE_REPORT)

        async def analyze_many():
            return await asyncio.gather(*(service.analyze(f"clip{i}.mov") for i in range(4)))

        results = asyncio.run(analyze_many())
        assert len(results) == 4
        assert all(r.width == 1280 for r in results)

    def test_ffprobe_error_keeps_stderr(self, monkeypatch, logged_service, tmp_path):
        def fake_probe(path, cmd, **kwargs):
            raise ffmpeg.Error("ffprobe", b"", b"clip.mov: Invalid data found when processing input")

        monkeypatch.setattr(media_service.ffmpeg, "probe", fake_probe)
        with pytest.raises(ExternalProcessException) as exc_info:
            asyncio.run(logged_service.analyze("clip.mov"))
        assert exc_info.value.tool == "ffprobe"
        assert exc_info.value.stderr == "clip.mov: Invalid data found when processing input"
        assert str(exc_info.value).startswith("ffprobe error: ")
        assert "Invalid data" in (tmp_path / "error.txt").read_text(encoding="utf-8")

    def test_ffprobe_missing(self, monkeypatch, service):
        def fake_probe(path, cmd, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", "ffprobe")

        monkeypatch.setattr(media_service.ffmpeg, "probe", fake_probe)
        with pytest.raises(ExternalProcessException) as exc_info:
            service.analyze_sync("clip.mov")
        assert "could not be started" in str(exc_info.value)
        assert exc_info.value.returncode is None

    def test_malformed_json(self, monkeypatch, service):
        def fake_probe(path, cmd, **kwargs):
            return json.loads("{not json")

        monkeypatch.setattr(media_service.ffmpeg, "probe", fake_probe)
        with pytest.raises(ExternalProcessException) as exc_info:
            service.analyze_sync("clip.mov")
        assert "malformed JSON" in str(exc_info.value)

    def test_json_that_is_not_an_object(self, monkeypatch, service):
        monkeypatch.setattr(media_service.ffmpeg, "probe", lambda path, cmd, **kwargs: [])
        with pytest.raises(ExternalProcessException):
            service.analyze_sync("clip.mov")

    def test_incomplete_report(self, monkeypatch, service):
        monkeypatch.setattr(
            media_service.ffmpeg, "probe", lambda path, cmd, **kwargs: {"format": {}, "streams": []}
        )
        with pytest.raises(MissingFieldException):
            asyncio.run(service.analyze("clip.mov"))


class TestConvert:
    def test_runs_planned_command(self, monkeypatch, service):
        fake_run = FakeRun()
        monkeypatch.setattr(ffmpeg_utils.subprocess, "run", fake_run)
        request = _request(start_ms=1000, end_ms=3000)

        args = asyncio.run(service.convert(request))

        assert args == service.plan(request)
        assert len(fake_run.calls) == 1
        cmd_list, kwargs = fake_run.calls[0]
        assert cmd_list == ["ffmpeg", *args]
        assert kwargs["shell"] is False
        assert kwargs["capture_output"] is True

    def test_failure_raises_with_stderr(self, monkeypatch, logged_service, tmp_path):
        monkeypatch.setattr(
            ffmpeg_utils.subprocess, "run", FakeRun(returncode=1, stderr="Unknown encoder 'libx264'")
        )
        with pytest.raises(ExternalProcessException) as exc_info:
            asyncio.run(logged_service.convert(_request()))
        assert exc_info.value.tool == "ffmpeg"
        assert exc_info.value.returncode == 1
        assert exc_info.value.stderr == "Unknown encoder 'libx264'"

        error_text = (tmp_path / "error.txt").read_text(encoding="utf-8")
        assert "ffmpeg failed for: in.mov" in error_text
        assert "Return code: 1" in error_text
        assert "Unknown encoder" in error_text

    def test_executed_commands_are_logged(self, monkeypatch, logged_service, tmp_path):
        monkeypatch.setattr(ffmpeg_utils.subprocess, "run", FakeRun())
        logged_service.convert_sync(_request())
        logged_service.convert_sync(_request(output_path="second.mp4"))
        lines = (tmp_path / "cmd.txt").read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("ffmpeg -y -i in.mov")
        assert lines[1].endswith("second.mp4")

    def test_ffmpeg_missing(self, monkeypatch, logged_service, tmp_path):
        monkeypatch.setattr(
            ffmpeg_utils.subprocess, "run", FakeRun(error=FileNotFoundError(2, "No such file", "ffmpeg"))
        )
        with pytest.raises(ExternalProcessException) as exc_info:
            asyncio.run(logged_service.convert(_request()))
        assert exc_info.value.tool == "ffmpeg"
        assert "could not be started" in str(exc_info.value)
        assert "FileNotFoundError" in (tmp_path / "error.txt").read_text(encoding="utf-8")

    @pytest.mark.parametrize(
        "request_overrides, expected",
        [
            ({"end_ms": 0}, InvalidRangeException),
            ({"format": "mp4", "video_codec": "prores_ks"}, CodecNotAllowedException),
        ],
    )
    def test_rejected_request_never_starts_ffmpeg(self, monkeypatch, service, request_overrides, expected):
        fake_run = FakeRun()
        monkeypatch.setattr(ffmpeg_utils.subprocess, "run", fake_run)
        with pytest.raises(expected):
            asyncio.run(service.convert(_request(**request_overrides)))
        assert fake_run.calls == []

    def test_nothing_written_without_log_dir(self, monkeypatch, service, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(ffmpeg_utils.subprocess, "run", FakeRun(returncode=1, stderr="boom"))
        with pytest.raises(ExternalProcessException):
            service.convert_sync(_request())
        assert list(tmp_path.iterdir()) == []
