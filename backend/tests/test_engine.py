"""Tests for the ffmpeg process runner and media URL resolution.

The runner is exercised with the Python interpreter standing in for ffmpeg.
"""

import asyncio
import os
import sys

import pytest

from cutroom.exceptions import EngineError
from cutroom.render.engine import MediaEngine
from cutroom.render.media import MediaResolver


class TestMediaEngine:
    @pytest.mark.asyncio
    async def test_success_returns_stdout(self):
        engine = MediaEngine(sys.executable)
        stdout = await engine.run(["-c", "print('done')"])
        assert stdout.strip() == "done"

    @pytest.mark.asyncio
    async def test_nonzero_exit_carries_output(self):
        engine = MediaEngine(sys.executable)
        script = "import sys; print('out'); sys.stderr.write('bad input'); sys.exit(3)"

        with pytest.raises(EngineError) as exc_info:
            await engine.run(["-c", script])

        error = exc_info.value
        assert error.returncode == 3
        assert "bad input" in error.stderr
        assert error.message.startswith("ffmpeg command failed: exit status 3")
        assert "Stdout: out" in error.message
        assert "Stderr: bad input" in error.message

    @pytest.mark.asyncio
    async def test_missing_binary(self, tmp_path):
        engine = MediaEngine(str(tmp_path / "no-ffmpeg"))
        with pytest.raises(EngineError, match="could not be started"):
            await engine.run(["-version"])

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self):
        engine = MediaEngine(sys.executable, timeout=0.2)
        with pytest.raises(EngineError, match="timed out"):
            await engine.run(["-c", "import time; time.sleep(10)"])

    @pytest.mark.asyncio
    async def test_cancel_kills_process(self, tmp_path):
        pid_file = tmp_path / "pid"
        script = f"import os, time; open(r'{pid_file}', 'w').write(str(os.getpid())); time.sleep(30)"
        task = asyncio.create_task(MediaEngine(sys.executable).run(["-c", script]))

        for _ in range(200):
            if pid_file.exists() and pid_file.read_text():
                break
            await asyncio.sleep(0.02)
        pid = int(pid_file.read_text())

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)


class TestMediaResolver:
    def test_absolute_url_under_base(self, media_root):
        resolver = MediaResolver(media_root, "http://localhost:8080/")
        assert resolver.resolve("http://localhost:8080/uploads/user1/clip.mp4") == media_root / "uploads/user1/clip.mp4"

    def test_root_relative_url(self, media_root):
        resolver = MediaResolver(media_root, "http://localhost:8080/")
        assert resolver.resolve("/uploads/user1/logo.png") == media_root / "uploads/user1/logo.png"

    def test_missing_file(self, media_root):
        resolver = MediaResolver(media_root)
        assert resolver.resolve("/uploads/user1/missing.mp4") is None

    def test_empty_url(self, media_root):
        assert MediaResolver(media_root).resolve("") is None

    def test_directory_is_not_media(self, media_root):
        assert MediaResolver(media_root).resolve("/uploads/user1") is None

    def test_path_outside_root_is_refused(self, media_root):
        (media_root.parent / "secret.txt").write_text("x")
        assert MediaResolver(media_root).resolve("/../secret.txt") is None
