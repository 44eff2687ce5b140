import asyncio
import logging

from cutroom.exceptions import EngineError

logger = logging.getLogger(__name__)


class MediaEngine:
    """Runs ffmpeg as a child process.

    Only the awaiting task is suspended while ffmpeg runs; the event loop keeps
    serving requests and notifications.
    """

    def __init__(self, ffmpeg_path: str = "ffmpeg", timeout: float | None = None):
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout

    async def run(self, args: list[str]) -> str:
        """Run ffmpeg with ``args`` and return its stdout.

        Raises:
            EngineError: ffmpeg is missing, timed out, or exited nonzero
        """
        cmd = [self.ffmpeg_path, *args]
        logger.info(f"[ENGINE] {' '.join(cmd)}")

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise EngineError(f"ffmpeg could not be started: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            stdout, stderr = await proc.communicate()
            raise EngineError(
                f"ffmpeg timed out after {self.timeout}s",
                returncode=proc.returncode,
                stdout=stdout.decode("utf-8", errors="replace"),
                stderr=stderr.decode("utf-8", errors="replace"),
            )
        except asyncio.CancelledError:
            # No orphaned encoder once the awaiting job is gone
            proc.kill()
            await proc.wait()
            logger.warning(f"[ENGINE] ffmpeg cancelled, killed pid {proc.pid}")
            raise

        stdout_text = stdout.decode("utf-8", errors="replace")
        stderr_text = stderr.decode("utf-8", errors="replace")

        if proc.returncode != 0:
            logger.error(f"[ENGINE] ffmpeg exited with status {proc.returncode}: {stderr_text[-2000:]}")
            raise EngineError(
                f"ffmpeg command failed: exit status {proc.returncode}\n"
                f"Stdout: {stdout_text}\nStderr: {stderr_text}",
                returncode=proc.returncode,
                stdout=stdout_text,
                stderr=stderr_text,
            )

        logger.info("[ENGINE] ffmpeg finished successfully")
        return stdout_text
