"""Single background worker that executes queued processing jobs.

Jobs run one at a time in submission order. For each job the owner receives
exactly one "processing" notification followed by exactly one terminal one.
"""

import asyncio
import logging
from pathlib import Path

from cutroom.config import Settings
from cutroom.exceptions import CutroomError, JobParameterError, MediaNotFoundError
from cutroom.render.engine import MediaEngine
from cutroom.render.filter_graph import EngineCommand
from cutroom.render.media import MediaResolver
from cutroom.render.operations import build_add_text_command, build_trim_command, operation_filename
from cutroom.render.timeline_compiler import TimelineCompiler, export_output_location, output_location
from cutroom.schemas.job import AddTextParams, ExportParams, JobStatus, ProcessingJobData, TrimParams, parse_job_params
from cutroom.services.job_notifier import JobStatusNotifier
from cutroom.services.job_queue import JobQueue
from cutroom.services.job_store import JobStore, ProjectStore

logger = logging.getLogger(__name__)


class JobWorker:
    def __init__(
        self,
        queue: JobQueue,
        job_store: JobStore,
        project_store: ProjectStore,
        notifier: JobStatusNotifier,
        engine: MediaEngine,
        resolver: MediaResolver,
        settings: Settings,
    ):
        self.queue = queue
        self.job_store = job_store
        self.project_store = project_store
        self.notifier = notifier
        self.engine = engine
        self.resolver = resolver
        self.settings = settings
        self.compiler = TimelineCompiler(resolver, settings)
        self._task: asyncio.Task | None = None

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="job-worker")
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("[WORKER] Stopped")

    async def run(self) -> None:
        """Process jobs forever. A failing job never ends the loop."""
        logger.info("[WORKER] Started")
        while True:
            job = await self.queue.next()
            try:
                await self.process(job)
            except Exception:
                logger.exception(f"[WORKER] Unhandled error while processing job {job.id}")
            finally:
                self.queue.task_done()

    async def process(self, job: ProcessingJobData) -> None:
        logger.info(f"[WORKER] Processing job {job.id} (Action: {job.action}) for user {job.user_id}")

        try:
            await self.job_store.update_status(job.id, JobStatus.PROCESSING)
        except Exception:
            logger.exception(f"[WORKER] Failed to mark job {job.id} as processing")
            self.notifier.notify_start_failed(job.user_id, job.id)
            return

        self.notifier.notify_processing(job.user_id, job.id)

        try:
            output_url = await self.execute(job)
        except CutroomError as e:
            logger.error(f"[WORKER] Job {job.id} failed: {e.message}")
            await self._fail(job, e.message)
            return
        except Exception as e:
            logger.exception(f"[WORKER] Job {job.id} failed unexpectedly")
            await self._fail(job, str(e) or e.__class__.__name__)
            return

        try:
            await self.job_store.update_status(job.id, JobStatus.COMPLETED, output_url=output_url)
        except Exception:
            logger.exception(f"[WORKER] Failed to mark job {job.id} as completed")
            self.notifier.notify_completed(job.user_id, job.id, output_url, note="failed to record job status")
            return

        note = None
        if job.project_id:
            try:
                await self.project_store.update_status(job.project_id, "completed", output_url)
            except Exception:
                logger.exception(f"[WORKER] Failed to update project {job.project_id} after job {job.id}")
                note = "project status could not be updated"

        logger.info(f"[WORKER] Job {job.id} completed. Output: {output_url}")
        self.notifier.notify_completed(job.user_id, job.id, output_url, note=note)

    async def execute(self, job: ProcessingJobData) -> str:
        """Build and run the ffmpeg command for ``job``; return the output URL."""
        params = parse_job_params(job.action, job.params)

        if isinstance(params, ExportParams):
            output = export_output_location(self.settings, job.user_id, job.id, params.settings.format)
            command = self.compiler.compile(params.project_data, params.settings, output)
        else:
            input_path = await self._resolve_input(job, params)
            output = output_location(self.settings, job.user_id, operation_filename(job.action, job.id))
            if isinstance(params, TrimParams):
                command = build_trim_command(params, input_path, output)
            else:
                command = build_add_text_command(params, input_path, output)

        await self._run(command)
        return command.output_url

    async def _run(self, command: EngineCommand) -> None:
        Path(command.output_path).parent.mkdir(parents=True, exist_ok=True)
        await self.engine.run(command.to_args())

    async def _resolve_input(self, job: ProcessingJobData, params: TrimParams | AddTextParams) -> Path:
        url = params.source_url
        if not url and job.project_id:
            project = await self.project_store.get(job.project_id, job.user_id)
            url = project.source_url
        if not url:
            raise JobParameterError(
                f"missing or invalid {job.action} parameter 'source_url': no source video for this job",
                field="source_url",
            )
        path = self.resolver.resolve(url)
        if path is None:
            raise MediaNotFoundError(url)
        return path

    async def _fail(self, job: ProcessingJobData, error_message: str) -> None:
        try:
            await self.job_store.update_status(job.id, JobStatus.FAILED, message=error_message)
        except Exception:
            logger.exception(f"[WORKER] Failed to mark job {job.id} as failed")
        self.notifier.notify_failed(job.user_id, job.id, error_message)
