"""In-process FIFO of processing jobs.

Jobs live only in memory: anything still queued when the process exits is lost.
"""

import asyncio
import logging

from cutroom.exceptions import JobStateError
from cutroom.schemas.job import JobStatus, ProcessingJobData

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


class JobQueue:
    """Bounded FIFO between the API and the worker.

    ``submit`` suspends the caller while the queue is full; nothing is dropped.
    """

    def __init__(self, maxsize: int = DEFAULT_CAPACITY):
        self._queue: asyncio.Queue[ProcessingJobData] = asyncio.Queue(maxsize=maxsize)

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    async def submit(self, job: ProcessingJobData) -> None:
        if job.status != JobStatus.PENDING:
            raise JobStateError(f"Only pending jobs can be queued (job {job.id} is {job.status.value})")
        await self._queue.put(job)
        logger.info(
            f"[QUEUE] Job {job.id} added. Action: {job.action}, Project: {job.project_id or '-'}, "
            f"Depth: {self._queue.qsize()}"
        )

    async def next(self) -> ProcessingJobData:
        return await self._queue.get()

    def task_done(self) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        """Wait until every submitted job has been processed."""
        await self._queue.join()

    def qsize(self) -> int:
        return self._queue.qsize()

    def full(self) -> bool:
        return self._queue.full()
