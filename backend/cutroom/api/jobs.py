"""Job submission and status endpoints.

Submission only records the job and queues it; all parameter validation
happens when the worker picks the job up, and the result reaches the client
over the notification socket.
"""

import asyncio
import logging

from fastapi import APIRouter, status

from cutroom.api.deps import CurrentUserId, Jobs, Projects, Queue
from cutroom.exceptions import CutroomError
from cutroom.schemas.job import (
    ExportJobRequest,
    JobAction,
    JobResponse,
    JobStatus,
    JobSubmittedResponse,
    ProcessingJobData,
    ProcessVideoRequest,
)

router = APIRouter()
logger = logging.getLogger(__name__)


async def _enqueue(job: ProcessingJobData, jobs: Jobs, queue: Queue) -> JobSubmittedResponse:
    await jobs.create(job)
    try:
        await queue.submit(job)
    except asyncio.CancelledError:
        # Client gone while the queue was full
        logger.warning(f"[QUEUE] Submission of job {job.id} cancelled, marking it failed")
        try:
            await jobs.update_status(job.id, JobStatus.FAILED, "Job was not queued: request cancelled")
        except CutroomError as e:
            logger.error(f"[QUEUE] Could not mark job {job.id} failed: {e.message}")
        raise
    return JobSubmittedResponse(message="Job submitted successfully", job_id=job.id)


@router.post("/export", response_model=JobSubmittedResponse, status_code=status.HTTP_202_ACCEPTED)
async def export_project(
    request: ExportJobRequest,
    current_user: CurrentUserId,
    jobs: Jobs,
    projects: Projects,
    queue: Queue,
) -> JobSubmittedResponse:
    """Queue a full composition export of the editor's current timeline."""
    if request.project_id:
        await projects.get(request.project_id, current_user)

    job = ProcessingJobData(
        user_id=current_user,
        project_id=request.project_id,
        action=JobAction.EXPORT.value,
        params={"projectData": request.project_data, "settings": request.settings},
    )
    logger.info(f"[EXPORT] Queueing export job {job.id} for user {current_user}")
    return await _enqueue(job, jobs, queue)


@router.post("/process-video", response_model=JobSubmittedResponse, status_code=status.HTTP_202_ACCEPTED)
async def process_video(
    request: ProcessVideoRequest,
    current_user: CurrentUserId,
    jobs: Jobs,
    projects: Projects,
    queue: Queue,
) -> JobSubmittedResponse:
    """Queue a single trim/add_text operation."""
    if request.project_id:
        await projects.get(request.project_id, current_user)

    job = ProcessingJobData(
        user_id=current_user,
        project_id=request.project_id,
        action=request.action,
        params=request.params,
    )
    return await _enqueue(job, jobs, queue)


@router.get("/jobs/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str,
    current_user: CurrentUserId,
    jobs: Jobs,
) -> JobResponse:
    job = await jobs.get(job_id, current_user)
    return JobResponse.model_validate(job)
