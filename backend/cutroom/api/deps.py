from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from cutroom.services.job_queue import JobQueue
from cutroom.services.job_store import JobStore, ProjectStore


async def get_current_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Caller identity, as established by the upstream auth proxy."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return x_user_id.strip()


def get_job_queue(request: Request) -> JobQueue:
    return request.app.state.job_queue


def get_job_store(request: Request) -> JobStore:
    return request.app.state.job_store


def get_project_store(request: Request) -> ProjectStore:
    return request.app.state.project_store


CurrentUserId = Annotated[str, Depends(get_current_user_id)]
Queue = Annotated[JobQueue, Depends(get_job_queue)]
Jobs = Annotated[JobStore, Depends(get_job_store)]
Projects = Annotated[ProjectStore, Depends(get_project_store)]
