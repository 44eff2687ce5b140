"""Project and processing-job persistence.

The worker and the API only see the ``ProjectStore`` / ``JobStore`` protocols;
the SQLAlchemy implementations below are what the app wires in.
"""

import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cutroom.exceptions import (
    InvalidIdError,
    JobNotFoundError,
    JobStateError,
    PersistenceError,
    ProjectNotFoundError,
)
from cutroom.models.processing_job import ProcessingJob
from cutroom.models.project import Project
from cutroom.schemas.job import JobStatus, ProcessingJobData

logger = logging.getLogger(__name__)


def normalize_id(value: str, kind: str = "ID") -> str:
    """Return the canonical form of a UUID string, or raise InvalidIdError."""
    try:
        return str(uuid.UUID(str(value)))
    except (ValueError, TypeError, AttributeError) as e:
        raise InvalidIdError(kind, value) from e


class ProjectStore(Protocol):
    async def create(
        self, user_id: str, name: str, source_url: str | None = None, edits: list[dict[str, Any]] | None = None
    ) -> Project: ...

    async def get(self, project_id: str, user_id: str) -> Project: ...

    async def append_edit(self, project_id: str, user_id: str, edit: dict[str, Any]) -> Project: ...

    async def update_status(self, project_id: str, status: str, output_url: str | None = None) -> None: ...


class JobStore(Protocol):
    async def create(self, job: ProcessingJobData) -> ProcessingJob: ...

    async def get(self, job_id: str, user_id: str | None = None) -> ProcessingJob: ...

    async def update_status(
        self,
        job_id: str,
        status: JobStatus,
        message: str | None = None,
        output_url: str | None = None,
    ) -> None: ...


class _SqlStore:
    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Session that commits on success and maps driver errors to PersistenceError."""
        async with self._session_maker() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise PersistenceError(f"Database error: {e}") from e


class SqlProjectStore(_SqlStore):
    async def create(
        self, user_id: str, name: str, source_url: str | None = None, edits: list[dict[str, Any]] | None = None
    ) -> Project:
        async with self._session() as session:
            project = Project(
                user_id=user_id,
                name=name,
                source_url=source_url,
                edits=list(edits or []),
                status="draft",
            )
            session.add(project)
            await session.flush()
            await session.refresh(project)
        logger.info(f"[STORE] Created project {project.id} for user {user_id}")
        return project

    async def get(self, project_id: str, user_id: str) -> Project:
        """Fetch a project owned by ``user_id``."""
        pid = normalize_id(project_id, "project ID")
        async with self._session() as session:
            return await self._get_owned(session, pid, user_id)

    async def append_edit(self, project_id: str, user_id: str, edit: dict[str, Any]) -> Project:
        pid = normalize_id(project_id, "project ID")
        async with self._session() as session:
            project = await self._get_owned(session, pid, user_id)
            # Reassign so the JSON column is flagged as changed
            project.edits = [*project.edits, edit]
            await session.flush()
            await session.refresh(project)
        return project

    async def update_status(self, project_id: str, status: str, output_url: str | None = None) -> None:
        pid = normalize_id(project_id, "project ID")
        async with self._session() as session:
            project = await session.get(Project, pid)
            if project is None:
                raise ProjectNotFoundError(project_id)
            project.status = status
            project.output_url = output_url

    @staticmethod
    async def _get_owned(session: AsyncSession, project_id: str, user_id: str) -> Project:
        result = await session.execute(
            select(Project).where(Project.id == project_id, Project.user_id == user_id)
        )
        project = result.scalar_one_or_none()
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project


class SqlJobStore(_SqlStore):
    async def create(self, job: ProcessingJobData) -> ProcessingJob:
        job_id = normalize_id(job.id, "job ID")
        project_id = normalize_id(job.project_id, "project ID") if job.project_id else None
        async with self._session() as session:
            row = ProcessingJob(
                id=job_id,
                user_id=job.user_id,
                project_id=project_id,
                action=job.action,
                params=job.params,
                status=job.status.value,
                message=job.message,
                created_at=job.created_at,
                updated_at=job.created_at,
            )
            session.add(row)
            await session.flush()
            await session.refresh(row)
        return row

    async def get(self, job_id: str, user_id: str | None = None) -> ProcessingJob:
        jid = normalize_id(job_id, "job ID")
        async with self._session() as session:
            query = select(ProcessingJob).where(ProcessingJob.id == jid)
            if user_id is not None:
                query = query.where(ProcessingJob.user_id == user_id)
            result = await session.execute(query)
            row = result.scalar_one_or_none()
        if row is None:
            raise JobNotFoundError(job_id)
        return row

    async def update_status(
        self,
        job_id: str,
        status: JobStatus,
        message: str | None = None,
        output_url: str | None = None,
    ) -> None:
        """Set a job's status, creating the row if the id is unknown.

        Raises:
            JobStateError: the job already has a terminal status
        """
        jid = normalize_id(job_id, "job ID")
        async with self._session() as session:
            row = await session.get(ProcessingJob, jid, with_for_update=True)
            if row is None:
                row = ProcessingJob(id=jid, params={})
                session.add(row)
            elif JobStatus(row.status).is_terminal:
                raise JobStateError(
                    f"Job {jid} is already {row.status}; refusing to set {status.value}"
                )
            row.status = status.value
            row.message = message
            row.output_url = output_url
