"""
Pytest fixtures for cutroom backend tests.

ffmpeg is never executed: tests that reach the engine use ``FakeEngine``,
which records the argument list and creates an empty output file.
"""

import uuid
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
import pytest_asyncio

from cutroom.config import Settings
from cutroom.exceptions import EngineError, JobStateError, PersistenceError, ProjectNotFoundError
from cutroom.models.database import create_db_engine, create_session_maker, init_db
from cutroom.render.media import MediaResolver
from cutroom.schemas.job import JobStatus, ProcessingJobData
from cutroom.services.job_store import SqlJobStore, SqlProjectStore


class FakeEngine:
    """Stands in for MediaEngine; optionally fails with ``error``."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls: list[list[str]] = []

    async def run(self, args: list[str]) -> str:
        self.calls.append(args)
        if self.error is not None:
            raise self.error
        Path(args[-1]).write_bytes(b"")
        return ""


class InMemoryJobStore:
    """JobStore that keeps every status write; ``fail_on`` statuses raise."""

    def __init__(self, fail_on: set[JobStatus] | None = None):
        self.fail_on = fail_on or set()
        self.jobs: dict[str, dict[str, Any]] = {}
        self.writes: list[tuple[str, JobStatus]] = []

    async def create(self, job: ProcessingJobData):
        self.jobs[job.id] = {"status": job.status, "user_id": job.user_id, "message": None, "output_url": None}
        return SimpleNamespace(id=job.id, **self.jobs[job.id])

    async def get(self, job_id: str, user_id: str | None = None):
        return SimpleNamespace(id=job_id, **self.jobs[job_id])

    async def update_status(self, job_id, status, message=None, output_url=None) -> None:
        if status in self.fail_on:
            raise PersistenceError(f"cannot write {status.value}")
        current = self.jobs.get(job_id, {}).get("status")
        if current is not None and current.is_terminal:
            raise JobStateError(f"Job {job_id} is already {current.value}")
        self.writes.append((job_id, status))
        self.jobs.setdefault(job_id, {"user_id": None})
        self.jobs[job_id].update(status=status, message=message, output_url=output_url)


class InMemoryProjectStore:
    def __init__(self, fail_updates: bool = False):
        self.fail_updates = fail_updates
        self.projects: dict[str, SimpleNamespace] = {}

    def add(self, user_id: str, source_url: str | None = None) -> str:
        project_id = str(uuid.uuid4())
        self.projects[project_id] = SimpleNamespace(
            id=project_id, user_id=user_id, source_url=source_url, status="draft", output_url=None, edits=[]
        )
        return project_id

    async def get(self, project_id: str, user_id: str):
        project = self.projects.get(project_id)
        if project is None or project.user_id != user_id:
            raise ProjectNotFoundError(project_id)
        return project

    async def update_status(self, project_id: str, status: str, output_url: str | None = None) -> None:
        if self.fail_updates:
            raise PersistenceError("project update failed")
        project = self.projects[project_id]
        project.status = status
        project.output_url = output_url


@pytest.fixture
def media_root(tmp_path: Path) -> Path:
    """Media directory with a few placeholder source files."""
    root = tmp_path / "media"
    (root / "uploads" / "user1").mkdir(parents=True)
    for name in ("clip.mp4", "logo.png", "music.mp3", "source.mp4"):
        (root / "uploads" / "user1" / name).write_bytes(b"\x00")
    return root


@pytest.fixture
def settings(tmp_path: Path, media_root: Path) -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        uploads_root=str(tmp_path / "out"),
        uploads_url_prefix="/uploads",
        media_base_url="http://localhost:8080/",
        media_root=str(media_root),
        log_level="DEBUG",
    )


@pytest.fixture
def resolver(settings: Settings) -> MediaResolver:
    return MediaResolver(settings.media_root, settings.media_base_url)


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest_asyncio.fixture
async def session_maker(settings: Settings):
    engine = create_db_engine(settings)
    await init_db(engine)
    yield create_session_maker(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def job_store(session_maker) -> SqlJobStore:
    return SqlJobStore(session_maker)


@pytest_asyncio.fixture
async def project_store(session_maker) -> SqlProjectStore:
    return SqlProjectStore(session_maker)


def make_job(action: str, params: dict[str, Any] | None = None, **kwargs: Any) -> ProcessingJobData:
    return ProcessingJobData(user_id=kwargs.pop("user_id", "user1"), action=action, params=params or {}, **kwargs)


def engine_failure() -> EngineError:
    return EngineError(
        "ffmpeg command failed: exit status 1\nStdout: \nStderr: Invalid duration",
        returncode=1,
        stderr="Invalid duration",
    )
