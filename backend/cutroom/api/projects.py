"""Project endpoints: create, read, append edits."""

import logging

from fastapi import APIRouter, status

from cutroom.api.deps import CurrentUserId, Projects
from cutroom.schemas.project import EditOperation, ProjectCreate, ProjectResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    current_user: CurrentUserId,
    projects: Projects,
) -> ProjectResponse:
    """Create a new draft project."""
    project = await projects.create(
        user_id=current_user,
        name=project_data.name,
        source_url=project_data.source_url,
        edits=[edit.model_dump() for edit in project_data.edits],
    )
    return ProjectResponse.model_validate(project)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    current_user: CurrentUserId,
    projects: Projects,
) -> ProjectResponse:
    project = await projects.get(project_id, current_user)
    return ProjectResponse.model_validate(project)


@router.post("/{project_id}/edits", response_model=ProjectResponse)
async def append_edit(
    project_id: str,
    edit: EditOperation,
    current_user: CurrentUserId,
    projects: Projects,
) -> ProjectResponse:
    """Append one edit operation; existing edits are never rewritten."""
    project = await projects.append_edit(project_id, current_user, edit.model_dump())
    logger.info(f"Appended {edit.type} edit to project {project.id} ({len(project.edits)} total)")
    return ProjectResponse.model_validate(project)
