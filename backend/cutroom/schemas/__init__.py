from cutroom.schemas.export import ExportRequest, ExportSettings, MediaItem
from cutroom.schemas.job import (
    AddTextParams,
    ExportParams,
    JobAction,
    JobStatus,
    ProcessingJobData,
    TrimParams,
    parse_job_params,
)
from cutroom.schemas.project import EditOperation, ProjectCreate, ProjectResponse

__all__ = [
    "AddTextParams",
    "EditOperation",
    "ExportParams",
    "ExportRequest",
    "ExportSettings",
    "JobAction",
    "JobStatus",
    "MediaItem",
    "ProcessingJobData",
    "ProjectCreate",
    "ProjectResponse",
    "TrimParams",
    "parse_job_params",
]
