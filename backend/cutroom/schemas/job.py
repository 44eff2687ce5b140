"""Processing job schemas and typed job parameters.

Job parameters arrive as an open mapping and are validated once, at the start of
processing, into one variant of a union tagged by the job's action.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictStr, TypeAdapter, ValidationError

from cutroom.exceptions import JobParameterError, UnsupportedActionError
from cutroom.schemas.export import ExportRequest, ExportSettings


class JobStatus(str, Enum):
    """Processing job status."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class JobAction(str, Enum):
    TRIM = "trim"
    ADD_TEXT = "add_text"
    EXPORT = "export"


def _require_number(value: Any) -> Any:
    # bool is an int subclass; "5" must not sneak through either
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a number")
    return value


def _require_coordinate(value: Any) -> Any:
    """Accept an ffmpeg position expression (string) or a plain number."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a string expression or a number")
    return str(int(value)) if float(value).is_integer() else str(value)


Number = Annotated[float, BeforeValidator(_require_number)]
Coordinate = Annotated[str, BeforeValidator(_require_coordinate)]


class TrimParams(BaseModel):
    action: Literal["trim"] = "trim"
    start_time: Number
    # end_time < start_time is left for ffmpeg to reject
    end_time: Number
    source_url: StrictStr | None = None


class AddTextParams(BaseModel):
    action: Literal["add_text"] = "add_text"
    text: StrictStr
    x: Coordinate
    y: Coordinate
    fontsize: Number
    fontcolor: StrictStr
    start_time: Number
    duration: Number
    fontfile: StrictStr | None = None
    source_url: StrictStr | None = None


class ExportParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["export"] = "export"
    project_data: ExportRequest = Field(alias="projectData")
    settings: ExportSettings = Field(default_factory=ExportSettings)


JobParams = Annotated[
    Union[TrimParams, AddTextParams, ExportParams],
    Field(discriminator="action"),
]

_job_params_adapter: TypeAdapter[Any] = TypeAdapter(JobParams)


def parse_job_params(action: str, params: dict[str, Any] | None) -> TrimParams | AddTextParams | ExportParams:
    """Validate a job's raw params into the variant for its action.

    Raises:
        UnsupportedActionError: action is not trim/add_text/export
        JobParameterError: a field is missing or has the wrong type
    """
    if action not in {a.value for a in JobAction}:
        raise UnsupportedActionError(action)

    try:
        return _job_params_adapter.validate_python({**(params or {}), "action": action})
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = [str(part) for part in first.get("loc", ())]
        if loc and loc[0] == action:
            loc = loc[1:]
        field = ".".join(loc) or None
        raise JobParameterError(
            f"missing or invalid {action} parameter '{field}': {first.get('msg', 'invalid value')}",
            field=field,
        ) from exc


class ProcessingJobData(BaseModel):
    """A job as carried through the queue and the worker."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    project_id: str = ""
    action: str
    params: dict[str, Any] = Field(default_factory=dict)
    status: JobStatus = JobStatus.PENDING
    message: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# =============================================================================
# API request/response bodies
# =============================================================================


class ExportJobRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_data: dict[str, Any] = Field(alias="projectData")
    settings: dict[str, Any] = Field(default_factory=dict)
    project_id: str = ""


class ProcessVideoRequest(BaseModel):
    project_id: str = ""
    action: str
    params: dict[str, Any] = Field(default_factory=dict)


class JobSubmittedResponse(BaseModel):
    message: str
    job_id: str


class JobResponse(BaseModel):
    id: str
    user_id: str | None
    project_id: str | None
    action: str | None
    status: str
    message: str | None
    output_url: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
