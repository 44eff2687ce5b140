"""Custom exceptions for the cutroom backend.

Every error raised by the core derives from ``CutroomError`` so the worker can
turn it into a job failure message and the API can turn it into a JSON error.
"""

from typing import Any


class CutroomError(Exception):
    """Base exception for all cutroom application errors."""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
    ):
        self.message = message or self.__class__.message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses."""
        return {"detail": self.message, "code": self.code}


# =============================================================================
# Validation Errors (422)
# =============================================================================


class ValidationFailedError(CutroomError):
    """Base class for request/job validation errors."""

    code = "VALIDATION_ERROR"
    status_code = 422
    message = "Validation failed"


class JobParameterError(ValidationFailedError):
    """A job parameter is missing or has the wrong type."""

    code = "INVALID_JOB_PARAMETERS"
    message = "Missing or invalid job parameters"

    def __init__(self, message: str | None = None, field: str | None = None):
        self.field = field
        super().__init__(message)


class InvalidResolutionError(ValidationFailedError):
    """Resolution string is not of the form WIDTHxHEIGHT."""

    code = "INVALID_RESOLUTION"
    message = "Invalid resolution format"

    def __init__(self, resolution: str | None = None):
        message = (
            f"Invalid resolution format: {resolution!r} (expected WIDTHxHEIGHT)"
            if resolution is not None
            else self.message
        )
        super().__init__(message)


class InvalidIdError(ValidationFailedError):
    """Identifier has an invalid format."""

    code = "INVALID_ID"
    message = "Invalid ID format"

    def __init__(self, kind: str = "ID", value: str | None = None):
        message = f"Invalid {kind} format: {value!r}" if value is not None else f"Invalid {kind} format"
        super().__init__(message)


class UnsupportedActionError(ValidationFailedError):
    """Job action is not one of the supported actions."""

    code = "UNSUPPORTED_ACTION"
    message = "Unsupported action"

    def __init__(self, action: str | None = None):
        message = f"Unsupported action: {action}" if action else self.message
        super().__init__(message)


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class ResourceNotFoundError(CutroomError):
    """Base class for resource not found errors."""

    status_code = 404


class ProjectNotFoundError(ResourceNotFoundError):
    """Project not found (or not owned by the caller)."""

    code = "PROJECT_NOT_FOUND"
    message = "Project not found or unauthorized"

    def __init__(self, project_id: str | None = None):
        message = f"Project not found or unauthorized: {project_id}" if project_id else self.message
        super().__init__(message)


class JobNotFoundError(ResourceNotFoundError):
    """Processing job not found."""

    code = "JOB_NOT_FOUND"
    message = "Job not found"

    def __init__(self, job_id: str | None = None):
        message = f"Job not found: {job_id}" if job_id else self.message
        super().__init__(message)


class MediaNotFoundError(ResourceNotFoundError):
    """A job's input media does not resolve to a local file."""

    code = "MEDIA_NOT_FOUND"
    message = "Input media not found"

    def __init__(self, url: str | None = None):
        message = f"Input media not found: {url}" if url else self.message
        super().__init__(message)


# =============================================================================
# State Errors (409)
# =============================================================================


class JobStateError(CutroomError):
    """Job status transition is not allowed."""

    code = "INVALID_STATE_TRANSITION"
    status_code = 409
    message = "Invalid job status transition"


# =============================================================================
# Engine / Persistence Errors (500)
# =============================================================================


class EngineError(CutroomError):
    """ffmpeg exited with a nonzero status or could not be started."""

    code = "ENGINE_FAILED"
    message = "ffmpeg command failed"

    def __init__(
        self,
        message: str | None = None,
        *,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message)


class PersistenceError(CutroomError):
    """A project/job store operation failed."""

    code = "PERSISTENCE_ERROR"
    message = "Persistence operation failed"
