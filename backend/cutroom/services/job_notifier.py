"""Job status notifications sent to the job's owner through the hub."""

import json
from typing import Any, Optional

from cutroom.schemas.job import JobStatus
from cutroom.services.notification_hub import NotificationHub


class JobStatusNotifier:
    """High-level API for publishing job status updates."""

    def __init__(self, hub: NotificationHub):
        self._hub = hub

    def notify_processing(self, user_id: str, job_id: str) -> None:
        self._send(user_id, create_job_status_message(job_id, JobStatus.PROCESSING, "Processing..."))

    def notify_start_failed(self, user_id: str, job_id: str) -> None:
        self._send(user_id, create_job_status_message(job_id, JobStatus.FAILED, "Failed to start processing."))

    def notify_completed(self, user_id: str, job_id: str, output_url: str, note: Optional[str] = None) -> None:
        message = f"Completed! Output: {output_url}"
        if note:
            message = f"{message} ({note})"
        self._send(user_id, create_job_status_message(job_id, JobStatus.COMPLETED, message, output_url))

    def notify_failed(self, user_id: str, job_id: str, error_message: str) -> None:
        self._send(user_id, create_job_status_message(job_id, JobStatus.FAILED, f"Failed! {error_message}"))

    def _send(self, user_id: str, message: dict[str, Any]) -> None:
        self._hub.publish_to_user(user_id, json.dumps(message))


def create_job_status_message(
    job_id: str,
    status: JobStatus,
    message: str,
    output_url: Optional[str] = None,
) -> dict[str, Any]:
    """Create a standardized job status message."""
    return {
        "type": "job_status",
        "job_id": job_id,
        "status": status.value,
        "message": message,
        "output_url": output_url,
    }
