from cutroom.services.job_notifier import JobStatusNotifier
from cutroom.services.job_queue import JobQueue
from cutroom.services.job_store import JobStore, ProjectStore, SqlJobStore, SqlProjectStore
from cutroom.services.notification_hub import NotificationHub, Subscriber

__all__ = [
    "JobQueue",
    "JobStatusNotifier",
    "JobStore",
    "NotificationHub",
    "ProjectStore",
    "SqlJobStore",
    "SqlProjectStore",
    "Subscriber",
]
