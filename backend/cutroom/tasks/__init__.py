from cutroom.tasks.job_worker import JobWorker

__all__ = ["JobWorker"]
