from cutroom.models.base import Base
from cutroom.models.processing_job import ProcessingJob
from cutroom.models.project import Project

__all__ = ["Base", "ProcessingJob", "Project"]
