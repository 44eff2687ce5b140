from typing import Any

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cutroom.models.base import Base, TimestampMixin, UUIDMixin


class ProcessingJob(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "processing_jobs"

    # Nullable: a status write for an unknown id creates a bare row
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    project_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    action: Mapped[str | None] = mapped_column(String(50), nullable=True)
    params: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)

    # Status: pending, processing, completed, failed
    status: Mapped[str] = mapped_column(String(50), default="pending", index=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    output_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<ProcessingJob {self.id} ({self.status})>"
