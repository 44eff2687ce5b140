from typing import Any

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cutroom.models.base import Base, TimestampMixin, UUIDMixin


class Project(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "projects"

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    source_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Ordered list of {"type": ..., "params": {...}}; append-only
    edits: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)

    # Status: draft, processing, completed
    status: Mapped[str] = mapped_column(String(50), default="draft")
    output_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Project {self.id} ({self.status})>"
