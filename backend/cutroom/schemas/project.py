from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class EditOperation(BaseModel):
    type: str = Field(..., min_length=1)  # e.g. "trim", "add_text", "add_audio"
    params: dict[str, Any] = Field(default_factory=dict)


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    source_url: str | None = None
    edits: list[EditOperation] = Field(default_factory=list)


class ProjectResponse(BaseModel):
    id: str
    user_id: str
    name: str
    source_url: str | None
    edits: list[EditOperation]
    status: str
    output_url: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
