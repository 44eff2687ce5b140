"""Export (composition) request schemas.

Field names follow the editor's JSON (camelCase); Python attributes are snake_case.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MediaType = Literal["video", "image", "text", "audio"]
QualityType = Literal["high", "medium", "low"]

# Lower CRF = higher quality
QUALITY_CRF: dict[str, int] = {
    "high": 18,
    "medium": 23,
    "low": 28,
}

DEFAULT_QUALITY = "medium"
DEFAULT_FORMAT = "mp4"
DEFAULT_RESOLUTION = "1920x1080"


class MediaItem(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = ""
    type: MediaType
    url: str = ""
    track: int = 0
    start_time: float = 0.0
    end_time: float = 0.0
    duration: float = 0.0
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    text: str = ""
    color: str = ""
    font_size: float = 0.0
    is_muted: bool = False


class ExportRequest(BaseModel):
    """Project snapshot sent by the editor for a full export."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    media_items: list[MediaItem] = Field(default_factory=list)
    duration: float = Field(default=0.0, ge=0)
    aspect_ratio: str = ""


class ExportSettings(BaseModel):
    quality: QualityType = DEFAULT_QUALITY
    format: str = Field(default=DEFAULT_FORMAT, pattern=r"^[A-Za-z0-9]+$")
    resolution: str = DEFAULT_RESOLUTION

    @field_validator("quality", "format", "resolution", mode="before")
    @classmethod
    def empty_to_default(cls, v, info):
        """Treat missing/empty strings from the editor as 'use the default'."""
        if v is None or v == "":
            return {
                "quality": DEFAULT_QUALITY,
                "format": DEFAULT_FORMAT,
                "resolution": DEFAULT_RESOLUTION,
            }[info.field_name]
        return v

    @property
    def crf(self) -> int:
        return QUALITY_CRF[self.quality]
