from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import ValidationFailed

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class CamelModel(BaseModel):
    """JSON bodies use camelCase on the wire; snake_case is accepted too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def parse_payload(model: type[M], data: Any, message: str = "Validation failed") -> M:
    """Validate an untrusted payload, raising ``ValidationFailed`` with per-field detail."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailed.from_pydantic(exc, message)


# ==== Inputs ====

class MediaDescriptor(CamelModel):
    """A file that has already been uploaded to storage."""

    url: str = Field(min_length=1, max_length=1000)
    storage_key: str = Field(
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("storageKey", "storage_key", "publicId", "key"),
    )


class CategoryIn(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    specs: dict[str, bool] = Field(default_factory=dict)
    essential_amenities: List[str] = Field(default_factory=list)
    bed_type: Optional[str] = Field(default=None, max_length=100)
    max_occupancy: Optional[int] = Field(default=None, ge=1)
    room_size: Optional[str] = Field(default=None, max_length=100)
    room_count: int = Field(default=0, ge=0)
    images: List[MediaDescriptor] = Field(default_factory=list)
    video: Optional[MediaDescriptor] = None
    videos: List[MediaDescriptor] = Field(default_factory=list)

    @field_validator("description", "room_count", "specs", "essential_amenities", "images", "videos", mode="before")
    @classmethod
    def _null_means_default(cls, value, info):
        if value is not None:
            return value
        return {"description": "", "room_count": 0, "specs": {}}.get(info.field_name, [])

    @field_validator("bed_type", "room_size", mode="before")
    @classmethod
    def _blank_optional(cls, value):
        return _blank_to_none(value)

    @field_validator("essential_amenities")
    @classmethod
    def _drop_blank_amenities(cls, value: list[str]) -> list[str]:
        return [a.strip() for a in value if a and a.strip()]

    def video_descriptor(self) -> Optional[MediaDescriptor]:
        if self.video is not None:
            return self.video
        return self.videos[0] if self.videos else None


class CategoryPatch(CamelModel):
    """Partial category update; every field is optional."""

    slug: Optional[str] = Field(default=None, min_length=1, max_length=200, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    specs: Optional[dict[str, bool]] = None
    essential_amenities: Optional[List[str]] = None
    bed_type: Optional[str] = Field(default=None, max_length=100)
    max_occupancy: Optional[int] = Field(default=None, ge=1)
    room_size: Optional[str] = Field(default=None, max_length=100)
    room_count: Optional[int] = Field(default=None, ge=0)


class PriceTierIn(CamelModel):
    hourly_hours: int = Field(gt=0)
    rate_cents: int = Field(ge=0)
    label: Optional[str] = Field(default=None, max_length=100)

    @field_validator("label", mode="before")
    @classmethod
    def _blank_label(cls, value):
        return _blank_to_none(value)


class PriceSetIn(CamelModel):
    prices: List[PriceTierIn]


class GalleryItemIn(CamelModel):
    category: str = Field(min_length=1, max_length=50)
    caption: Optional[str] = Field(default=None, max_length=500)
    category_id: Optional[int] = Field(default=None, gt=0)
    # Already-uploaded file; omitted when a raw file is sent instead
    url: Optional[str] = Field(default=None, max_length=1000)
    storage_key: Optional[str] = Field(
        default=None,
        max_length=255,
        validation_alias=AliasChoices("storageKey", "storage_key", "publicId", "key"),
    )

    @field_validator("caption", "category_id", "url", "storage_key", mode="before")
    @classmethod
    def _blank_optional(cls, value):
        return _blank_to_none(value)


class LoginIn(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


# ==== Outputs ====

class ImageOut(CamelModel):
    id: int
    category: str
    url: str
    public_id: Optional[str] = None
    caption: Optional[str] = None
    category_id: Optional[int] = None
    created_at: Optional[datetime] = None


class PriceOut(CamelModel):
    id: int
    category_id: int
    hourly_hours: int
    rate_cents: int
    label: Optional[str] = None


class CategorySummary(CamelModel):
    id: int
    title: str
    slug: str


class CategoryOut(CamelModel):
    id: int
    slug: str
    title: str
    description: str
    specs: dict[str, Any]
    essential_amenities: List[str]
    bed_type: Optional[str] = None
    max_occupancy: Optional[int] = None
    room_size: Optional[str] = None
    room_count: int
    video_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    images: List[ImageOut] = Field(default_factory=list)
    prices: List[PriceOut] = Field(default_factory=list)


class GalleryItemOut(ImageOut):
    hotel_category: Optional[CategorySummary] = None


class AdminOut(CamelModel):
    id: int
    email: str


class UploadOut(BaseModel):
    success: bool = True
    url: str
    key: str
    secure_url: str
    public_id: str
    name: Optional[str] = None
    size: Optional[int] = None


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
