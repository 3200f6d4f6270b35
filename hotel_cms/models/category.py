from datetime import datetime
from typing import Any
from sqlalchemy import Integer, String, Text, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base


class HotelCategory(Base):
    """A room type as shown on the public site."""

    __tablename__ = "hotel_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # amenity flag -> enabled, e.g. {"ac": true, "wifi": true}
    specs: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    essential_amenities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    bed_type: Mapped[str | None] = mapped_column(String(100))
    max_occupancy: Mapped[int | None] = mapped_column(Integer)
    room_size: Mapped[str | None] = mapped_column(String(100))
    room_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    video_url: Mapped[str | None] = mapped_column(String(1000))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    images: Mapped[list["GalleryImage"]] = relationship(
        back_populates="hotel_category",
        cascade="all, delete-orphan",
        order_by="GalleryImage.id",
    )
    prices: Mapped[list["Price"]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
        order_by="Price.hourly_hours",
    )
