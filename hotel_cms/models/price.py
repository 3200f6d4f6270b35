from datetime import datetime
from sqlalchemy import Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base


class Price(Base):
    __tablename__ = "prices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("hotel_categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    hourly_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    # Integer cents; never floats for money
    rate_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    label: Mapped[str | None] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    category: Mapped["HotelCategory"] = relationship(back_populates="prices")
