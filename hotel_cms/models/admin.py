from datetime import datetime
from sqlalchemy import Integer, String, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from ..db import Base


class Admin(Base):
    __tablename__ = "admins"
    # At most one admin row: every row must carry singleton == 1, and it is unique
    __table_args__ = (CheckConstraint("singleton = 1", name="ck_admins_singleton"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    singleton: Mapped[int] = mapped_column(Integer, default=1, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
