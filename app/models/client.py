from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


def _default_api_limits() -> dict:
    return {"daily_requests": 1000, "monthly_requests": 30000}


class Client(Base):
    """Tenant boundary. Every aggregation is scoped to exactly one client."""

    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    industry: Mapped[str] = mapped_column(String(100), default="Technology", index=True)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    settings: Mapped[dict | None] = mapped_column(JSONB, default=dict)  # {"target_platforms": [...], ...}
    api_limits: Mapped[dict | None] = mapped_column(JSONB, default=_default_api_limits)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    keywords: Mapped[list["Keyword"]] = relationship(  # noqa: F821
        "Keyword", back_populates="client", cascade="all, delete-orphan", passive_deletes=True
    )
