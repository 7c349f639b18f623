from datetime import datetime, timezone

from sqlalchemy import BigInteger, Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Analysis(Base):
    """One answer-engine observation for a keyword on a platform. Written once, never updated."""

    __tablename__ = "analyses"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    keyword_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("keywords.id", ondelete="CASCADE"), nullable=False, index=True
    )
    platform: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True
    )  # ChatGPT | Perplexity | Claude | Gemini | Google AI
    query: Mapped[str] = mapped_column(Text, nullable=False)
    response: Mapped[str] = mapped_column(Text, nullable=False)
    citations: Mapped[list] = mapped_column(JSONB, default=list)  # [{"url", "position", "title"}, ...]

    # Classification results
    brand_mentioned: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    brand_sentiment: Mapped[str] = mapped_column(String(20), default="Neutral", index=True)  # 5-point scale
    overall_sentiment: Mapped[str] = mapped_column(String(10), default="Neutral")  # 3-point scale
    confidence_score: Mapped[float] = mapped_column(Float, default=0.0)  # 0.00–1.00

    # Raw metrics
    word_count: Mapped[int] = mapped_column(Integer, default=0)
    response_time_ms: Mapped[int] = mapped_column(Integer, default=0)
    analysis_metadata: Mapped[dict] = mapped_column(JSONB, default=dict)  # keyTopics, model, timestamp, usage

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True
    )

    # Relationships
    keyword: Mapped["Keyword"] = relationship("Keyword", back_populates="analyses")  # noqa: F821
