from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from app.analysis.types import KeywordCategory
from app.db.base import Base


class Keyword(Base):
    """A tracked search phrase owned by a client."""

    __tablename__ = "keywords"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    keyword: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), default="General", index=True)

    # SEO enrichment (filled by keyword-creation flows)
    search_volume: Mapped[int] = mapped_column(Integer, default=0, index=True)
    competition: Mapped[str] = mapped_column(String(10), default="Medium")  # Low | Medium | High
    cpc: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))
    difficulty: Mapped[int] = mapped_column(Integer, default=50)  # 0–100

    # Per-platform visibility (0–100), refreshed on every analysis
    visibility_chatgpt: Mapped[int] = mapped_column(Integer, default=0)
    visibility_perplexity: Mapped[int] = mapped_column(Integer, default=0)
    visibility_claude: Mapped[int] = mapped_column(Integer, default=0)
    visibility_gemini: Mapped[int] = mapped_column(Integer, default=0)

    last_analyzed: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(10), default="active", index=True)  # active | paused | archived
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Relationships
    client: Mapped["Client"] = relationship("Client", back_populates="keywords")  # noqa: F821
    analyses: Mapped[list["Analysis"]] = relationship(  # noqa: F821
        "Analysis", back_populates="keyword", cascade="all, delete-orphan", passive_deletes=True
    )

    @validates("category")
    def _validate_category(self, key: str, value: str) -> str:
        try:
            return KeywordCategory(value).value
        except ValueError:
            valid = ", ".join(c.value for c in KeywordCategory)
            raise ValueError(f"Unknown keyword category {value!r} (expected one of: {valid})") from None


# Case-insensitive (client, text) uniqueness
Index("uq_client_keyword_lower", Keyword.client_id, func.lower(Keyword.keyword), unique=True)
