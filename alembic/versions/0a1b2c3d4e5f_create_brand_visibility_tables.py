"""create clients, keywords and analyses tables

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "0a1b2c3d4e5f"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # =========================================================
    # 1. clients
    # =========================================================
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("industry", sa.String(100), nullable=False, server_default="Technology"),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("settings", JSONB(), nullable=True, server_default=sa.text("'{}'::jsonb")),
        sa.Column(
            "api_limits",
            JSONB(),
            nullable=True,
            server_default=sa.text("""'{"daily_requests": 1000, "monthly_requests": 30000}'::jsonb"""),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_clients_industry", "clients", ["industry"])
    op.create_index("ix_clients_active", "clients", ["active"])

    # =========================================================
    # 2. keywords
    # =========================================================
    op.create_table(
        "keywords",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "client_id", sa.Integer(), sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
        ),
        sa.Column("keyword", sa.String(255), nullable=False),
        sa.Column("category", sa.String(100), nullable=False, server_default="General", index=True),
        sa.Column("search_volume", sa.Integer(), nullable=False, server_default="0", index=True),
        sa.Column("competition", sa.String(10), nullable=False, server_default="Medium"),
        sa.Column("cpc", sa.Numeric(10, 2), nullable=False, server_default="0.00"),
        sa.Column("difficulty", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("visibility_chatgpt", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("visibility_perplexity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("visibility_claude", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("visibility_gemini", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_analyzed", sa.DateTime(timezone=True), nullable=True, index=True),
        sa.Column("status", sa.String(10), nullable=False, server_default="active", index=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("difficulty BETWEEN 0 AND 100", name="ck_keyword_difficulty"),
        sa.CheckConstraint("status IN ('active', 'paused', 'archived')", name="ck_keyword_status"),
        sa.CheckConstraint(
            "category IN ('General', 'Gambling', 'Cryptocurrency', 'Sports Betting', 'Casino Games', "
            "'Promotions', 'Banking', 'Support')",
            name="ck_keyword_category",
        ),
    )
    op.execute("CREATE UNIQUE INDEX uq_client_keyword_lower ON keywords (client_id, lower(keyword))")

    # =========================================================
    # 3. analyses
    # =========================================================
    op.create_table(
        "analyses",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column(
            "keyword_id", sa.Integer(), sa.ForeignKey("keywords.id", ondelete="CASCADE"), nullable=False, index=True
        ),
        sa.Column("platform", sa.String(20), nullable=False, index=True),
        sa.Column("query", sa.Text(), nullable=False),
        sa.Column("response", sa.Text(), nullable=False),
        sa.Column("citations", JSONB(), nullable=True, server_default=sa.text("'[]'::jsonb")),
        sa.Column("brand_mentioned", sa.Boolean(), nullable=False, server_default="false", index=True),
        sa.Column("brand_sentiment", sa.String(20), nullable=False, server_default="Neutral", index=True),
        sa.Column("overall_sentiment", sa.String(10), nullable=False, server_default="Neutral"),
        sa.Column("confidence_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("word_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("response_time_ms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("analysis_metadata", JSONB(), nullable=True, server_default=sa.text("'{}'::jsonb")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), index=True),
        sa.CheckConstraint(
            "platform IN ('ChatGPT', 'Perplexity', 'Claude', 'Gemini', 'Google AI')", name="ck_analysis_platform"
        ),
        sa.CheckConstraint("confidence_score BETWEEN 0 AND 1", name="ck_analysis_confidence"),
    )
    # Aggregations filter by keyword then time window
    op.create_index("ix_analyses_keyword_created", "analyses", ["keyword_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_analyses_keyword_created", table_name="analyses")
    op.drop_table("analyses")
    op.execute("DROP INDEX IF EXISTS uq_client_keyword_lower")
    op.drop_table("keywords")
    op.drop_index("ix_clients_active", table_name="clients")
    op.drop_index("ix_clients_industry", table_name="clients")
    op.drop_table("clients")
