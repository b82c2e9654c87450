"""Users and stored AI recommendation results."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "202601150900"
down_revision = None
branch_labels = None
depends_on = None

RECOMMENDATION_TABLES = (
    "ai_body_analysis_results",
    "ai_diet_recommendations",
    "ai_workout_recommendations",
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )

    for table in RECOMMENDATION_TABLES:
        op.create_table(
            table,
            sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
            sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
            sa.Column("context_label", sa.Text(), nullable=True),
            sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
            sa.Column("model", sa.String(length=64), nullable=True),
            sa.Column("request_id", sa.String(length=64), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        )
        op.create_index(f"ix_{table}_user_created", table, ["user_id", "created_at"], unique=False)


def downgrade() -> None:
    for table in reversed(RECOMMENDATION_TABLES):
        op.drop_index(f"ix_{table}_user_created", table_name=table)
        op.drop_table(table)
    op.drop_table("users")
