"""fingerprint_associations

Revision ID: 5b2e9f0c1a7d
Revises:
Create Date: 2026-10-19 09:12:41.305118

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5b2e9f0c1a7d"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the append-only association table."""
    op.create_table(
        "fingerprint_associations",
        sa.Column("fingerprint", sa.String(255), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("fingerprint", "user_id"),
    )
    op.create_index(
        "ix_fingerprint_associations_fingerprint",
        "fingerprint_associations",
        ["fingerprint"],
    )
    op.create_index(
        "ix_fingerprint_associations_user_id",
        "fingerprint_associations",
        ["user_id"],
    )


def downgrade() -> None:
    """Drop the association table."""
    op.drop_index(
        "ix_fingerprint_associations_user_id", table_name="fingerprint_associations"
    )
    op.drop_index(
        "ix_fingerprint_associations_fingerprint",
        table_name="fingerprint_associations",
    )
    op.drop_table("fingerprint_associations")
