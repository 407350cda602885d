"""Create docusign_logs table

Revision ID: 001
Revises: None
Create Date: 2025-01-17 00:00:00.000000+00:00

What:  Creates the `docusign_logs` table, one row per envelope sent.
How:   Matches mockup_proxy/models/send_log.py. Skips creation when
       the table already exists, so databases where the application
       created it at startup can still be upgraded.

Rollback: downgrade() drops the table (the send history is lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    if sa.inspect(bind).has_table("docusign_logs"):
        return

    op.create_table(
        "docusign_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "timestamp",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            comment="When the envelope was sent (UTC)",
        ),
        sa.Column(
            "envelope_id",
            sa.String(255),
            nullable=False,
            comment="DocuSign envelope id",
        ),
        sa.Column("status", sa.String(50), nullable=True),
        sa.Column("recipient_email", sa.String(255), nullable=True),
        sa.Column("recipient_name", sa.String(255), nullable=True),
        sa.Column("signature_count", sa.Integer(), nullable=True),
        sa.Column("pdf_size_bytes", sa.BigInteger(), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(100), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index(
        "idx_docusign_logs_timestamp",
        "docusign_logs",
        [sa.text("timestamp DESC")],
    )
    op.create_index(
        "idx_docusign_logs_envelope_id",
        "docusign_logs",
        ["envelope_id"],
    )


def downgrade() -> None:
    op.drop_index("idx_docusign_logs_envelope_id", table_name="docusign_logs")
    op.drop_index("idx_docusign_logs_timestamp", table_name="docusign_logs")
    op.drop_table("docusign_logs")
