"""
Mockup Approval Proxy - Send Log SQLAlchemy Model
===================================================

What:  ORM model for the `docusign_logs` table.
Why:   One row per envelope sent, so staff can audit who was asked to
       approve which mockup sheet, and when.
Who:   Written by DatabaseSendLogStore after each successful submission;
       read by GET /api/docusign-logs. Alembic migration 001 mirrors it.

Table Design Rationale:
    - Integer surrogate key: rows are append-only and never referenced
    - timestamp: when the envelope was sent (UTC, timezone-aware)
    - envelope_id: provider-assigned id, indexed for support lookups
    - created_at: when the row was written (server default)

    Index on timestamp DESC:
        The log view lists newest sends first and filters by date range.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from mockup_proxy.database import Base


class SendLog(Base):
    """
    A record of one envelope submitted for signature.

    Lifecycle:
        Inserted after the provider accepted the envelope. Never updated or
        deleted by the proxy.
    """

    __tablename__ = "docusign_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    envelope_id: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    recipient_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    recipient_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    signature_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    pdf_size_bytes: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    # Why TEXT: user agents have no useful upper bound
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return (
            f"<SendLog(envelope_id='{self.envelope_id}', status='{self.status}', "
            f"timestamp='{self.timestamp}')>"
        )


# Newest-first listing and date-range filters
Index("idx_docusign_logs_timestamp", SendLog.timestamp.desc())
Index("idx_docusign_logs_envelope_id", SendLog.envelope_id)
