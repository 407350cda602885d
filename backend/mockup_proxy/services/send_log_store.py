"""
Mockup Approval Proxy - Send Log Stores
=========================================

What:  Persistence for SendLogEntry records, with two interchangeable
       backends and a best-effort recorder in front of them.
Why:   Production keeps an unbounded audit table in PostgreSQL; local
       development keeps a JSON file capped at the newest 1000 entries.
How:   SendLogStore defines append() and query(). SendLogger.record() wraps
       append() so a logging failure never fails a send that already
       succeeded.

Store selection (create_send_log_store):
    DATABASE_URL set   → DatabaseSendLogStore (transactional inserts)
    DATABASE_URL empty → JsonFileSendLogStore (writes serialized by an
                         asyncio.Lock; safe for one process only)

Query semantics (both stores):
    - newest first
    - optional inclusive start/end bounds on `timestamp`
    - `total` is the unfiltered number of stored entries
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import aiofiles
from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mockup_proxy.config import settings
from mockup_proxy.database import get_session_factory
from mockup_proxy.exceptions import LoggingError, ValidationError
from mockup_proxy.models.send_log import SendLog
from mockup_proxy.schemas.send_log import SendLogEntry, SendLogPage

logger = logging.getLogger(__name__)

DEFAULT_QUERY_LIMIT = 50


def parse_date_bound(value: Optional[str], name: str) -> Optional[datetime]:
    """
    Parse a startDate/endDate query value.

    Accepts ISO 8601 dates or datetimes ("2025-01-17", "2025-01-17T10:00:00Z").
    Naive values are taken as UTC.
    """
    if value is None or value == "":
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(
            message=f"{name} must be an ISO 8601 date or datetime",
            field=name,
            context={"value": value},
        )
    return _as_utc(parsed)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SendLogStore(ABC):
    """Append-only store of envelope sends."""

    @abstractmethod
    async def append(self, entry: SendLogEntry) -> None:
        """Persist one entry. Raises LoggingError on failure."""
        ...

    @abstractmethod
    async def query(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = DEFAULT_QUERY_LIMIT,
    ) -> SendLogPage:
        """Return newest-first entries within [start, end], at most `limit`."""
        ...


# ══════════════════════════════════════════════════════════════════════════
# JSON File Store
# ══════════════════════════════════════════════════════════════════════════

class JsonFileSendLogStore(SendLogStore):
    """
    Bounded JSON-array file: `{"logs": [newest, ..., oldest]}`.

    New entries are inserted at the front; anything past `max_entries` is
    dropped on the same write. A process-local lock serializes the
    read-modify-write cycle so concurrent sends do not lose entries.
    """

    def __init__(self, path: str, max_entries: int = 1000):
        self.path = Path(path)
        self.max_entries = max_entries
        self._lock = asyncio.Lock()

    async def _read_raw(self) -> List[dict]:
        if not self.path.exists():
            return []
        async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
            content = await f.read()
        if not content.strip():
            return []
        data = json.loads(content)
        logs = data.get("logs", []) if isinstance(data, dict) else []
        return logs if isinstance(logs, list) else []

    async def _write_raw(self, logs: List[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps({"logs": logs}, indent=2))
        # Atomic replace: a crash mid-write never leaves a truncated log
        tmp_path.replace(self.path)

    async def append(self, entry: SendLogEntry) -> None:
        record = entry.model_dump(mode="json", by_alias=True)
        async with self._lock:
            try:
                logs = await self._read_raw()
                logs.insert(0, record)
                if len(logs) > self.max_entries:
                    logs = logs[: self.max_entries]
                await self._write_raw(logs)
            except (OSError, ValueError) as e:
                raise LoggingError(
                    message=f"Could not write send log file: {e}",
                    context={"path": str(self.path), "error_type": type(e).__name__},
                ) from e
        logger.info("Logged DocuSign send to file: %s", entry.envelope_id)

    async def query(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = DEFAULT_QUERY_LIMIT,
    ) -> SendLogPage:
        try:
            raw = await self._read_raw()
        except (OSError, ValueError) as e:
            raise LoggingError(
                message=f"Could not read send log file: {e}",
                context={"path": str(self.path)},
            ) from e

        entries = []
        for item in raw:
            try:
                entries.append(SendLogEntry.model_validate(item))
            except ValueError:
                logger.warning("Skipping malformed send log entry: %r", item)

        selected = [
            e for e in entries
            if (start is None or _as_utc(e.timestamp) >= start)
            and (end is None or _as_utc(e.timestamp) <= end)
        ][:limit]

        return SendLogPage(total=len(raw), returned=len(selected), logs=selected)


# ══════════════════════════════════════════════════════════════════════════
# Relational Store
# ══════════════════════════════════════════════════════════════════════════

class DatabaseSendLogStore(SendLogStore):
    """
    `docusign_logs` table via async SQLAlchemy.

    Each append is its own transaction, which makes concurrent writers safe.
    Unbounded: rows are never pruned.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def append(self, entry: SendLogEntry) -> None:
        row = SendLog(
            timestamp=_as_utc(entry.timestamp),
            envelope_id=entry.envelope_id,
            status=entry.status,
            recipient_email=entry.recipient_email,
            recipient_name=entry.recipient_name,
            signature_count=entry.signature_count,
            pdf_size_bytes=entry.pdf_size_bytes,
            user_agent=entry.user_agent,
            ip_address=entry.ip_address,
        )
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    session.add(row)
        # asyncpg connect failures surface as bare OSError
        except (SQLAlchemyError, OSError) as e:
            raise LoggingError(
                message="Could not insert send log row",
                context={"envelope_id": entry.envelope_id, "error_type": type(e).__name__},
            ) from e
        logger.info("Logged DocuSign send to database: %s", entry.envelope_id)

    async def query(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = DEFAULT_QUERY_LIMIT,
    ) -> SendLogPage:
        stmt = select(SendLog)
        if start is not None:
            stmt = stmt.where(SendLog.timestamp >= start)
        if end is not None:
            stmt = stmt.where(SendLog.timestamp <= end)
        stmt = stmt.order_by(desc(SendLog.timestamp)).limit(limit)

        try:
            async with self.session_factory() as session:
                rows = list((await session.execute(stmt)).scalars().all())
                total = (await session.execute(select(func.count(SendLog.id)))).scalar() or 0
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error reading send log: %s", str(e))
            raise LoggingError(
                message="Could not read send log",
                context={"error_type": type(e).__name__},
            ) from e

        logs = [
            SendLogEntry(
                # SQLite drops tzinfo; stored values are always UTC
                timestamp=_as_utc(row.timestamp),
                envelope_id=row.envelope_id,
                status=row.status,
                recipient_email=row.recipient_email,
                recipient_name=row.recipient_name,
                signature_count=row.signature_count,
                pdf_size_bytes=row.pdf_size_bytes,
                user_agent=row.user_agent,
                ip_address=row.ip_address,
            )
            for row in rows
        ]
        return SendLogPage(total=int(total), returned=len(logs), logs=logs)


# ══════════════════════════════════════════════════════════════════════════
# Best-effort recorder
# ══════════════════════════════════════════════════════════════════════════

class SendLogger:
    """
    Front door used by the send flow.

    record() never raises: by the time it runs, the envelope is
    already with the signer, and failing the HTTP response would invite a
    duplicate send.
    """

    def __init__(self, store: SendLogStore):
        self.store = store

    async def record(self, entry: SendLogEntry) -> bool:
        """Append the entry. Returns False (and logs) when the store failed."""
        try:
            await self.store.append(entry)
            return True
        except LoggingError as e:
            logger.error(
                "Error logging DocuSign send %s: %s | Context: %s",
                entry.envelope_id,
                e.message,
                e.context,
            )
            return False
        except Exception:
            logger.error(
                "Unexpected error logging DocuSign send %s", entry.envelope_id, exc_info=True
            )
            return False

    async def query(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = DEFAULT_QUERY_LIMIT,
    ) -> SendLogPage:
        return await self.store.query(start=start, end=end, limit=limit)


def create_send_log_store() -> SendLogStore:
    """Pick the relational store when DATABASE_URL is set, else the JSON file."""
    session_factory = get_session_factory()
    if session_factory is not None:
        logger.info("Using PostgreSQL database for DocuSign logs")
        return DatabaseSendLogStore(session_factory)
    logger.info("Using JSON file storage for DocuSign logs: %s", settings.docusign_log_file)
    return JsonFileSendLogStore(settings.docusign_log_file, settings.send_log_max_entries)


_send_logger: Optional[SendLogger] = None


def get_send_logger() -> SendLogger:
    """Process-wide SendLogger, created on first use."""
    global _send_logger
    if _send_logger is None:
        _send_logger = SendLogger(create_send_log_store())
    return _send_logger
