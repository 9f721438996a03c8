"""Audit trail for mood analyses and caretaker inbox actions.

Rows never carry the answers themselves. What is kept per event:

* ``tool_input_hash`` — SHA-256 over the canonical JSON of the request, so
  identical submissions can be correlated without storing them.
* ``llm_disclosed``  — set when the answers went out to the text-generation
  endpoint (AI path), whatever the outcome.
* ``metadata``       — the analysis source and detected mood, or small
  counters such as how many alerts were cleared.
"""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from carewatch.core.storage.database import CareDatabase

logger = logging.getLogger(__name__)

_INSERT_EVENT = """INSERT INTO audit_log (
    id, timestamp, action, tool_name, tool_input_hash,
    llm_provider, llm_disclosed, mood_entry_id,
    duration_ms, status, error_type, metadata_json
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"""


def _hash_input(data: Any) -> str:
    """Hex SHA-256 of ``data`` as sorted compact JSON; "" when not serializable."""
    try:
        canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError):
        return ""
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass
class AuditEvent:
    action: str                          # 'mood_analysis' | 'tool_invocation'
    tool_name: str = ""
    tool_input_hash: str = ""
    llm_provider: str | None = None
    llm_disclosed: bool = False
    mood_entry_id: str | None = None
    duration_ms: float | None = None
    status: str = "success"              # 'success' | 'failure'
    error_type: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def as_row(self, event_id: str, timestamp: str) -> tuple[Any, ...]:
        return (
            event_id,
            timestamp,
            self.action,
            self.tool_name or None,
            self.tool_input_hash or None,
            self.llm_provider,
            int(self.llm_disclosed),
            self.mood_entry_id,
            self.duration_ms,
            self.status,
            self.error_type,
            json.dumps(self.metadata, separators=(",", ":")) if self.metadata else None,
        )


class AuditLogger:
    """Append-only writer and reader for the ``audit_log`` table.

    A write that fails is reported through ``logger.exception`` and dropped;
    auditing never turns a successful check-in into an error.

    Usage::

        audit = AuditLogger(care_db)
        audit.log_tool_call("mark_all_notifications_read", {"caretaker_id": cid})
        recent = audit.get_events(action="mood_analysis", limit=10)
    """

    def __init__(self, database: CareDatabase) -> None:
        self._db = database

    def log_event(self, event: AuditEvent) -> str:
        """Persist ``event``; returns the new row id, or "" if nothing was written."""
        event_id = uuid.uuid4().hex
        row = event.as_row(event_id, datetime.now(timezone.utc).isoformat())
        try:
            conn = self._db.connection
            conn.execute(_INSERT_EVENT, row)
            conn.commit()
        except Exception:
            logger.exception("Dropping audit event %s/%s", event.action, event.tool_name)
            return ""
        return event_id

    def log_analysis(
        self,
        *,
        user_id: str,
        question_answers: Any,
        llm_provider: str | None,
        llm_disclosed: bool,
        mood_entry_id: str | None,
        duration_ms: float | None,
        analysis_source: str,
        detected_mood: str,
    ) -> str:
        """One pass of the analysis pipeline, keyed to the stored mood entry."""
        event = AuditEvent(
            action="mood_analysis",
            tool_name="analyze_mood",
            tool_input_hash=_hash_input({"user_id": user_id, "answers": question_answers}),
            llm_provider=llm_provider,
            llm_disclosed=llm_disclosed,
            mood_entry_id=mood_entry_id,
            duration_ms=duration_ms,
            metadata={"analysis_source": analysis_source, "detected_mood": detected_mood},
        )
        return self.log_event(event)

    def log_tool_call(
        self,
        tool_name: str,
        tool_input: Any = None,
        *,
        duration_ms: float | None = None,
        status: str = "success",
        error_type: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        event = AuditEvent(
            action="tool_invocation",
            tool_name=tool_name,
            tool_input_hash=_hash_input(tool_input) if tool_input else "",
            duration_ms=duration_ms,
            status=status,
            error_type=error_type,
            metadata=dict(metadata or {}),
        )
        return self.log_event(event)

    def get_events(
        self,
        *,
        action: str | None = None,
        tool_name: str | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Newest-first audit rows, optionally filtered by action and tool."""
        filters = {"action": action, "tool_name": tool_name}
        clauses = [f"{column} = ?" for column, value in filters.items() if value]
        params: list[Any] = [value for value in filters.values() if value]

        query = "SELECT * FROM audit_log"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY timestamp DESC, rowid DESC LIMIT ?"
        params.append(limit)
        return [dict(row) for row in self._db.connection.execute(query, params)]

    def count_disclosures(self) -> int:
        """Number of analyses whose answers were sent to the text-generation endpoint."""
        (count,) = self._db.connection.execute(
            "SELECT COUNT(*) FROM audit_log WHERE llm_disclosed = 1"
        ).fetchone()
        return count
