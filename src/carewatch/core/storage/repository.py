"""Mood entry and notification repositories.

``MoodRepository`` keeps exactly one check-in per user per day: a second
analysis on the same day overwrites the first. ``NotificationRepository``
holds caretaker alerts and their read/unread state.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any, Iterable
from zoneinfo import ZoneInfo

from carewatch.core.storage.database import CareDatabase
from carewatch.core.storage.encryption import FieldEncryptor
from carewatch.core.storage.models import MoodEntry, Notification
from carewatch.domains.mood.domain_logic.mood_models import legacy_mood_for

if TYPE_CHECKING:
    from carewatch.domains.mood.domain_logic.mood_models import (
        ClassificationResult,
        QuestionAnswer,
    )

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Raised when repository operations fail."""


class NotFoundError(RepositoryError):
    """The referenced user, entry or notification does not exist."""


class PersistenceConflict(RepositoryError):
    """A unique-key conflict could not be resolved into an update."""


def _new_id() -> str:
    return str(uuid.uuid4())


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class MoodRepository:
    """Per-user, per-day mood entries.

    Usage::

        repo = MoodRepository(db, encryptor, day_boundary_tz="Europe/London")
        entry = repo.upsert_entry(user_id, datetime.now(timezone.utc), result, answers)
        same_day = repo.get_entry(user_id, entry.entry_date)
    """

    def __init__(
        self,
        database: CareDatabase,
        encryptor: FieldEncryptor,
        day_boundary_tz: str = "UTC",
    ) -> None:
        self._db = database
        self._enc = encryptor
        self._tz = ZoneInfo(day_boundary_tz)

    @property
    def timezone(self) -> ZoneInfo:
        return self._tz

    def day_key(self, instant: datetime) -> str:
        """Truncate ``instant`` to its calendar day in the reference timezone.

        Naive datetimes are taken to already be in the reference timezone.
        """
        if instant.tzinfo is None:
            local = instant.replace(tzinfo=self._tz)
        else:
            local = instant.astimezone(self._tz)
        return local.date().isoformat()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def upsert_entry(
        self,
        user_id: str,
        instant: datetime,
        result: ClassificationResult,
        question_answers: Iterable[QuestionAnswer],
    ) -> MoodEntry:
        """Create or overwrite the entry for ``(user_id, day of instant)``.

        On overwrite every classification field and the whole responses list
        are replaced; the entry id and ``created_at`` are kept.
        """
        entry_date = self.day_key(instant)
        legacy_mood, mood_score = legacy_mood_for(result.mood)
        now = _now_iso()
        values = (
            legacy_mood,
            mood_score,
            result.mood,
            result.confidence,
            json.dumps(list(result.emotions_detected)),
            result.reason,
            result.analysis_source,
            self._enc.encrypt([qa.to_dict() for qa in question_answers]),
        )

        conn = self._db.connection
        existing = conn.execute(
            "SELECT id FROM mood_entries WHERE user_id = ? AND entry_date = ?",
            (user_id, entry_date),
        ).fetchone()

        if existing is None:
            try:
                conn.execute(
                    """INSERT INTO mood_entries (
                        id, user_id, entry_date,
                        mood, mood_score,
                        detected_mood, confidence, emotions_json, reason, analysis_source,
                        responses_enc, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    (_new_id(), user_id, entry_date, *values, now, now),
                )
                logger.info("Created mood entry for user %s on %s", user_id, entry_date)
            except sqlite3.IntegrityError:
                # Another writer created the row between our SELECT and INSERT.
                logger.info(
                    "Concurrent insert for user %s on %s; retrying as update",
                    user_id,
                    entry_date,
                )
                self._overwrite(user_id, entry_date, values, now)
        else:
            self._overwrite(user_id, entry_date, values, now)
            logger.info("Overwrote mood entry for user %s on %s", user_id, entry_date)

        conn.commit()

        entry = self.get_entry(user_id, entry_date)
        if entry is None:  # pragma: no cover
            raise RepositoryError(f"Mood entry vanished after upsert: {user_id} {entry_date}")
        return entry

    def _overwrite(
        self, user_id: str, entry_date: str, values: tuple[Any, ...], now: str
    ) -> None:
        cursor = self._db.connection.execute(
            """UPDATE mood_entries SET
                mood = ?, mood_score = ?,
                detected_mood = ?, confidence = ?, emotions_json = ?, reason = ?,
                analysis_source = ?, responses_enc = ?, updated_at = ?
               WHERE user_id = ? AND entry_date = ?""",
            (*values, now, user_id, entry_date),
        )
        if cursor.rowcount != 1:
            raise PersistenceConflict(
                f"Could not overwrite mood entry for {user_id} on {entry_date}"
            )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_entry(self, user_id: str, entry_date: str | date) -> MoodEntry | None:
        """Return the entry for one user and day, or None."""
        if isinstance(entry_date, date):
            entry_date = entry_date.isoformat()
        row = self._db.connection.execute(
            "SELECT * FROM mood_entries WHERE user_id = ? AND entry_date = ?",
            (user_id, entry_date),
        ).fetchone()
        return self._row_to_entry(row) if row is not None else None

    def get_entries(
        self,
        user_id: str,
        *,
        since: str | None = None,
        until: str | None = None,
    ) -> list[MoodEntry]:
        """Entries for a user, oldest first, with optional inclusive date bounds."""
        conditions = ["user_id = ?"]
        params: list[Any] = [user_id]
        if since:
            conditions.append("entry_date >= ?")
            params.append(since)
        if until:
            conditions.append("entry_date <= ?")
            params.append(until)

        query = (
            "SELECT * FROM mood_entries WHERE "
            + " AND ".join(conditions)
            + " ORDER BY entry_date ASC"
        )
        rows = self._db.connection.execute(query, params).fetchall()
        return [self._row_to_entry(r) for r in rows]

    def count_entries(self, user_id: str | None = None) -> int:
        if user_id is None:
            row = self._db.connection.execute("SELECT COUNT(*) FROM mood_entries").fetchone()
        else:
            row = self._db.connection.execute(
                "SELECT COUNT(*) FROM mood_entries WHERE user_id = ?", (user_id,)
            ).fetchone()
        return row[0]

    def _row_to_entry(self, row: sqlite3.Row) -> MoodEntry:
        return MoodEntry(
            id=row["id"],
            user_id=row["user_id"],
            entry_date=row["entry_date"],
            mood=row["mood"],
            mood_score=row["mood_score"],
            detected_mood=row["detected_mood"],
            confidence=row["confidence"],
            emotions_detected=json.loads(row["emotions_json"] or "[]"),
            reason=row["reason"],
            analysis_source=row["analysis_source"],
            responses=self._enc.decrypt(row["responses_enc"]) or [],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


class NotificationRepository:
    """Caretaker notifications, queried by caretaker and read state."""

    def __init__(self, database: CareDatabase) -> None:
        self._db = database

    def create(self, notification: Notification) -> Notification:
        """Persist a new notification; fills in ``id`` and ``created_at`` if empty."""
        notification.id = notification.id or _new_id()
        notification.created_at = notification.created_at or _now_iso()

        conn = self._db.connection
        conn.execute(
            """INSERT INTO notifications (
                id, caretaker_id, elderly_user_id, type, detected_mood, risk_level,
                message, emotions_json, is_read, mood_entry_id, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                notification.id,
                notification.caretaker_id,
                notification.elderly_user_id,
                notification.type,
                notification.detected_mood,
                notification.risk_level,
                notification.message,
                json.dumps(list(notification.emotions_detected)),
                1 if notification.is_read else 0,
                notification.mood_entry_id,
                notification.created_at,
            ),
        )
        conn.commit()
        return notification

    def get(self, notification_id: str) -> Notification | None:
        row = self._db.connection.execute(
            "SELECT * FROM notifications WHERE id = ?", (notification_id,)
        ).fetchone()
        return self._row_to_notification(row) if row is not None else None

    def list_for_caretaker(
        self,
        caretaker_id: str,
        *,
        unread_only: bool = False,
        limit: int = 50,
    ) -> list[Notification]:
        """Notifications for a caretaker, newest first."""
        query = "SELECT * FROM notifications WHERE caretaker_id = ?"
        params: list[Any] = [caretaker_id]
        if unread_only:
            query += " AND is_read = 0"
        query += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
        params.append(limit)
        rows = self._db.connection.execute(query, params).fetchall()
        return [self._row_to_notification(r) for r in rows]

    def count_unread(self, caretaker_id: str) -> int:
        row = self._db.connection.execute(
            "SELECT COUNT(*) FROM notifications WHERE caretaker_id = ? AND is_read = 0",
            (caretaker_id,),
        ).fetchone()
        return row[0]

    def mark_read(self, notification_id: str, caretaker_id: str) -> Notification:
        """Mark one of the caretaker's notifications as read.

        Raises:
            NotFoundError: If no such notification belongs to the caretaker.
        """
        conn = self._db.connection
        cursor = conn.execute(
            "UPDATE notifications SET is_read = 1 WHERE id = ? AND caretaker_id = ?",
            (notification_id, caretaker_id),
        )
        conn.commit()
        if cursor.rowcount == 0:
            raise NotFoundError(f"Notification not found: {notification_id}")
        notification = self.get(notification_id)
        assert notification is not None
        return notification

    def mark_all_read(self, caretaker_id: str) -> int:
        """Mark every unread notification of the caretaker as read; returns the count."""
        conn = self._db.connection
        cursor = conn.execute(
            "UPDATE notifications SET is_read = 1 WHERE caretaker_id = ? AND is_read = 0",
            (caretaker_id,),
        )
        conn.commit()
        return cursor.rowcount

    def count(self) -> int:
        return self._db.connection.execute("SELECT COUNT(*) FROM notifications").fetchone()[0]

    @staticmethod
    def _row_to_notification(row: sqlite3.Row) -> Notification:
        return Notification(
            id=row["id"],
            caretaker_id=row["caretaker_id"],
            elderly_user_id=row["elderly_user_id"],
            type=row["type"],
            detected_mood=row["detected_mood"],
            risk_level=row["risk_level"],
            message=row["message"],
            emotions_detected=json.loads(row["emotions_json"] or "[]"),
            is_read=bool(row["is_read"]),
            mood_entry_id=row["mood_entry_id"],
            created_at=row["created_at"],
        )
