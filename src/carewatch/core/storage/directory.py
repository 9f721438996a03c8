"""User directory — the slice of account data the mood pipeline needs.

Accounts, authentication and profiles are owned by the account service;
this table mirrors who is elderly, who is a caretaker, and who looks after
whom, plus the dashboard's ``current_mood`` / ``last_active`` fields.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime, timezone

from carewatch.core.storage.database import CareDatabase
from carewatch.core.storage.models import UserRecord
from carewatch.core.storage.repository import NotFoundError

logger = logging.getLogger(__name__)


class UserDirectory:
    """Lookup of users and caretaker assignments."""

    def __init__(self, database: CareDatabase) -> None:
        self._db = database

    def add_user(
        self,
        name: str,
        role: str,
        *,
        caretaker_id: str | None = None,
        user_id: str = "",
    ) -> UserRecord:
        """Register a user. ``caretaker_id`` must reference an existing caretaker."""
        if role not in ("elderly", "caretaker"):
            raise ValueError("role must be one of: elderly | caretaker")
        if caretaker_id is not None:
            caretaker = self.get_user(caretaker_id)
            if caretaker is None or caretaker.role != "caretaker":
                raise NotFoundError(f"Caretaker not found: {caretaker_id}")

        uid = user_id or str(uuid.uuid4())
        conn = self._db.connection
        conn.execute(
            """INSERT INTO users (id, name, role, caretaker_id, last_active)
               VALUES (?, ?, ?, ?, ?)""",
            (uid, name, role, caretaker_id, datetime.now(timezone.utc).isoformat()),
        )
        conn.commit()
        logger.info("Registered %s user %s", role, uid)
        user = self.get_user(uid)
        assert user is not None
        return user

    def get_user(self, user_id: str) -> UserRecord | None:
        row = self._db.connection.execute(
            "SELECT * FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        return self._row_to_user(row) if row is not None else None

    def require_user(self, user_id: str) -> UserRecord:
        """Like ``get_user`` but raises ``NotFoundError`` for unknown ids."""
        user = self.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")
        return user

    def caretaker_for(self, elderly_user_id: str) -> UserRecord | None:
        """The caretaker assigned to an elderly user, if any."""
        row = self._db.connection.execute(
            """SELECT c.* FROM users e
               JOIN users c ON c.id = e.caretaker_id
               WHERE e.id = ? AND c.role = 'caretaker'""",
            (elderly_user_id,),
        ).fetchone()
        return self._row_to_user(row) if row is not None else None

    def record_check_in(self, user_id: str, current_mood: str) -> None:
        """Set the dashboard mood and bump ``last_active``; unknown ids are ignored."""
        conn = self._db.connection
        conn.execute(
            "UPDATE users SET current_mood = ?, last_active = ? WHERE id = ?",
            (current_mood, datetime.now(timezone.utc).isoformat(), user_id),
        )
        conn.commit()

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> UserRecord:
        return UserRecord(
            id=row["id"],
            name=row["name"],
            role=row["role"],
            caretaker_id=row["caretaker_id"],
            current_mood=row["current_mood"],
            last_active=row["last_active"],
            is_active=bool(row["is_active"]),
        )
