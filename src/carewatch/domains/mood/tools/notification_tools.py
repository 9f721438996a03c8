"""MCP tools for the caretaker's alert inbox (pull-based)."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from carewatch.core.storage.repository import NotFoundError

if TYPE_CHECKING:
    from carewatch.core.audit.logger import AuditLogger
    from carewatch.core.storage.directory import UserDirectory
    from carewatch.core.storage.repository import NotificationRepository

logger = logging.getLogger(__name__)


def register_notification_tools(
    mcp: FastMCP,
    notifications: NotificationRepository,
    directory: UserDirectory,
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register caretaker notification tools on the MCP server."""

    @mcp.tool
    async def list_notifications(ctx: Context, caretaker_id: str, limit: int = 50) -> str:
        """The caretaker's newest alerts plus the number still unread.

        Args:
            caretaker_id: The caretaker whose inbox to read.
            limit: Maximum number of alerts to return (default 50).
        """
        try:
            directory.require_user(caretaker_id)
        except NotFoundError:
            return json.dumps({"status": "not_found", "message": f"User not found: {caretaker_id}"})

        items = []
        for n in notifications.list_for_caretaker(caretaker_id, limit=limit):
            elderly = directory.get_user(n.elderly_user_id)
            item = n.to_dict()
            item["elderlyUser"] = (
                {"id": elderly.id, "name": elderly.name} if elderly else None
            )
            items.append(item)

        return json.dumps({
            "status": "ok",
            "data": {
                "notifications": items,
                "unreadCount": notifications.count_unread(caretaker_id),
            },
        })

    @mcp.tool
    async def mark_notification_read(
        ctx: Context, caretaker_id: str, notification_id: str
    ) -> str:
        """Mark one alert as read.

        Args:
            caretaker_id: The caretaker who owns the alert.
            notification_id: The alert to mark.
        """
        try:
            notification = notifications.mark_read(notification_id, caretaker_id)
        except NotFoundError:
            return json.dumps({"status": "not_found", "message": "Notification not found"})

        if audit_logger is not None:
            audit_logger.log_tool_call(
                "mark_notification_read",
                {"caretaker_id": caretaker_id, "notification_id": notification_id},
            )
        return json.dumps({"status": "ok", "data": {"id": notification.id, "isRead": True}})

    @mcp.tool
    async def mark_all_notifications_read(ctx: Context, caretaker_id: str) -> str:
        """Mark every unread alert of the caretaker as read.

        Args:
            caretaker_id: The caretaker whose inbox to clear.
        """
        updated = notifications.mark_all_read(caretaker_id)
        logger.info("Marked %d notifications read for caretaker %s", updated, caretaker_id)
        if audit_logger is not None:
            audit_logger.log_tool_call(
                "mark_all_notifications_read",
                {"caretaker_id": caretaker_id},
                metadata={"updated": updated},
            )
        return json.dumps({
            "status": "ok",
            "message": "All notifications marked as read",
            "updated": updated,
        })
