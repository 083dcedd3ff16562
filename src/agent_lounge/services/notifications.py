"""Notification center: a mailbox of user-facing alerts."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from agent_lounge.domain.entities import Notification
from agent_lounge.domain.enums import NotificationType
from agent_lounge.domain.values import new_id

logger = logging.getLogger(__name__)


class NotificationCenter:
    """Holds notifications keyed by id.

    ``read`` only moves forward.  ``mark_read`` and ``clear`` accept unknown
    ids silently, since the UI may issue them speculatively.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._items: dict[str, Notification] = {}

    def notify(
        self,
        type: NotificationType,
        title: str,
        description: str = "",
    ) -> Notification:
        notification = Notification(
            id=new_id("notif"),
            type=type,
            title=title,
            description=description,
            timestamp=self._clock(),
        )
        self._items[notification.id] = notification
        logger.debug("Notification %s: %s", notification.id, title)
        return notification

    def restore(self, notification: Notification) -> None:
        self._items[notification.id] = notification

    @property
    def notifications(self) -> list[Notification]:
        """All notifications, newest first."""
        return list(reversed(self._items.values()))

    @property
    def unread(self) -> list[Notification]:
        return [n for n in self.notifications if not n.read]

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._items.values() if not n.read)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, notification_id: object) -> bool:
        return notification_id in self._items

    def mark_read(self, notification_id: str) -> bool:
        """Returns ``True`` if an unread notification was flipped."""
        notification = self._items.get(notification_id)
        if notification is None or notification.read:
            return False
        notification.read = True
        return True

    def mark_all_read(self) -> int:
        """Mark everything read; returns how many were flipped."""
        flipped = 0
        for notification in self._items.values():
            if not notification.read:
                notification.read = True
                flipped += 1
        return flipped

    def clear(self, notification_id: str) -> bool:
        """Remove a notification entirely; returns ``False`` if unknown."""
        return self._items.pop(notification_id, None) is not None
