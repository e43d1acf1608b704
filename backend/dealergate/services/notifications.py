"""In-process toast notifications.

The request layer raises user-facing notices ("Access Denied", "Load error") through a
Notifier instead of a browser toast. Notices are kept in memory for the session and
mirrored to the log so headless callers still see them.
"""
from __future__ import annotations
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

logger = logging.getLogger(__name__)

VARIANT_DEFAULT = 'default'
VARIANT_DESTRUCTIVE = 'destructive'


@dataclass(frozen=True)
class Notification:
    title: str
    description: str = ''
    variant: str = VARIANT_DEFAULT
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    def __init__(self):
        self._items: List[Notification] = []
        self._lock = threading.Lock()

    def notify(self, title: str, description: str = '', variant: str = VARIANT_DEFAULT) -> Notification:
        note = Notification(title=title, description=description, variant=variant)
        with self._lock:
            self._items.append(note)
        level = logging.WARNING if variant == VARIANT_DESTRUCTIVE else logging.INFO
        logger.log(level, '%s: %s', title, description)
        return note

    @property
    def notifications(self) -> List[Notification]:
        with self._lock:
            return list(self._items)

    def titles(self) -> List[str]:
        return [n.title for n in self.notifications]

    def clear(self):
        with self._lock:
            self._items.clear()


__all__ = ['Notification', 'Notifier', 'VARIANT_DEFAULT', 'VARIANT_DESTRUCTIVE']
