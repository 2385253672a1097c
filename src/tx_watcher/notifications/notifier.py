"""Notifier backends — where the watcher sends user-facing notifications."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from tx_watcher.notifications.events import NotificationEvent, NotificationKind

if TYPE_CHECKING:
    from tx_watcher.notifications.service import NotificationService


class Notifier(ABC):
    """Abstract notification sink.

    ``pending`` shows (or replaces) a persistent indicator identified by
    *key*; ``dismiss`` removes it and must be safe to call when nothing is
    shown. All methods are synchronous and must not block.
    """

    @abstractmethod
    def pending(self, key: str, title: str, description: str = "") -> None:
        """Show or update the waiting indicator for *key*."""

    @abstractmethod
    def success(self, title: str, description: str = "") -> None:
        """Show a success notification."""

    @abstractmethod
    def error(self, title: str, description: str = "") -> None:
        """Show an error notification."""

    @abstractmethod
    def dismiss(self, key: str) -> None:
        """Remove the waiting indicator for *key*, if any."""


class MemoryNotifier(Notifier):
    """Records every notification in memory, for headless use and tests."""

    def __init__(self) -> None:
        self.events: list[NotificationEvent] = []
        self._active: dict[str, NotificationEvent] = {}

    def pending(self, key: str, title: str, description: str = "") -> None:
        event = NotificationEvent(NotificationKind.PENDING, title, description, key)
        self._active[key] = event
        self.events.append(event)

    def success(self, title: str, description: str = "") -> None:
        self.events.append(NotificationEvent(NotificationKind.SUCCESS, title, description))

    def error(self, title: str, description: str = "") -> None:
        self.events.append(NotificationEvent(NotificationKind.ERROR, title, description))

    def dismiss(self, key: str) -> None:
        self._active.pop(key, None)
        self.events.append(NotificationEvent(NotificationKind.DISMISS, key=key))

    @property
    def terminal(self) -> list[NotificationEvent]:
        """Success and error notifications, in emission order."""
        return [e for e in self.events if e.is_terminal]

    def active_pending(self, key: str) -> NotificationEvent | None:
        """The indicator currently shown for *key*, if any."""
        return self._active.get(key)


class EventNotifier(Notifier):
    """Publishes notifications onto a :class:`NotificationService`."""

    def __init__(self, service: NotificationService) -> None:
        self._service = service

    def pending(self, key: str, title: str, description: str = "") -> None:
        self._service.publish(NotificationEvent(NotificationKind.PENDING, title, description, key))

    def success(self, title: str, description: str = "") -> None:
        self._service.publish(NotificationEvent(NotificationKind.SUCCESS, title, description))

    def error(self, title: str, description: str = "") -> None:
        self._service.publish(NotificationEvent(NotificationKind.ERROR, title, description))

    def dismiss(self, key: str) -> None:
        self._service.publish(NotificationEvent(NotificationKind.DISMISS, key=key))
