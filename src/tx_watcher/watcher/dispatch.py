"""Terminal notification dispatch.

Exactly one success/error notification reaches the user per terminal
transaction. The registry emits it only when no subscriber is mounted;
otherwise the mounted subscriber claims it (see ``TxSubscription``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tx_watcher.gateway.models import TxStatus
    from tx_watcher.notifications.notifier import Notifier
    from tx_watcher.watcher.models import NotificationTemplate, WatchedTransaction

DEFAULT_ERROR_DESCRIPTION = "Please try again or contact support."
CONFIRMED_MESSAGE = "Confirmed on blockchain. Updating database..."


def notify_terminal(notifier: Notifier, template: NotificationTemplate, status: TxStatus) -> None:
    """Emit the success or error notification for a terminal *status*."""
    if status.state.is_success:
        notifier.success(template.success_title, template.success_description)
    elif status.state.is_failure:
        description = (
            template.error_description or status.last_error or DEFAULT_ERROR_DESCRIPTION
        )
        notifier.error(template.error_title, description)


def dispatch_terminal(notifier: Notifier, entry: WatchedTransaction) -> bool:
    """Notify on behalf of the registry if nobody else owns the notification.

    Returns True if a notification was emitted.
    """
    if entry.status is None or entry.notified or entry.subscriber_count > 0:
        return False
    notify_terminal(notifier, entry.template, entry.status)
    entry.notified = True
    return True
