"""Tests for TxSubscription — mount/unmount and notification ownership."""

from __future__ import annotations

import pytest

from tests.helpers import TX_HASH, GatewayStub, sse
from tx_watcher.gateway.models import TxState
from tx_watcher.notifications.events import NotificationKind
from tx_watcher.watcher.subscription import TxSubscription


async def _watching(make_watcher, template, eventually, **overrides):
    stub = GatewayStub()
    watcher = await make_watcher(stub, **overrides)
    watcher.register(TX_HASH, "task_submit", template)
    await eventually(lambda: stub.feed.opened == 1)
    return stub, watcher


class TestMount:
    async def test_mount_counts_subscriber(self, make_watcher, template, eventually):
        _, watcher = await _watching(make_watcher, template, eventually)
        sub = TxSubscription(watcher, TX_HASH)

        sub.mount()
        sub.mount()
        assert sub.is_mounted
        assert watcher.get_watched_tx(TX_HASH).subscriber_count == 1

        sub.unmount()
        sub.unmount()
        assert not sub.is_mounted
        assert watcher.get_watched_tx(TX_HASH).subscriber_count == 0

    async def test_context_manager(self, make_watcher, template, eventually):
        _, watcher = await _watching(make_watcher, template, eventually)
        with TxSubscription(watcher, TX_HASH) as sub:
            assert sub.is_mounted
            assert watcher.get_watched_tx(TX_HASH).subscriber_count == 1
        assert watcher.get_watched_tx(TX_HASH).subscriber_count == 0

    async def test_untracked_hash(self, make_watcher):
        watcher = await make_watcher(GatewayStub())
        with TxSubscription(watcher, TX_HASH) as sub:
            assert sub.status is None
            with pytest.raises(TimeoutError):
                await sub.wait(timeout=0.01)
        assert TX_HASH not in watcher


class TestNotificationOwnership:
    async def test_mounted_subscriber_notifies_once(
        self, make_watcher, notifier, template, eventually
    ):
        stub, watcher = await _watching(make_watcher, template, eventually)
        seen = []
        sub = TxSubscription(watcher, TX_HASH, on_status=lambda s: seen.append(s.state))
        sub.mount()

        stub.feed.push(sse("state", {"state": "pending"}))
        stub.feed.push(
            sse("complete", {"final_state": "failed", "last_error": "insufficient funds"})
        )
        status = await sub.wait(timeout=2)

        assert status.state == TxState.FAILED
        assert sub.is_terminal
        assert seen == [TxState.PENDING, TxState.FAILED]
        assert [(e.kind, e.title, e.description) for e in notifier.terminal] == [
            (NotificationKind.ERROR, "Transaction Failed", "insufficient funds")
        ]
        sub.unmount()

    async def test_two_subscribers_one_notification(
        self, make_watcher, notifier, template, eventually
    ):
        stub, watcher = await _watching(make_watcher, template, eventually)
        first = TxSubscription(watcher, TX_HASH)
        second = TxSubscription(watcher, TX_HASH)
        first.mount()
        second.mount()

        stub.feed.push(sse("complete", {"final_state": "updated"}))
        await first.wait(timeout=2)
        await second.wait(timeout=2)

        assert len(notifier.terminal) == 1
        assert notifier.terminal[0].title == "Task submitted!"

    async def test_on_complete_replaces_notification(
        self, make_watcher, notifier, template, eventually
    ):
        stub, watcher = await _watching(make_watcher, template, eventually)
        completed = []
        sub = TxSubscription(watcher, TX_HASH, on_complete=completed.append)
        sub.mount()

        stub.feed.push(sse("complete", {"final_state": "updated"}))
        await sub.wait(timeout=2)

        assert [s.state for s in completed] == [TxState.UPDATED]
        assert notifier.terminal == []

    async def test_unmount_before_terminal_hands_back_to_registry(
        self, make_watcher, notifier, template, eventually
    ):
        stub, watcher = await _watching(make_watcher, template, eventually)
        sub = TxSubscription(watcher, TX_HASH)
        sub.mount()
        sub.unmount()

        stub.feed.push(sse("complete", {"final_state": "updated"}))
        await eventually(lambda: notifier.terminal)
        assert len(notifier.terminal) == 1
        assert sub.status is None

    async def test_late_mount_after_registry_notified(
        self, make_watcher, notifier, template, eventually
    ):
        stub, watcher = await _watching(make_watcher, template, eventually, cleanup_delay=5.0)
        stub.feed.push(sse("complete", {"final_state": "updated"}))
        await eventually(lambda: notifier.terminal)

        sub = TxSubscription(watcher, TX_HASH)
        sub.mount()
        status = await sub.wait(timeout=0.1)

        assert status.state == TxState.UPDATED
        assert len(notifier.terminal) == 1

    async def test_late_mount_claims_unowned_notification(
        self, make_watcher, notifier, template, eventually
    ):
        stub, watcher = await _watching(make_watcher, template, eventually, cleanup_delay=5.0)
        watcher.increment_subscriber(TX_HASH)
        stub.feed.push(sse("complete", {"final_state": "updated"}))
        await eventually(lambda: watcher.get_watched_tx(TX_HASH).is_terminal)
        assert notifier.terminal == []

        TxSubscription(watcher, TX_HASH).mount()
        TxSubscription(watcher, TX_HASH).mount()
        assert len(notifier.terminal) == 1
        assert notifier.terminal[0].kind == NotificationKind.SUCCESS


class TestCallbacks:
    async def test_failing_on_status_still_notifies(
        self, make_watcher, notifier, template, eventually
    ):
        def explode(status):
            raise RuntimeError("render bug")

        stub, watcher = await _watching(make_watcher, template, eventually)
        sub = TxSubscription(watcher, TX_HASH, on_status=explode)
        sub.mount()

        stub.feed.push(sse("complete", {"final_state": "updated"}))
        await sub.wait(timeout=2)

        assert [e.kind for e in notifier.terminal] == [NotificationKind.SUCCESS]

    async def test_terminal_state_change_is_not_final(
        self, make_watcher, notifier, template, eventually
    ):
        stub, watcher = await _watching(make_watcher, template, eventually)
        seen = []
        sub = TxSubscription(watcher, TX_HASH, on_status=lambda s: seen.append(s.state))
        sub.mount()

        stub.feed.push(sse("state_change", {"new_state": "failed"}))
        await eventually(lambda: seen == [TxState.FAILED])
        assert not sub.is_terminal
        assert notifier.terminal == []

        stub.feed.push(
            sse("complete", {"final_state": "failed", "last_error": "insufficient funds"})
        )
        await sub.wait(timeout=2)
        assert sub.is_terminal
        assert [e.description for e in notifier.terminal] == ["insufficient funds"]
