"""Tests for CredentialWatch / CredentialSubscription broadcast."""

import asyncio
from datetime import UTC, datetime

import pytest

from authcore.oauth2.exceptions import CredentialWatchClosed
from authcore.oauth2.models import Credential
from authcore.oauth2.notifier import CredentialWatch


def _credential(token):
    return Credential(issued_at=datetime.now(UTC), access_token=token)


class TestCredentialWatch:
    def test_borrow_returns_initial_value(self):
        initial = _credential("A0")
        watch = CredentialWatch(initial)

        assert watch.borrow() is initial
        assert watch.version == 0

    def test_send_without_subscribers_is_not_an_error(self):
        watch = CredentialWatch(_credential("A0"))

        watch.send(_credential("A1"))

        assert watch.borrow().access_token == "A1"
        assert watch.version == 1

    def test_send_after_close_raises(self):
        watch = CredentialWatch(_credential("A0"))
        watch.close()

        with pytest.raises(CredentialWatchClosed):
            watch.send(_credential("A1"))

    def test_receiver_count(self):
        watch = CredentialWatch(_credential("A0"))
        first = watch.subscribe()
        second = watch.subscribe()

        assert watch.receiver_count == 2
        assert first is not second


class TestCredentialSubscription:
    def test_new_subscription_has_no_pending_change(self):
        watch = CredentialWatch(_credential("A0"))
        subscription = watch.subscribe()

        assert subscription.has_changed() is False
        assert subscription.latest().access_token == "A0"

    def test_last_value_wins(self):
        watch = CredentialWatch(_credential("A0"))
        subscription = watch.subscribe()

        watch.send(_credential("A1"))
        watch.send(_credential("A2"))

        assert subscription.has_changed() is True
        assert subscription.latest().access_token == "A2"
        assert subscription.has_changed() is False

    @pytest.mark.asyncio
    async def test_changed_returns_pending_value_immediately(self):
        watch = CredentialWatch(_credential("A0"))
        subscription = watch.subscribe()
        watch.send(_credential("A1"))

        credential = await asyncio.wait_for(subscription.changed(), timeout=1)

        assert credential.access_token == "A1"

    @pytest.mark.asyncio
    async def test_changed_waits_for_send(self):
        watch = CredentialWatch(_credential("A0"))
        subscription = watch.subscribe()

        waiter = asyncio.create_task(subscription.changed())
        await asyncio.sleep(0)
        assert not waiter.done()

        watch.send(_credential("A1"))
        credential = await asyncio.wait_for(waiter, timeout=1)

        assert credential.access_token == "A1"

    @pytest.mark.asyncio
    async def test_every_subscriber_sees_update(self):
        watch = CredentialWatch(_credential("A0"))
        subscriptions = [watch.subscribe() for _ in range(3)]

        waiters = [asyncio.create_task(s.changed()) for s in subscriptions]
        await asyncio.sleep(0)
        watch.send(_credential("A1"))

        results = await asyncio.wait_for(asyncio.gather(*waiters), timeout=1)
        assert [c.access_token for c in results] == ["A1", "A1", "A1"]

    @pytest.mark.asyncio
    async def test_close_wakes_waiters(self):
        watch = CredentialWatch(_credential("A0"))
        subscription = watch.subscribe()

        waiter = asyncio.create_task(subscription.changed())
        await asyncio.sleep(0)
        watch.close()

        with pytest.raises(CredentialWatchClosed):
            await asyncio.wait_for(waiter, timeout=1)

    @pytest.mark.asyncio
    async def test_pending_value_still_delivered_after_close(self):
        watch = CredentialWatch(_credential("A0"))
        subscription = watch.subscribe()
        watch.send(_credential("A1"))
        watch.close()

        credential = await subscription.changed()

        assert credential.access_token == "A1"
        with pytest.raises(CredentialWatchClosed):
            await subscription.changed()

    @pytest.mark.asyncio
    async def test_async_iteration_ends_on_close(self):
        watch = CredentialWatch(_credential("A0"))
        subscription = watch.subscribe()

        async def collect():
            return [credential.access_token async for credential in subscription]

        task = asyncio.create_task(collect())
        await asyncio.sleep(0)
        watch.send(_credential("A1"))
        await asyncio.sleep(0)
        watch.close()

        assert await asyncio.wait_for(task, timeout=1) == ["A1"]
