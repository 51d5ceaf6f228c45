"""
Last-value-wins credential broadcast.

One writer (the credential manager) publishes; any number of subscriptions
observe the newest credential without polling. Subscriptions never see
history: a slow reader that misses two updates only observes the latest.

Usage:
    subscription = manager.watch_on_refresh()
    async for credential in subscription:
        store.save(manager.id(), credential)
"""

import asyncio
import logging
import weakref

from authcore.oauth2.exceptions import CredentialWatchClosed
from authcore.oauth2.models import Credential

logger = logging.getLogger(__name__)


class CredentialWatch:
    """Single-writer holder of the current credential."""

    def __init__(self, initial: Credential):
        self._value = initial
        self._version = 0
        self._closed = False
        self._changed = asyncio.Event()
        self._subscriptions: weakref.WeakSet[CredentialSubscription] = weakref.WeakSet()

    @property
    def version(self) -> int:
        return self._version

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def receiver_count(self) -> int:
        return len(self._subscriptions)

    def borrow(self) -> Credential:
        return self._value

    def send(self, credential: Credential) -> None:
        """
        Publish a new credential.

        Having no subscribers is not an error; the value is still stored so
        later subscribers can read it via latest().
        """
        if self._closed:
            raise CredentialWatchClosed("Cannot publish on a closed credential watch")

        self._value = credential
        self._version += 1
        self._wake()
        logger.debug(f"Published credential version {self._version} to {self.receiver_count} subscriber(s)")

    def subscribe(self) -> "CredentialSubscription":
        subscription = CredentialSubscription(self)
        self._subscriptions.add(subscription)
        return subscription

    def close(self) -> None:
        """Stop the watch; waiting subscriptions raise CredentialWatchClosed."""
        if self._closed:
            return
        self._closed = True
        self._wake()

    def _wake(self) -> None:
        waiters, self._changed = self._changed, asyncio.Event()
        waiters.set()


class CredentialSubscription:
    """Read side of a CredentialWatch."""

    def __init__(self, watch: CredentialWatch):
        self._watch = watch
        self._seen_version = watch.version

    def latest(self) -> Credential:
        """Current credential, marking it as seen."""
        self._seen_version = self._watch.version
        return self._watch.borrow()

    def has_changed(self) -> bool:
        return self._watch.version > self._seen_version

    async def changed(self) -> Credential:
        """
        Wait for a credential newer than the last one seen.

        Raises:
            CredentialWatchClosed: If the watch is closed before an update arrives
        """
        while not self.has_changed():
            if self._watch.closed:
                raise CredentialWatchClosed("Credential watch closed")
            await self._watch._changed.wait()
        return self.latest()

    def __aiter__(self) -> "CredentialSubscription":
        return self

    async def __anext__(self) -> Credential:
        try:
            return await self.changed()
        except CredentialWatchClosed:
            raise StopAsyncIteration from None


__all__ = ["CredentialWatch", "CredentialSubscription"]
