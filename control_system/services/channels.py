"""Snapshot Channels — single-writer latest-value cells and the command queue.

Invariants:
    - Exactly one producer publishes to a SnapshotChannel
    - publish() replaces the value and bumps a version counter; intermediate
      values between two reads are coalesced (last write wins)
    - Readers only ever get deep copies; the published object is never handed out
    - A new Subscription starts with the current value marked as seen
    - publish() raises ChannelClosedError once every subscription is closed
    - CommandSender.try_send never blocks

Design Decisions:
    - Version counter + asyncio.Event over asyncio.Queue: the consumer polls
      has_changed() once per frame and never awaits the producer
"""

import asyncio
import copy
import logging
from typing import Generic, TypeVar

from control_system.core.domain_types import Command
from control_system.core.errors import ChannelClosedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

COMMAND_QUEUE_SIZE = 16


class SnapshotChannel(Generic[T]):
    """Latest-value broadcast cell owned by one producer task."""

    def __init__(self, initial: T, name: str = "snapshot"):
        self.name = name
        self._value = initial
        self._version = 0
        self._subscribers = 0
        self._updated = asyncio.Event()

    @property
    def version(self) -> int:
        return self._version

    @property
    def receiver_count(self) -> int:
        return self._subscribers

    def subscribe(self) -> "Subscription[T]":
        self._subscribers += 1
        return Subscription(self)

    def publish(self, value: T) -> None:
        if self._subscribers == 0:
            raise ChannelClosedError(self.name)
        self._value = value
        self._version += 1
        self._updated.set()
        self._updated = asyncio.Event()

    def _latest(self) -> T:
        return self._value

    async def _wait_for_update(self) -> None:
        await self._updated.wait()

    def _unsubscribe(self) -> None:
        self._subscribers -= 1


class Subscription(Generic[T]):
    """Read side of a SnapshotChannel. One per consumer."""

    def __init__(self, channel: SnapshotChannel[T]):
        self._channel = channel
        self._seen = channel.version
        self._closed = False

    def has_changed(self) -> bool:
        return self._channel.version != self._seen

    def borrow(self) -> T:
        """Deep copy of the latest value; does not mark it seen."""
        return copy.deepcopy(self._channel._latest())

    def borrow_and_update(self) -> T:
        """Deep copy of the latest value, marked as seen."""
        self._seen = self._channel.version
        return copy.deepcopy(self._channel._latest())

    async def changed(self) -> None:
        """Wait until a value newer than the last seen one is published."""
        while not self.has_changed():
            await self._channel._wait_for_update()

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._channel._unsubscribe()

    @property
    def closed(self) -> bool:
        return self._closed


class CommandSender:
    """Send side of the poller's bounded command queue."""

    def __init__(self, queue: asyncio.Queue):
        self._queue = queue

    def try_send(self, command: Command) -> bool:
        try:
            self._queue.put_nowait(command)
        except asyncio.QueueFull:
            logger.warning(
                "Command queue full, dropping %s", command.value,
                extra={"command": command.value},
            )
            return False
        return True

    async def send(self, command: Command) -> None:
        await self._queue.put(command)


def command_channel(maxsize: int = COMMAND_QUEUE_SIZE) -> tuple[CommandSender, asyncio.Queue]:
    queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
    return CommandSender(queue), queue
