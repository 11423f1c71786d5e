"""GitHub Poller — owns the authoritative GithubState and drives fetch cycles.

Invariants:
    - The poller task is the only writer of GithubState and of the cache file
    - Cycles are strictly sequential; a command arriving mid-cycle waits for the next iteration
    - Timer tick and REFRESH have the same effect: exactly one cycle
    - Missed ticks are skipped: at most one overdue tick fires, then the timer
      realigns to the next interval boundary after "now"
    - Every cycle result (Success or Error) is published and then persisted
    - Cache write failures are logged and never affect state or the loop
    - STOP ends the task; the last published snapshot stays readable

Design Decisions:
    - Loop shape is Idle -> Fetching (published as a status-only copy) ->
      Publishing/Persisting -> Idle
    - Rate limit is advisory; it never delays or skips a cycle
"""

import asyncio
import logging

from control_system.core.domain_types import Command
from control_system.core.errors import CacheError, ChannelClosedError
from control_system.core.github_models import FetchStatus, GithubState
from control_system.infrastructure.github_cache import GithubCache
from control_system.infrastructure.github_client import GithubClient
from control_system.services.channels import (
    CommandSender, SnapshotChannel, Subscription, command_channel,
)

logger = logging.getLogger(__name__)


def next_deadline(deadline: float, now: float, interval: float) -> float:
    """First deadline + k*interval (k >= 1) strictly after now."""
    if now < deadline + interval:
        return deadline + interval
    missed = int((now - deadline) // interval)
    return deadline + (missed + 1) * interval


class GithubPoller:
    """Background task: timer + command queue -> fetch -> publish -> persist."""

    def __init__(
        self, client: GithubClient, cache: GithubCache, refresh_interval: float,
    ):
        if refresh_interval <= 0:
            raise ValueError("refresh_interval must be positive")
        self.client = client
        self.cache = cache
        self.refresh_interval = refresh_interval
        self.task: asyncio.Task | None = None
        self.cycles = 0

    async def load_cached_state(self) -> GithubState:
        """Cached state (status Idle) or a fresh default. Never raises."""
        snapshot = await self.cache.load()
        if snapshot is None:
            logger.debug("No cache found, starting fresh")
            return GithubState()
        logger.info("Loaded GitHub state from cache")
        return snapshot.to_github_state()

    def start(self, initial: GithubState) -> tuple[Subscription[GithubState], CommandSender]:
        """Spawn the poller task. Must be called inside a running event loop."""
        if self.task is not None:
            raise RuntimeError("GithubPoller already started")
        channel: SnapshotChannel[GithubState] = SnapshotChannel(initial, name="github")
        subscription = channel.subscribe()
        sender, queue = command_channel()
        self.task = asyncio.create_task(
            self._run(channel, queue, initial), name="github-poller",
        )
        return subscription, sender

    async def _run(
        self, channel: SnapshotChannel[GithubState], commands: asyncio.Queue,
        current: GithubState,
    ) -> None:
        loop = asyncio.get_running_loop()
        current = await self._cycle(channel, current)
        deadline = loop.time() + self.refresh_interval

        while True:
            command = await self._next_trigger(commands, deadline - loop.time())
            if command is Command.STOP:
                logger.info("GitHub poller stopping")
                break
            if command is Command.REFRESH:
                logger.info("Manual GitHub refresh triggered", extra={"command": command.value})
            else:
                logger.debug("Periodic GitHub refresh triggered")
                deadline = next_deadline(deadline, loop.time(), self.refresh_interval)
            current = await self._cycle(channel, current)

    async def _next_trigger(
        self, commands: asyncio.Queue, timeout: float,
    ) -> Command | None:
        """Next command, or None when the timer fires first."""
        if timeout <= 0:
            try:
                return commands.get_nowait()
            except asyncio.QueueEmpty:
                return None
        try:
            return await asyncio.wait_for(commands.get(), timeout)
        except TimeoutError:
            return None

    async def _cycle(
        self, channel: SnapshotChannel[GithubState], current: GithubState,
    ) -> GithubState:
        self._publish(channel, current.clone(status=FetchStatus.fetching()))
        new_state = await self.client.fetch_all(current)
        self.cycles += 1
        self._publish(channel, new_state)
        try:
            await self.cache.save(new_state)
        except CacheError as e:
            logger.error("Failed to save cache: %s", e.message, extra=e.log_extra())
        return new_state

    @staticmethod
    def _publish(channel: SnapshotChannel[GithubState], state: GithubState) -> None:
        try:
            channel.publish(state)
        except ChannelClosedError:
            logger.debug("No GitHub subscribers left; state kept locally")
