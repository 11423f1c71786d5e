"""GitHub Poller — cycle scheduling, publishing and persistence with fakes.

Invariants:
    - The first cycle runs immediately on start
    - REFRESH yields exactly one extra cycle
    - A long cycle fires at most one overdue tick, never a burst of catch-up cycles
    - STOP ends the task and the last snapshot stays readable
    - Cache save failures never stop the loop
"""

import asyncio

import pytest

from control_system.core.cache_snapshot import CacheSnapshot
from control_system.core.domain_types import Command, StatusKind
from control_system.core.errors import CacheError
from control_system.core.github_models import FetchStatus, GithubState
from control_system.services.github_poller import GithubPoller, next_deadline

from tests.fakes import FakeCache, FakeClient, populated_state

HOUR = 3600.0


async def wait_for_cycles(poller: GithubPoller, n: int, timeout: float = 3.0) -> None:
    async def _wait():
        while poller.cycles < n:
            await asyncio.sleep(0.005)
    await asyncio.wait_for(_wait(), timeout)


async def stop(poller: GithubPoller, sender) -> None:
    await sender.send(Command.STOP)
    await asyncio.wait_for(poller.task, 3.0)


# -- next_deadline -------------------------------------------------------------

def test_next_deadline_on_time():
    """An on-time tick schedules the next one a single interval later."""
    assert next_deadline(10.0, 10.5, 5.0) == 15.0


def test_next_deadline_skips_missed_ticks():
    """A late tick realigns to the first boundary after now."""
    assert next_deadline(10.0, 27.0, 5.0) == 30.0
    assert next_deadline(10.0, 25.0, 5.0) == 30.0


# -- Lifecycle -----------------------------------------------------------------

def test_non_positive_interval_rejected():
    """A zero interval is refused at construction."""
    with pytest.raises(ValueError):
        GithubPoller(FakeClient(), FakeCache(), 0)


async def test_initial_cycle_publishes_and_saves():
    """Starting runs one cycle right away, publishes it and saves it."""
    client, cache = FakeClient(), FakeCache()
    poller = GithubPoller(client, cache, HOUR)
    sub, sender = poller.start(GithubState())

    await wait_for_cycles(poller, 1)
    state = sub.borrow_and_update()

    assert state.status.kind is StatusKind.SUCCESS
    assert [r.name for r in state.repos] == ["r1"]
    assert len(cache.saved) == 1
    await stop(poller, sender)


async def test_refresh_triggers_exactly_one_cycle():
    """One REFRESH command runs one more fetch."""
    client = FakeClient()
    poller = GithubPoller(client, FakeCache(), HOUR)
    sub, sender = poller.start(GithubState())
    await wait_for_cycles(poller, 1)

    assert sender.try_send(Command.REFRESH)
    await wait_for_cycles(poller, 2)
    await stop(poller, sender)

    assert len(client.calls) == 2
    assert sub.borrow().repos[0].name == "r2"


async def test_stop_keeps_last_snapshot_readable():
    """After STOP the task ends and the last state can still be read."""
    poller = GithubPoller(FakeClient(), FakeCache(), HOUR)
    sub, sender = poller.start(GithubState())
    await wait_for_cycles(poller, 1)

    await stop(poller, sender)

    assert poller.task.done()
    assert sub.borrow().stats.total_stars == 1


async def test_start_twice_rejected():
    """A poller can only be started once."""
    poller = GithubPoller(FakeClient(), FakeCache(), HOUR)
    _, sender = poller.start(GithubState())
    with pytest.raises(RuntimeError):
        poller.start(GithubState())
    await stop(poller, sender)


async def test_fetching_status_published_during_cycle():
    """A Fetching copy is visible while a fetch is in flight."""
    poller = GithubPoller(FakeClient(delay=0.2), FakeCache(), HOUR)
    sub, sender = poller.start(populated_state())

    await asyncio.wait_for(sub.changed(), 1.0)
    assert sub.borrow_and_update().status.kind is StatusKind.FETCHING

    await wait_for_cycles(poller, 1)
    await stop(poller, sender)


# -- Timer ---------------------------------------------------------------------

async def test_timer_drives_cycles():
    """With no commands the timer keeps cycles coming."""
    poller = GithubPoller(FakeClient(), FakeCache(), 0.02)
    _, sender = poller.start(GithubState())
    await wait_for_cycles(poller, 3)
    await stop(poller, sender)


async def test_long_cycle_fires_one_overdue_tick():
    """A fetch spanning several intervals is followed by one cycle, not a burst."""
    # cycle 2 (first tick at 0.2s) runs 1.1s and misses four ticks; it ends
    # near 1.3s, one overdue tick fires at once and the next is due near 1.4s
    client = FakeClient(delays=[0.0, 1.1])
    poller = GithubPoller(client, FakeCache(), 0.2)
    _, sender = poller.start(GithubState())

    await wait_for_cycles(poller, 3)
    await asyncio.sleep(0.05)

    assert poller.cycles == 3
    await stop(poller, sender)


# -- Persistence ---------------------------------------------------------------

async def test_error_cycles_are_still_persisted():
    """An Error result is published and saved like a success."""
    failed = populated_state(status=FetchStatus.error("Profile fetch failed: HTTP 500"))
    cache = FakeCache()
    poller = GithubPoller(FakeClient(outcomes=[failed]), cache, HOUR)
    sub, sender = poller.start(populated_state())
    await wait_for_cycles(poller, 1)
    await stop(poller, sender)

    assert sub.borrow().status.reason == "Profile fetch failed: HTTP 500"
    assert cache.saved[0].status.is_error


async def test_cache_failure_does_not_stop_loop():
    """Save errors are logged and later cycles still run."""
    cache = FakeCache(fail_save=CacheError("disk full", "save"))
    poller = GithubPoller(FakeClient(), cache, HOUR)
    _, sender = poller.start(GithubState())
    await wait_for_cycles(poller, 1)

    sender.try_send(Command.REFRESH)
    await wait_for_cycles(poller, 2)
    await stop(poller, sender)


# -- Cache bootstrap -----------------------------------------------------------

async def test_load_cached_state_resets_status():
    """A cached snapshot loads with Idle status and its data."""
    snapshot = CacheSnapshot.from_github_state(populated_state())
    poller = GithubPoller(FakeClient(), FakeCache(snapshot=snapshot), HOUR)

    state = await poller.load_cached_state()

    assert state.status.kind is StatusKind.IDLE
    assert state.repos[0].name == "old"


async def test_load_cached_state_without_cache():
    """No cache means a fresh empty state."""
    poller = GithubPoller(FakeClient(), FakeCache(), HOUR)
    state = await poller.load_cached_state()
    assert state.has_data() is False
