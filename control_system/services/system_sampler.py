"""System Sampler — publishes a fresh SystemState on its own cadence.

Invariants:
    - First sample is taken immediately, then one per poll_interval
    - No commands, no persistence
    - The task ends quietly once its channel has no subscribers
"""

import asyncio
import logging

from control_system.core.errors import ChannelClosedError
from control_system.core.system_models import SystemState
from control_system.infrastructure.system_metrics import SystemMetrics
from control_system.services.channels import SnapshotChannel, Subscription

logger = logging.getLogger(__name__)


async def _sample_forever(
    channel: SnapshotChannel[SystemState], metrics: SystemMetrics, poll_interval: float,
) -> None:
    while True:
        state = metrics.collect()
        logger.debug(
            "System stats: CPU %.1f%%, MEM %.1f%%", state.cpu_usage, state.memory_percent,
        )
        try:
            channel.publish(state)
        except ChannelClosedError:
            logger.debug("System sampler has no subscribers, stopping")
            return
        await asyncio.sleep(poll_interval)


def start_system_sampler(
    poll_interval: float, metrics: SystemMetrics | None = None,
) -> tuple[Subscription[SystemState], asyncio.Task]:
    """Spawn the sampler task. Must be called inside a running event loop."""
    channel: SnapshotChannel[SystemState] = SnapshotChannel(SystemState(), name="system")
    subscription = channel.subscribe()
    task = asyncio.create_task(
        _sample_forever(channel, metrics or SystemMetrics(), poll_interval),
        name="system-sampler",
    )
    return subscription, task
