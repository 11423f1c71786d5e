"""Control System — process entry point.

Invariants:
    - Missing GITHUB_USER aborts with exit status 1 before any task or loop starts
    - Logs go to the in-memory LogBuffer while the terminal UI owns the screen
    - The HTTP client is closed on every exit path

Design Decisions:
    - run_app takes the input source and renderer as arguments so the wiring
      can run without a terminal
"""

import asyncio
import curses
import logging
import sys

from control_system.config import Settings, get_settings
from control_system.core.errors import ConfigurationError
from control_system.core.view_state import AppState
from control_system.infrastructure.github_cache import GithubCache
from control_system.infrastructure.github_client import GithubClient
from control_system.infrastructure.observability import LogBuffer, setup_logging
from control_system.services.event_loop import EventLoop, InputSource, Renderer
from control_system.services.github_poller import GithubPoller
from control_system.services.system_sampler import start_system_sampler
from control_system.terminal import CursesInput, CursesRenderer

logger = logging.getLogger(__name__)


def build_poller(settings: Settings) -> GithubPoller:
    client = GithubClient(
        settings.github_user,
        token=settings.github_token,
        base_url=settings.github_api_url,
        timeout_seconds=settings.github_timeout_seconds,
    )
    return GithubPoller(client, GithubCache(settings.cache_file), settings.refresh_secs)


async def run_app(
    settings: Settings, input_source: InputSource, renderer: Renderer,
    poller: GithubPoller | None = None,
) -> None:
    poller = poller or build_poller(settings)
    try:
        initial = await poller.load_cached_state()
        state = AppState.create(settings.reduced_motion, initial)
        github_rx, commands = poller.start(initial)
        system_rx, sampler = start_system_sampler(settings.system_poll_secs)
        loop = EventLoop(
            state, github_rx, system_rx, commands, input_source, renderer,
            target_fps=settings.target_fps,
        )
        try:
            await loop.run()
        finally:
            system_rx.close()
            sampler.cancel()
            if poller.task is not None and not poller.task.done():
                poller.task.cancel()
    finally:
        await poller.client.aclose()


def _run_curses(screen, settings: Settings, log_buffer: LogBuffer) -> None:
    asyncio.run(run_app(settings, CursesInput(screen), CursesRenderer(screen, log_buffer)))


def main() -> int:
    log_buffer = LogBuffer()
    try:
        settings = get_settings()
    except ConfigurationError as e:
        print(f"control-system: {e.message}", file=sys.stderr)
        return 1

    setup_logging(settings.log_level, settings.log_format, buffer=log_buffer)
    logger.info("Starting control-system for user: %s", settings.github_user)
    logger.info(
        "Refresh interval: %ss, Reduced motion: %s",
        settings.refresh_secs, settings.reduced_motion,
    )
    if not settings.has_token:
        logger.warning("GITHUB_TOKEN not set; unauthenticated rate limits apply")

    try:
        curses.wrapper(_run_curses, settings, log_buffer)
    except KeyboardInterrupt:
        pass
    for message in log_buffer.get_messages():
        if message.level in ("ERROR", "CRITICAL"):
            print(message.message, file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
