"""Event Loop — the sole consumer: input, actions, snapshots, render, at a fixed frame rate.

Invariants:
    - Never awaits network or disk IO; the only suspension point is the end-of-frame sleep
    - All pending input is drained every frame
    - The action queue is bounded (ACTION_QUEUE_SIZE); overflow is dropped, never awaited
    - Actions are applied in arrival order
    - Each channel is read at most once per frame (last write wins)
    - On exit STOP is sent without waiting for the poller

Design Decisions:
    - step() is synchronous so one frame can be driven deterministically in tests
    - Input source and renderer are injected protocols; the terminal adapter
      lives outside the loop
"""

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Protocol

from control_system.core.actions import Action, InputEvent, action_for_input
from control_system.core.domain_types import Command
from control_system.core.github_models import GithubState
from control_system.core.system_models import SystemState
from control_system.core.view_state import AppState, apply_action
from control_system.services.channels import CommandSender, Subscription

logger = logging.getLogger(__name__)

ACTION_QUEUE_SIZE = 32
TARGET_FPS = 30


class InputSource(Protocol):
    def poll(self) -> list[InputEvent]:
        """Every input event pending right now. Must not block."""
        ...


class Renderer(Protocol):
    def render(self, state: AppState) -> None: ...


class EventLoop:
    """Fixed-cadence consumer of the GitHub and system snapshot channels."""

    def __init__(
        self,
        state: AppState,
        github: Subscription[GithubState],
        system: Subscription[SystemState],
        commands: CommandSender,
        input_source: InputSource,
        renderer: Renderer,
        key_map: Callable[[InputEvent], Action] = action_for_input,
        target_fps: int = TARGET_FPS,
    ):
        self.state = state
        self.github = github
        self.system = system
        self.commands = commands
        self.input_source = input_source
        self.renderer = renderer
        self.key_map = key_map
        self.frame_duration = 1.0 / max(1, target_fps)
        self.actions: asyncio.Queue[Action] = asyncio.Queue(maxsize=ACTION_QUEUE_SIZE)
        self.dropped_actions = 0

    async def run(self) -> None:
        logger.info("control-system started, entering main loop")
        last_frame = time.monotonic()
        try:
            while self.state.running:
                frame_start = time.monotonic()
                delta_ms = (frame_start - last_frame) * 1000.0
                last_frame = frame_start
                self.step(delta_ms)
                elapsed = time.monotonic() - frame_start
                await asyncio.sleep(max(0.0, self.frame_duration - elapsed))
        finally:
            self.commands.try_send(Command.STOP)
            logger.info("control-system shutdown complete")

    def step(self, delta_ms: float) -> None:
        """One frame: input, actions, snapshots, animation clock, render."""
        self._drain_input()
        self._apply_actions()
        self._sync_snapshots()
        self.state.fx.tick(delta_ms)
        self.renderer.render(self.state)

    def _drain_input(self) -> None:
        for event in self.input_source.poll():
            try:
                self.actions.put_nowait(self.key_map(event))
            except asyncio.QueueFull:
                self.dropped_actions += 1

    def _apply_actions(self) -> None:
        while True:
            try:
                action = self.actions.get_nowait()
            except asyncio.QueueEmpty:
                return
            was_running = self.state.running
            command = apply_action(self.state, action)
            if was_running and not self.state.running:
                logger.info("Quit requested")
            if command is Command.REFRESH:
                logger.info("Manual refresh requested")
                self.commands.try_send(command)

    def _sync_snapshots(self) -> None:
        if self.github.has_changed():
            github = self.github.borrow_and_update()
            self.state.new_event_count = sum(1 for e in github.events if e.is_new)
            self.state.github = github
            self.state.clamp_cursor()
        if self.system.has_changed():
            self.state.system = self.system.borrow_and_update()
