"""View State — the frame loop's local copy of everything it renders.

Invariants:
    - Owned by the frame loop only; producers never see this object
    - github / system are private deep copies of published snapshots
    - apply_action never performs IO; it returns the Command to forward, if any
    - Animation state advances only from elapsed time (FxState.tick)

Design Decisions:
    - Plain dataclasses, mutated in place (single owner, no snapshots needed)
    - Page change resets scroll and starts a transition
    - Scroll and selection are clamped to the current page's list length
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone

from control_system.core.actions import Action, ActionKind
from control_system.core.domain_types import Command, FocusArea, Page, StatusKind
from control_system.core.github_models import GithubState
from control_system.core.system_models import SystemState

TRANSITION_FRAMES = 20
LISTED_REPOS = 50


@dataclass
class UiState:
    current_page: Page = Page.DASHBOARD
    show_help_overlay: bool = False
    scroll_offset: int = 0
    selected_index: int = 0
    focus_area: FocusArea = FocusArea.MAIN


@dataclass
class FxState:
    """Time-driven animation clock. Easing and drawing live in the renderer."""
    animations_paused: bool = False
    reduced_motion: bool = False
    frame_count: int = 0
    last_transition_frame: int = 0
    transition_active: bool = False
    pulse_phase: float = 0.0
    shimmer_offset: float = 0.0

    def should_animate(self) -> bool:
        return not self.animations_paused and not self.reduced_motion

    def tick(self, delta_ms: float) -> None:
        self.frame_count += 1
        if self.should_animate():
            self.pulse_phase = (self.pulse_phase + delta_ms * 0.003) % (2 * math.pi)
            self.shimmer_offset = (self.shimmer_offset + delta_ms * 0.05) % 100.0
        if (
            self.transition_active
            and self.frame_count - self.last_transition_frame > TRANSITION_FRAMES
        ):
            self.transition_active = False

    def start_transition(self) -> None:
        self.transition_active = True
        self.last_transition_frame = self.frame_count

    def pulse_value(self) -> float:
        """0.0–1.0 breathing value; constant 0.5 when not animating."""
        if self.should_animate():
            return (math.sin(self.pulse_phase) + 1.0) / 2.0
        return 0.5


@dataclass
class AppState:
    github: GithubState = field(default_factory=GithubState)
    system: SystemState = field(default_factory=SystemState)
    ui: UiState = field(default_factory=UiState)
    fx: FxState = field(default_factory=FxState)
    running: bool = True
    new_event_count: int = 0

    @classmethod
    def create(cls, reduced_motion: bool, github: GithubState | None = None) -> "AppState":
        state = cls(github=github.clone() if github else GithubState())
        state.fx.reduced_motion = reduced_motion
        return state

    def has_github_data(self) -> bool:
        return self.github.has_data()

    def page_length(self) -> int:
        """Rows the cursor can move over on the current page."""
        page = self.ui.current_page
        if page is Page.REPOSITORIES:
            return len(self.github.top_repos_by_stars(LISTED_REPOS))
        if page is Page.ACTIVITY:
            return len(self.github.events)
        return 0

    def clamp_cursor(self) -> None:
        """Keep scroll and selection inside the current page's list."""
        last = max(0, self.page_length() - 1)
        self.ui.scroll_offset = min(self.ui.scroll_offset, last)
        self.ui.selected_index = min(self.ui.selected_index, last)

    def status_message(self, now: datetime | None = None) -> str:
        """Status line. An error reason replaces the normal text."""
        status = self.github.status
        last = self.github.last_updated
        if status.kind is StatusKind.FETCHING:
            return "Fetching GitHub data..."
        if status.kind is StatusKind.ERROR:
            return f"Error: {status.reason}"
        if status.kind is StatusKind.SUCCESS:
            return f"Updated: {format_relative(last, now)}" if last else "Data loaded"
        return f"Last updated: {format_relative(last, now)}" if last else "No data loaded"


def format_relative(when: datetime, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    secs = max(0, int((now - when).total_seconds()))
    if secs < 60:
        return "just now"
    if secs < 3600:
        return f"{secs // 60}m ago"
    if secs < 86400:
        return f"{secs // 3600}h ago"
    return f"{secs // 86400}d ago"


def _change_page(state: AppState, page: Page) -> None:
    if state.ui.current_page != page:
        state.ui.current_page = page
        state.fx.start_transition()
        state.ui.scroll_offset = 0
        state.clamp_cursor()


def apply_action(state: AppState, action: Action) -> Command | None:
    """Apply one action to the view. Returns a Command for the poller, if any."""
    kind = action.kind
    ui = state.ui
    if kind is ActionKind.QUIT:
        state.running = False
    elif kind is ActionKind.REFRESH_GITHUB:
        return Command.REFRESH
    elif kind is ActionKind.NEXT_PAGE:
        _change_page(state, ui.current_page.next())
    elif kind is ActionKind.PREV_PAGE:
        _change_page(state, ui.current_page.prev())
    elif kind is ActionKind.GO_TO_PAGE:
        _change_page(state, Page.from_index(action.page))
    elif kind is ActionKind.CYCLE_FOCUS:
        ui.focus_area = ui.focus_area.next()
    elif kind is ActionKind.TOGGLE_HELP:
        ui.show_help_overlay = not ui.show_help_overlay
    elif kind is ActionKind.TOGGLE_PAUSE:
        state.fx.animations_paused = not state.fx.animations_paused
    elif kind is ActionKind.SCROLL_UP:
        ui.scroll_offset = max(0, ui.scroll_offset - 1)
    elif kind is ActionKind.SCROLL_DOWN:
        ui.scroll_offset += 1
        state.clamp_cursor()
    elif kind is ActionKind.SELECT_NEXT:
        ui.selected_index += 1
        state.clamp_cursor()
    elif kind is ActionKind.SELECT_PREV:
        ui.selected_index = max(0, ui.selected_index - 1)
    return None
