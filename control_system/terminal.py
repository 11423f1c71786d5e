"""Curses terminal adapter — non-blocking input and a minimal text renderer.

Normalizes curses key codes and mouse clicks into KeyInput / MouseClick for
the action table, and draws the header tabs, a per-page summary, the status
line and the tail of the log buffer. Text layout lives in plain functions
(page_lines, status_text) so it can be checked without a terminal.
"""

import curses

from control_system.core.actions import InputEvent, KeyInput, MouseClick, Resize, keybind_help
from control_system.core.domain_types import Page
from control_system.core.view_state import LISTED_REPOS, AppState
from control_system.infrastructure.observability import LogBuffer, LogMessage

_SPECIAL_KEYS = {
    curses.KEY_UP: KeyInput("up"),
    curses.KEY_DOWN: KeyInput("down"),
    curses.KEY_LEFT: KeyInput("left"),
    curses.KEY_RIGHT: KeyInput("right"),
    curses.KEY_PPAGE: KeyInput("page_up"),
    curses.KEY_NPAGE: KeyInput("page_down"),
    curses.KEY_BTAB: KeyInput("tab", shift=True),
    curses.KEY_ENTER: KeyInput("enter"),
    9: KeyInput("tab"),
    10: KeyInput("enter"),
    13: KeyInput("enter"),
    3: KeyInput("c", ctrl=True),
}

C_TITLE = 1
C_ERROR = 2
C_DIM = 3

TABS = "1:Dashboard | 2:Repos | 3:Activity | 4:Settings"
RECENT_REPOS = 5
LOG_TAIL = 8


class CursesInput:
    """InputSource over a curses window in no-delay mode."""

    def __init__(self, screen):
        self.screen = screen
        screen.nodelay(True)
        screen.keypad(True)
        curses.mousemask(curses.BUTTON1_PRESSED | curses.BUTTON1_CLICKED)

    def poll(self) -> list[InputEvent]:
        events: list[InputEvent] = []
        while True:
            code = self.screen.getch()
            if code == -1:
                return events
            event = self._translate(code)
            if event is not None:
                events.append(event)

    def _translate(self, code: int) -> InputEvent | None:
        if code == curses.KEY_MOUSE:
            try:
                _, col, row, _, bstate = curses.getmouse()
            except curses.error:
                return None
            if bstate & (curses.BUTTON1_PRESSED | curses.BUTTON1_CLICKED):
                return MouseClick(row=row, column=col)
            return None
        if code == curses.KEY_RESIZE:
            height, width = self.screen.getmaxyx()
            return Resize(width=width, height=height)
        if code in _SPECIAL_KEYS:
            return _SPECIAL_KEYS[code]
        if 32 <= code < 127:
            return KeyInput(chr(code))
        return None


class CursesRenderer:
    """Renderer that redraws the whole screen each frame."""

    def __init__(self, screen, log_buffer: LogBuffer):
        self.screen = screen
        self.log_buffer = log_buffer
        curses.curs_set(0)
        if curses.has_colors():
            curses.start_color()
            curses.use_default_colors()
            curses.init_pair(C_TITLE, curses.COLOR_CYAN, -1)
            curses.init_pair(C_ERROR, curses.COLOR_RED, -1)
            curses.init_pair(C_DIM, curses.COLOR_WHITE, -1)

    def render(self, state: AppState) -> None:
        self.screen.erase()
        height, width = self.screen.getmaxyx()
        lines = page_lines(state, self.log_buffer.get_messages())
        self._put(0, 0, f" control-system — {state.ui.current_page.title}", C_TITLE, width)
        self._put(1, 1, TABS, C_DIM, width)
        body_rows = max(0, height - 4)
        offset = min(state.ui.scroll_offset, max(0, len(lines) - 1))
        for i, line in enumerate(lines[offset:offset + body_rows]):
            self._put(3 + i, 2, line, 0, width)
        color = C_ERROR if state.github.status.is_error else C_DIM
        self._put(height - 1, 0, status_text(state), color, width)
        self.screen.refresh()

    def _put(self, row: int, col: int, text: str, color: int, width: int) -> None:
        if row < 0 or col >= width:
            return
        try:
            self.screen.addnstr(row, col, text, max(0, width - col - 1), curses.color_pair(color))
        except curses.error:
            pass  # writing to the last cell raises; nothing to recover


# -- Text layout ---------------------------------------------------------------

def status_text(state: AppState) -> str:
    """Status line; a pulsing marker while a fetch is in flight."""
    marker = " "
    if state.github.status.is_fetching:
        marker = "*" if state.fx.pulse_value() >= 0.5 else "."
    return f"{marker} {state.status_message()}"


def page_lines(state: AppState, logs: list[LogMessage]) -> list[str]:
    if state.ui.show_help_overlay or state.ui.current_page is Page.SETTINGS:
        return [f"{key:<6} {desc}" for key, desc in keybind_help()]
    if state.ui.current_page is Page.REPOSITORIES:
        return _repo_lines(state)
    if state.ui.current_page is Page.ACTIVITY:
        return [
            f"{_cursor(state, i)}{'NEW ' if e.is_new else '    '}"
            f"{e.kind.icon} {e.kind.description} {e.repo_name}"
            for i, e in enumerate(state.github.events)
        ]
    return _dashboard_lines(state, logs)


def _cursor(state: AppState, index: int) -> str:
    return "> " if index == state.ui.selected_index else "  "


def _repo_lines(state: AppState) -> list[str]:
    gh = state.github
    lines = [
        f"{_cursor(state, i)}{r.name:<32} *{r.stargazers_count:<6} forks {r.forks_count}"
        for i, r in enumerate(gh.top_repos_by_stars(LISTED_REPOS))
    ]
    recent = gh.recently_updated_repos(RECENT_REPOS)
    if recent:
        lines += ["", "Recently pushed:"]
        lines += [
            f"  {r.name:<32} {r.pushed_at:%Y-%m-%d}" if r.pushed_at else f"  {r.name:<32} -"
            for r in recent
        ]
    return lines


def _dashboard_lines(state: AppState, logs: list[LogMessage]) -> list[str]:
    gh = state.github
    sys_state = state.system
    if state.has_github_data():
        login = gh.profile.login if gh.profile else "-"
        rate = gh.rate_limit
        rate_line = (
            f"Rate limit: {rate.remaining}/{rate.limit} "
            f"({rate.usage_percentage():.0f}% used)"
        )
        if rate.is_low():
            rate_line += "  LOW"
        lines = [
            f"User: {login}",
            f"Repos: {gh.stats.total_repos}  Stars: {gh.stats.total_stars}  "
            f"Forks: {gh.stats.total_forks}",
            rate_line,
            f"New events: {state.new_event_count}",
        ]
    else:
        lines = ["No GitHub data yet. Press r to refresh."]
    lines += [
        "",
        f"Host: {sys_state.hostname} ({sys_state.os_name}, {sys_state.cpu_count} cores)",
        f"CPU: {sys_state.cpu_usage:.1f}%  MEM: {sys_state.memory_percent:.1f}%  "
        f"Uptime: {sys_state.uptime_formatted()}",
        "",
        "Logs:",
    ]
    lines.extend(f"  {m.message}" for m in logs[-LOG_TAIL:])
    return lines
