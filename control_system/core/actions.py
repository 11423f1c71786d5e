"""Actions — the discrete vocabulary the frame loop applies to view state.

Invariants:
    - action_for_input is a pure table lookup; unmapped input yields NONE
    - Only left clicks on the header row produce page actions

Design Decisions:
    - Raw input is normalized by the terminal adapter into KeyInput / MouseClick,
      so this table never sees curses key codes
"""

from dataclasses import dataclass
from enum import Enum


class ActionKind(str, Enum):
    QUIT = "quit"
    REFRESH_GITHUB = "refresh_github"
    NEXT_PAGE = "next_page"
    PREV_PAGE = "prev_page"
    GO_TO_PAGE = "go_to_page"
    CYCLE_FOCUS = "cycle_focus"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"
    SELECT_NEXT = "select_next"
    SELECT_PREV = "select_prev"
    TOGGLE_HELP = "toggle_help"
    TOGGLE_PAUSE = "toggle_pause"
    NONE = "none"


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    page: int = 0  # only meaningful for GO_TO_PAGE


@dataclass(frozen=True)
class KeyInput:
    key: str
    ctrl: bool = False
    shift: bool = False


@dataclass(frozen=True)
class MouseClick:
    row: int
    column: int


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


InputEvent = KeyInput | MouseClick | Resize

NO_ACTION = Action(ActionKind.NONE)

_KEY_TABLE: dict[str, Action] = {
    "q": Action(ActionKind.QUIT),
    "r": Action(ActionKind.REFRESH_GITHUB),
    "1": Action(ActionKind.GO_TO_PAGE, 0),
    "2": Action(ActionKind.GO_TO_PAGE, 1),
    "3": Action(ActionKind.GO_TO_PAGE, 2),
    "4": Action(ActionKind.GO_TO_PAGE, 3),
    "?": Action(ActionKind.TOGGLE_HELP),
    "h": Action(ActionKind.TOGGLE_HELP),
    "p": Action(ActionKind.TOGGLE_PAUSE),
    "up": Action(ActionKind.SCROLL_UP),
    "k": Action(ActionKind.SCROLL_UP),
    "page_up": Action(ActionKind.SCROLL_UP),
    "down": Action(ActionKind.SCROLL_DOWN),
    "j": Action(ActionKind.SCROLL_DOWN),
    "page_down": Action(ActionKind.SCROLL_DOWN),
    "left": Action(ActionKind.PREV_PAGE),
    "right": Action(ActionKind.NEXT_PAGE),
    "enter": Action(ActionKind.SELECT_NEXT),
    "tab": Action(ActionKind.CYCLE_FOCUS),
}

# Header tab column spans: "1:Dashboard | 2:Repos | 3:Activity | 4:Settings"
_TAB_SPANS: tuple[tuple[int, int, int], ...] = (
    (1, 14, 0),
    (15, 24, 1),
    (25, 37, 2),
    (38, 10_000, 3),
)
HEADER_ROW = 1


def _action_for_key(key: KeyInput) -> Action:
    if key.ctrl and key.key == "c":
        return Action(ActionKind.QUIT)
    if key.key == "tab" and key.shift:
        return Action(ActionKind.PREV_PAGE)
    return _KEY_TABLE.get(key.key, NO_ACTION)


def _action_for_click(click: MouseClick) -> Action:
    if click.row != HEADER_ROW:
        return NO_ACTION
    for start, end, page in _TAB_SPANS:
        if start <= click.column <= end:
            return Action(ActionKind.GO_TO_PAGE, page)
    return NO_ACTION


def action_for_input(event: InputEvent) -> Action:
    """Translate one normalized input event into an Action."""
    if isinstance(event, KeyInput):
        return _action_for_key(event)
    if isinstance(event, MouseClick):
        return _action_for_click(event)
    return NO_ACTION


def keybind_help() -> list[tuple[str, str]]:
    return [
        ("q", "Quit"),
        ("r", "Refresh GitHub"),
        ("1-4", "Switch pages"),
        ("Tab", "Cycle focus"),
        ("?/h", "Toggle help"),
        ("p", "Pause animations"),
        ("Up/k", "Scroll up"),
        ("Dn/j", "Scroll down"),
        ("L/R", "Prev/Next page"),
    ]
