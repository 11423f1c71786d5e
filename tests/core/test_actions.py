"""Tests for action_for_input — pure key / click table lookups."""

from control_system.core.actions import (
    Action, ActionKind, KeyInput, MouseClick, Resize, action_for_input,
)


def test_basic_keys():
    """Single-letter and arrow keys map to their actions."""
    assert action_for_input(KeyInput("q")).kind is ActionKind.QUIT
    assert action_for_input(KeyInput("r")).kind is ActionKind.REFRESH_GITHUB
    assert action_for_input(KeyInput("p")).kind is ActionKind.TOGGLE_PAUSE
    assert action_for_input(KeyInput("?")).kind is ActionKind.TOGGLE_HELP
    assert action_for_input(KeyInput("j")).kind is ActionKind.SCROLL_DOWN
    assert action_for_input(KeyInput("up")).kind is ActionKind.SCROLL_UP


def test_number_keys_go_to_page():
    """Digit keys select the zero-based page."""
    assert action_for_input(KeyInput("3")) == Action(ActionKind.GO_TO_PAGE, 2)


def test_ctrl_c_quits():
    """Ctrl+C quits; a plain 'c' does nothing."""
    assert action_for_input(KeyInput("c", ctrl=True)).kind is ActionKind.QUIT
    assert action_for_input(KeyInput("c")).kind is ActionKind.NONE


def test_tab_and_shift_tab():
    """Tab cycles focus; Shift+Tab goes to the previous page."""
    assert action_for_input(KeyInput("tab")).kind is ActionKind.CYCLE_FOCUS
    assert action_for_input(KeyInput("tab", shift=True)).kind is ActionKind.PREV_PAGE


def test_header_clicks_map_to_tabs():
    """Clicks on the tab row select the tab under the cursor."""
    assert action_for_input(MouseClick(row=1, column=5)) == Action(ActionKind.GO_TO_PAGE, 0)
    assert action_for_input(MouseClick(row=1, column=20)) == Action(ActionKind.GO_TO_PAGE, 1)
    assert action_for_input(MouseClick(row=1, column=30)) == Action(ActionKind.GO_TO_PAGE, 2)
    assert action_for_input(MouseClick(row=1, column=60)) == Action(ActionKind.GO_TO_PAGE, 3)


def test_clicks_outside_header_ignored():
    """Clicks off the tab row or before the first tab do nothing."""
    assert action_for_input(MouseClick(row=5, column=5)).kind is ActionKind.NONE
    assert action_for_input(MouseClick(row=1, column=0)).kind is ActionKind.NONE


def test_unmapped_input_is_none():
    """Unknown keys and resizes yield the NONE action."""
    assert action_for_input(KeyInput("z")).kind is ActionKind.NONE
    assert action_for_input(Resize(80, 24)).kind is ActionKind.NONE
