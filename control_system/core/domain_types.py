"""Domain Types — enums shared by the models, the poller and the view.

Invariants:
    - All valid states encoded as Enums; no raw string matching outside this module
    - PROFILE and REPOS are the only hard fetch steps

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
    - GitHub event types kept open-ended: unknown names map to UNKNOWN, the raw
      name stays on the event so nothing is lost across a cache round-trip
"""

from enum import Enum


# ─── Fetch cycle ─────────────────────────────────────────────────

class StatusKind(str, Enum):
    """Tag of FetchStatus. ERROR carries a reason on the status itself."""
    IDLE = "idle"
    FETCHING = "fetching"
    SUCCESS = "success"
    ERROR = "error"


class FetchStep(str, Enum):
    """Ordered steps of one fetch cycle."""
    PROFILE = "profile"
    REPOS = "repos"
    EVENTS = "events"
    RATE_LIMIT = "rate_limit"


HARD_STEPS: frozenset[FetchStep] = frozenset({FetchStep.PROFILE, FetchStep.REPOS})


class Command(str, Enum):
    """Out-of-band requests to the GitHub poller. Never persisted."""
    REFRESH = "refresh"
    STOP = "stop"


# ─── View ────────────────────────────────────────────────────────

class Page(int, Enum):
    DASHBOARD = 0
    REPOSITORIES = 1
    ACTIVITY = 2
    SETTINGS = 3

    @property
    def title(self) -> str:
        return _PAGE_TITLES[self]

    @classmethod
    def from_index(cls, index: int) -> "Page":
        """Out-of-range indexes fall back to the dashboard."""
        try:
            return cls(index)
        except ValueError:
            return cls.DASHBOARD

    def next(self) -> "Page":
        return Page((self.value + 1) % len(Page))

    def prev(self) -> "Page":
        return Page((self.value + len(Page) - 1) % len(Page))


_PAGE_TITLES = {
    Page.DASHBOARD: "Dashboard",
    Page.REPOSITORIES: "Repositories",
    Page.ACTIVITY: "Activity Feed",
    Page.SETTINGS: "Settings & Help",
}


class FocusArea(str, Enum):
    MAIN = "main"
    SIDEBAR = "sidebar"
    LIST = "list"

    def next(self) -> "FocusArea":
        order = list(FocusArea)
        return order[(order.index(self) + 1) % len(order)]


# ─── GitHub events ───────────────────────────────────────────────

class GithubEventType(str, Enum):
    PUSH = "PushEvent"
    CREATE = "CreateEvent"
    DELETE = "DeleteEvent"
    ISSUES = "IssuesEvent"
    ISSUE_COMMENT = "IssueCommentEvent"
    PULL_REQUEST = "PullRequestEvent"
    PULL_REQUEST_REVIEW = "PullRequestReviewEvent"
    WATCH = "WatchEvent"
    FORK = "ForkEvent"
    RELEASE = "ReleaseEvent"
    PUBLIC = "PublicEvent"
    MEMBER = "MemberEvent"
    GOLLUM = "GollumEvent"
    COMMIT_COMMENT = "CommitCommentEvent"
    UNKNOWN = "Unknown"

    @classmethod
    def from_name(cls, name: str) -> "GithubEventType":
        try:
            return cls(name)
        except ValueError:
            return cls.UNKNOWN

    @property
    def icon(self) -> str:
        return _EVENT_ICONS[self]

    @property
    def description(self) -> str:
        return _EVENT_DESCRIPTIONS[self]


_EVENT_ICONS = {
    GithubEventType.PUSH: "[^]",
    GithubEventType.CREATE: "[+]",
    GithubEventType.DELETE: "[-]",
    GithubEventType.ISSUES: "[!]",
    GithubEventType.ISSUE_COMMENT: "[#]",
    GithubEventType.PULL_REQUEST: "[~]",
    GithubEventType.PULL_REQUEST_REVIEW: "[.]",
    GithubEventType.WATCH: "[*]",
    GithubEventType.FORK: "[Y]",
    GithubEventType.RELEASE: "[>]",
    GithubEventType.PUBLIC: "[@]",
    GithubEventType.MEMBER: "[&]",
    GithubEventType.GOLLUM: "[W]",
    GithubEventType.COMMIT_COMMENT: "[C]",
    GithubEventType.UNKNOWN: "[?]",
}

_EVENT_DESCRIPTIONS = {
    GithubEventType.PUSH: "pushed to",
    GithubEventType.CREATE: "created",
    GithubEventType.DELETE: "deleted",
    GithubEventType.ISSUES: "opened issue in",
    GithubEventType.ISSUE_COMMENT: "commented on",
    GithubEventType.PULL_REQUEST: "opened PR in",
    GithubEventType.PULL_REQUEST_REVIEW: "reviewed PR in",
    GithubEventType.WATCH: "starred",
    GithubEventType.FORK: "forked",
    GithubEventType.RELEASE: "released",
    GithubEventType.PUBLIC: "made public",
    GithubEventType.MEMBER: "added member to",
    GithubEventType.GOLLUM: "updated wiki in",
    GithubEventType.COMMIT_COMMENT: "commented on commit in",
    GithubEventType.UNKNOWN: "did something in",
}
