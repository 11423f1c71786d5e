"""GitHub Models — the authoritative external-data record and its parts.

Invariants:
    - GithubState.stats == compute_stats(GithubState.repos) after every cycle that touched repos
    - A published GithubState is never mutated; writers copy first (GithubState.clone)
    - FetchStatus.reason is set if and only if kind is ERROR
    - Model field names follow the GitHub REST payloads (extra keys ignored)

Design Decisions:
    - Pydantic models over dataclasses: the same classes validate API payloads
      and round-trip through the JSON cache
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from control_system.core.domain_types import GithubEventType, StatusKind


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class GithubProfile(_Payload):
    login: str
    name: str | None = None
    avatar_url: str = ""
    bio: str | None = None
    public_repos: int = 0
    public_gists: int = 0
    followers: int = 0
    following: int = 0
    created_at: datetime | None = None


class GithubRepo(_Payload):
    name: str
    full_name: str = ""
    description: str | None = None
    html_url: str = ""
    stargazers_count: int = 0
    forks_count: int = 0
    watchers_count: int = 0
    language: str | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None
    open_issues_count: int = 0
    fork: bool = False


class GithubEvent(_Payload):
    id: str
    event_type: str
    repo_name: str
    created_at: datetime
    is_new: bool = False

    @property
    def kind(self) -> GithubEventType:
        return GithubEventType.from_name(self.event_type)


class RateLimit(_Payload):
    """Advisory snapshot of the core API quota. Never gates a fetch."""
    limit: int = 0
    remaining: int = 0
    reset_at: datetime | None = None

    def usage_percentage(self) -> float:
        if self.limit == 0:
            return 0.0
        return (self.limit - self.remaining) / self.limit * 100.0

    def is_low(self) -> bool:
        return self.remaining < 10


class GithubStats(_Payload):
    total_stars: int = 0
    total_forks: int = 0
    total_repos: int = 0
    total_watchers: int = 0


class FetchStatus(BaseModel):
    """Tagged union over Idle | Fetching | Success | Error(reason)."""
    model_config = ConfigDict(frozen=True)

    kind: StatusKind = StatusKind.IDLE
    reason: str | None = None

    @classmethod
    def idle(cls) -> "FetchStatus":
        return cls(kind=StatusKind.IDLE)

    @classmethod
    def fetching(cls) -> "FetchStatus":
        return cls(kind=StatusKind.FETCHING)

    @classmethod
    def success(cls) -> "FetchStatus":
        return cls(kind=StatusKind.SUCCESS)

    @classmethod
    def error(cls, reason: str) -> "FetchStatus":
        return cls(kind=StatusKind.ERROR, reason=reason)

    @property
    def is_fetching(self) -> bool:
        return self.kind is StatusKind.FETCHING

    @property
    def is_error(self) -> bool:
        return self.kind is StatusKind.ERROR


def compute_stats(repos: list[GithubRepo]) -> GithubStats:
    """Aggregate stats over a repo collection. Pure, no IO."""
    return GithubStats(
        total_stars=sum(r.stargazers_count for r in repos),
        total_forks=sum(r.forks_count for r in repos),
        total_repos=len(repos),
        total_watchers=sum(r.watchers_count for r in repos),
    )


class GithubState(BaseModel):
    """Everything the dashboard knows about one GitHub user."""

    profile: GithubProfile | None = None
    repos: list[GithubRepo] = Field(default_factory=list)
    events: list[GithubEvent] = Field(default_factory=list)
    stats: GithubStats = Field(default_factory=GithubStats)
    rate_limit: RateLimit = Field(default_factory=RateLimit)
    last_updated: datetime | None = None
    status: FetchStatus = Field(default_factory=FetchStatus.idle)

    def clone(self, **updates) -> "GithubState":
        """Deep copy, optionally replacing top-level fields."""
        return self.model_copy(update=updates, deep=True)

    def recompute_stats(self) -> None:
        self.stats = compute_stats(self.repos)

    def has_data(self) -> bool:
        return self.profile is not None or bool(self.repos)

    def event_ids(self) -> set[str]:
        return {e.id for e in self.events}

    def top_repos_by_stars(self, n: int) -> list[GithubRepo]:
        """Top n non-fork repos by star count."""
        own = [r for r in self.repos if not r.fork]
        return sorted(own, key=lambda r: r.stargazers_count, reverse=True)[:n]

    def recently_updated_repos(self, n: int) -> list[GithubRepo]:
        """Most recently pushed repos; never-pushed repos sort last."""
        pushed = [r for r in self.repos if r.pushed_at is not None]
        never = [r for r in self.repos if r.pushed_at is None]
        pushed.sort(key=lambda r: r.pushed_at, reverse=True)
        return (pushed + never)[:n]
