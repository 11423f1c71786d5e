"""Cache Snapshot — the persisted subset of GithubState plus a version tag.

Invariants:
    - cache_version of a freshly built snapshot is always CACHE_VERSION
    - to_github_state() always yields status Idle, whatever status was live at save time
    - Status is never part of the persisted document

Design Decisions:
    - Version gate is exact equality; there is no migration path between versions
"""

from datetime import datetime

from pydantic import BaseModel, Field

from control_system.core.github_models import (
    FetchStatus, GithubEvent, GithubProfile, GithubRepo, GithubState,
    GithubStats, RateLimit,
)

CACHE_VERSION = 1


class CacheSnapshot(BaseModel):
    profile: GithubProfile | None = None
    repos: list[GithubRepo] = Field(default_factory=list)
    events: list[GithubEvent] = Field(default_factory=list)
    stats: GithubStats = Field(default_factory=GithubStats)
    rate_limit: RateLimit = Field(default_factory=RateLimit)
    last_updated: datetime | None = None
    cache_version: int = CACHE_VERSION

    @classmethod
    def from_github_state(cls, state: GithubState) -> "CacheSnapshot":
        """Copy the persistable fields. Pure, no IO."""
        return cls(
            profile=state.profile.model_copy(deep=True) if state.profile else None,
            repos=[r.model_copy(deep=True) for r in state.repos],
            events=[e.model_copy(deep=True) for e in state.events],
            stats=state.stats.model_copy(),
            rate_limit=state.rate_limit.model_copy(),
            last_updated=state.last_updated,
            cache_version=CACHE_VERSION,
        )

    def to_github_state(self) -> GithubState:
        """Rebuild a GithubState. Status resets to Idle."""
        return GithubState(
            profile=self.profile.model_copy(deep=True) if self.profile else None,
            repos=[r.model_copy(deep=True) for r in self.repos],
            events=[e.model_copy(deep=True) for e in self.events],
            stats=self.stats.model_copy(),
            rate_limit=self.rate_limit.model_copy(),
            last_updated=self.last_updated,
            status=FetchStatus.idle(),
        )
