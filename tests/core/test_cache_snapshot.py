"""Cache Snapshot — pure conversion tests (no IO)."""

from control_system.core.cache_snapshot import CACHE_VERSION, CacheSnapshot
from control_system.core.domain_types import StatusKind
from control_system.core.github_models import FetchStatus

from tests.fakes import populated_state


def test_snapshot_carries_current_version():
    """New snapshots are tagged with the supported cache version."""
    snapshot = CacheSnapshot.from_github_state(populated_state())
    assert snapshot.cache_version == CACHE_VERSION


def test_status_is_not_persisted():
    """The fetch status never reaches the serialized form."""
    state = populated_state(status=FetchStatus.error("Repos fetch failed: HTTP 500"))
    dumped = CacheSnapshot.from_github_state(state).model_dump(mode="json")
    assert "status" not in dumped


def test_to_github_state_always_idle():
    """Whatever status was current at save time, a restored state is Idle."""
    for status in (
        FetchStatus.success(), FetchStatus.fetching(), FetchStatus.error("boom"),
    ):
        snapshot = CacheSnapshot.from_github_state(populated_state(status=status))
        assert snapshot.to_github_state().status.kind is StatusKind.IDLE


def test_conversion_preserves_fields():
    """Every persisted field survives state -> snapshot -> state."""
    state = populated_state()
    restored = CacheSnapshot.from_github_state(state).to_github_state()
    assert restored.profile == state.profile
    assert restored.repos == state.repos
    assert restored.events == state.events
    assert restored.stats == state.stats
    assert restored.rate_limit == state.rate_limit
    assert restored.last_updated == state.last_updated


def test_snapshot_does_not_alias_state():
    """Editing the snapshot does not leak back into the state."""
    state = populated_state()
    snapshot = CacheSnapshot.from_github_state(state)
    snapshot.repos[0].stargazers_count = 999
    assert state.repos[0].stargazers_count == 5
