"""Test doubles and builders shared across test packages.

Design Decisions:
    - GitHub API faked with httpx.MockTransport (no network, real httpx stack)
    - Fakes record calls so tests assert on behavior, not on internals
"""

import asyncio
import itertools
from datetime import datetime, timezone

import httpx

from control_system.core.github_models import (
    FetchStatus, GithubEvent, GithubProfile, GithubRepo, GithubState,
)
from control_system.infrastructure.github_client import GithubClient

API_URL = "https://api.github.com"
USER = "octotest"


# -- Builders ------------------------------------------------------------------

def repo(name="repo", stars=0, forks=0, watchers=0, **kw) -> GithubRepo:
    return GithubRepo(
        name=name, full_name=f"{USER}/{name}", stargazers_count=stars,
        forks_count=forks, watchers_count=watchers, **kw,
    )


def event(event_id="evt_1", event_type="PushEvent", is_new=False) -> GithubEvent:
    return GithubEvent(
        id=event_id, event_type=event_type, repo_name=f"{USER}/repo",
        created_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc), is_new=is_new,
    )


def populated_state(**updates) -> GithubState:
    state = GithubState(
        profile=GithubProfile(login=USER, name="Octo Test"),
        repos=[repo("old", stars=5, forks=1, watchers=5)],
        events=[event("evt_1")],
        last_updated=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        status=FetchStatus.success(),
    )
    state.recompute_stats()
    return state.clone(**updates)


def repo_payload(index: int, stars: int = 1) -> dict:
    return {
        "name": f"repo-{index}", "full_name": f"{USER}/repo-{index}",
        "html_url": f"https://github.com/{USER}/repo-{index}",
        "stargazers_count": stars, "forks_count": 0, "watchers_count": stars,
        "fork": False, "open_issues_count": 0,
    }


def event_payload(event_id: str, event_type: str = "PushEvent") -> dict:
    return {
        "id": event_id, "type": event_type,
        "repo": {"name": f"{USER}/repo"},
        "created_at": "2024-05-01T12:00:00Z",
    }


# -- Fake GitHub API -----------------------------------------------------------

class FakeGithubAPI:
    """Routes GitHub REST paths to canned responses; records requests."""

    def __init__(
        self, profile=None, repos=None, events=None, rate=None, failures=(),
        page_size: int | None = None,
    ):
        self.profile = profile if profile is not None else {"login": USER, "name": "Octo"}
        self.repos = repos if repos is not None else []
        self.events = events if events is not None else []
        self.rate = rate if rate is not None else {"limit": 5000, "remaining": 4999, "reset": 1714564800}
        self.failures = set(failures)
        self.page_size = page_size
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == f"/users/{USER}":
            return self._respond("profile", self.profile)
        if path == f"/users/{USER}/repos":
            page = int(request.url.params["page"])
            per_page = self.page_size or int(request.url.params["per_page"])
            start = (page - 1) * per_page
            return self._respond("repos", self.repos[start:start + per_page])
        if path == f"/users/{USER}/events":
            return self._respond("events", self.events)
        if path == "/rate_limit":
            return self._respond("rate_limit", {"resources": {}, "rate": self.rate})
        return httpx.Response(404, json={"message": "Not Found"})

    def _respond(self, step: str, body) -> httpx.Response:
        if step in self.failures:
            return httpx.Response(500, json={"message": "boom"})
        return httpx.Response(200, json=body)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def client(self, token: str | None = None) -> GithubClient:
        http = httpx.AsyncClient(
            base_url=API_URL, transport=httpx.MockTransport(self.handler),
        )
        return GithubClient(USER, token=token, http_client=http)


# -- Fake poller collaborators -------------------------------------------------

class FakeClient:
    """fetch_all stand-in: returns scripted states, counts calls.

    `delays` gives per-call fetch durations; calls past its end use `delay`.
    """

    def __init__(self, outcomes=None, delay: float = 0.0, delays=()):
        self.calls: list[GithubState] = []
        self.delay = delay
        self.delays = list(delays)
        self._outcomes = iter(outcomes) if outcomes is not None else None
        self._counter = itertools.count(1)
        self.closed = False

    async def fetch_all(self, previous: GithubState) -> GithubState:
        index = len(self.calls)
        self.calls.append(previous)
        delay = self.delays[index] if index < len(self.delays) else self.delay
        if delay:
            await asyncio.sleep(delay)
        if self._outcomes is not None:
            nxt = next(self._outcomes, None)
            if nxt is not None:
                return nxt
        n = next(self._counter)
        state = previous.clone(
            repos=[repo(f"r{n}", stars=n)], status=FetchStatus.success(),
        )
        state.recompute_stats()
        return state

    async def aclose(self) -> None:
        self.closed = True


class FakeCache:
    def __init__(self, snapshot=None, fail_save: Exception | None = None):
        self.snapshot = snapshot
        self.fail_save = fail_save
        self.saved: list[GithubState] = []

    async def load(self):
        return self.snapshot

    async def save(self, state: GithubState) -> None:
        if self.fail_save is not None:
            raise self.fail_save
        self.saved.append(state)


# -- Fake terminal -------------------------------------------------------------

class ScriptedInput:
    """InputSource returning one scripted batch per poll()."""

    def __init__(self, *batches):
        self.batches = list(batches)
        self.polls = 0

    def poll(self):
        self.polls += 1
        return self.batches.pop(0) if self.batches else []


class RecordingRenderer:
    def __init__(self):
        self.frames = 0
        self.last = None

    def render(self, state) -> None:
        self.frames += 1
        self.last = state
