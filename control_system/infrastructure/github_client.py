"""GitHub Client — one fetch cycle over the GitHub REST API.

Invariants:
    - fetch_all never raises; every failure ends up in the returned status
    - Profile and repos are hard steps: failure stops the cycle at Error(reason)
    - Events and rate limit are soft steps: failure keeps the previous value
    - The returned state is a fresh deep copy; `previous` is never mutated
    - Repo listing keeps at most MAX_REPOS items and scans at most MAX_PAGES pages
    - No retry inside a cycle (the retry unit is the next cycle)

Design Decisions:
    - Thin wrapper over httpx.AsyncClient: transport, status and payload errors
      are all mapped to GithubAPIError at the request boundary
    - is_new compares against the previous cycle's event ids, so "new" means
      "new since the last successful events fetch"
"""

import logging
from datetime import datetime, timezone

import httpx
from pydantic import ValidationError

from control_system.core.domain_types import FetchStep
from control_system.core.errors import ErrorContext, GithubAPIError
from control_system.core.github_models import (
    FetchStatus, GithubEvent, GithubProfile, GithubRepo, GithubState, RateLimit,
)

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
USER_AGENT = "control-system"


class GithubClient:
    """Fetches profile, repos, events and rate limit for one user."""

    REPOS_PER_PAGE = 100
    MAX_REPOS = 200
    MAX_PAGES = 10
    EVENTS_PER_PAGE = 50

    def __init__(
        self,
        username: str,
        token: str | None = None,
        base_url: str = DEFAULT_API_URL,
        timeout_seconds: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.username = username
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if http_client is None:
            http_client = httpx.AsyncClient(
                base_url=base_url, timeout=timeout_seconds,
            )
        http_client.headers.update(headers)
        self.http = http_client

    async def aclose(self) -> None:
        await self.http.aclose()

    async def fetch_all(self, previous: GithubState) -> GithubState:
        """Run one ordered fetch cycle on top of `previous`."""
        state = previous.clone(status=FetchStatus.fetching())
        logger.info("Fetching GitHub data for user: %s", self.username)

        try:
            state.profile = await self.fetch_profile()
        except GithubAPIError as e:
            return self._fail(state, e)

        try:
            state.repos = await self.fetch_repos()
        except GithubAPIError as e:
            return self._fail(state, e)

        try:
            state.events = await self.fetch_events(previous.event_ids())
        except GithubAPIError as e:
            logger.warning("Failed to fetch events: %s", e.message, extra=e.log_extra())

        try:
            state.rate_limit = await self.fetch_rate_limit()
        except GithubAPIError as e:
            logger.warning("Failed to fetch rate limit: %s", e.message, extra=e.log_extra())

        state.recompute_stats()
        state.last_updated = datetime.now(timezone.utc)
        state.status = FetchStatus.success()
        logger.info(
            "GitHub fetch complete: %d repos, %d stars total",
            state.stats.total_repos, state.stats.total_stars,
            extra={"repos": state.stats.total_repos},
        )
        return state

    def _fail(self, state: GithubState, error: GithubAPIError) -> GithubState:
        logger.error(error.reason, extra=error.log_extra())
        state.status = FetchStatus.error(error.reason)
        return state

    # --- Steps ---------------------------------------------------------------

    async def fetch_profile(self) -> GithubProfile:
        data = await self._get_json(FetchStep.PROFILE, f"/users/{self.username}")
        profile = self._parse(FetchStep.PROFILE, GithubProfile.model_validate, data)
        logger.debug("Fetched profile for %s", profile.login)
        return profile

    async def fetch_repos(self) -> list[GithubRepo]:
        repos: list[GithubRepo] = []
        for page in range(1, self.MAX_PAGES + 1):
            items = await self._get_json(
                FetchStep.REPOS, f"/users/{self.username}/repos",
                params={"per_page": self.REPOS_PER_PAGE, "page": page},
            )
            if not isinstance(items, list):
                raise GithubAPIError(FetchStep.REPOS, "expected a JSON array")
            if not items:
                break
            for item in items:
                repos.append(self._parse(FetchStep.REPOS, GithubRepo.model_validate, item))
                if len(repos) >= self.MAX_REPOS:
                    break
            if len(repos) >= self.MAX_REPOS:
                break
        logger.debug("Fetched %d repositories", len(repos))
        return repos

    async def fetch_events(self, existing_ids: set[str]) -> list[GithubEvent]:
        items = await self._get_json(
            FetchStep.EVENTS, f"/users/{self.username}/events",
            params={"per_page": self.EVENTS_PER_PAGE},
        )
        if not isinstance(items, list):
            raise GithubAPIError(FetchStep.EVENTS, "expected a JSON array")
        events = [
            event for event in (_parse_event(raw, existing_ids) for raw in items)
            if event is not None
        ]
        logger.debug("Fetched %d events", len(events))
        return events

    async def fetch_rate_limit(self) -> RateLimit:
        data = await self._get_json(FetchStep.RATE_LIMIT, "/rate_limit")
        try:
            rate = data["rate"]
            reset = int(rate["reset"])
            limit = RateLimit(
                limit=int(rate["limit"]),
                remaining=int(rate["remaining"]),
                reset_at=datetime.fromtimestamp(reset, tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError, OverflowError, OSError) as e:
            raise GithubAPIError(FetchStep.RATE_LIMIT, f"malformed payload: {e}")
        logger.debug("Rate limit: %d/%d", limit.remaining, limit.limit)
        return limit

    # --- HTTP ----------------------------------------------------------------

    async def _get_json(self, step: FetchStep, path: str, params: dict | None = None):
        ctx = ErrorContext(username=self.username, path=path)
        try:
            response = await self.http.get(path, params=params)
        except httpx.HTTPError as e:
            raise GithubAPIError(step, f"request error: {e}", context=ctx)
        if response.status_code >= 400:
            raise GithubAPIError(
                step, f"HTTP {response.status_code}",
                status_code=response.status_code, context=ctx,
            )
        try:
            return response.json()
        except ValueError as e:
            raise GithubAPIError(step, f"invalid JSON: {e}", context=ctx)

    @staticmethod
    def _parse(step: FetchStep, validate, data):
        try:
            return validate(data)
        except ValidationError as e:
            raise GithubAPIError(
                step, f"malformed payload ({e.error_count()} errors)",
            )


def _parse_event(raw, existing_ids: set[str]) -> GithubEvent | None:
    """Build an event from a feed entry; None when a required field is missing."""
    if not isinstance(raw, dict):
        return None
    event_id = raw.get("id")
    event_type = raw.get("type")
    repo = raw.get("repo")
    repo_name = repo.get("name") if isinstance(repo, dict) else None
    created = raw.get("created_at")
    if not all(isinstance(v, str) for v in (event_id, event_type, repo_name, created)):
        return None
    try:
        created_at = datetime.fromisoformat(created)
    except ValueError:
        return None
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return GithubEvent(
        id=event_id,
        event_type=event_type,
        repo_name=repo_name,
        created_at=created_at.astimezone(timezone.utc),
        is_new=event_id not in existing_ids,
    )
