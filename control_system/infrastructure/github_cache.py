"""GitHub Cache — durable JSON snapshot of GithubState with a version gate.

Invariants:
    - load() never raises: absent, unreadable, non-UTF-8, malformed and wrong-version files all return None
    - A loaded snapshot always converts to a GithubState with status Idle
    - save() overwrites the file with a single write (no temp file + rename)
    - No internal locking: the poller is the only writer and never overlaps saves

Design Decisions:
    - Version is checked on the raw JSON before model validation, so a future
      format is reported as a version mismatch rather than a parse error
    - The tag must be a JSON integer; true or 1.0 are mismatches, not coerced
    - File IO runs in a worker thread (asyncio.to_thread) to keep the loop responsive
"""

import asyncio
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from control_system.core.cache_snapshot import CACHE_VERSION, CacheSnapshot
from control_system.core.errors import CacheError, ErrorContext
from control_system.core.github_models import GithubState

logger = logging.getLogger(__name__)


class GithubCache:
    """Reads and writes one cache file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def load(self) -> CacheSnapshot | None:
        if not self.path.exists():
            logger.debug("Cache file does not exist: %s", self.path)
            return None

        logger.info("Loading cache from %s", self.path)
        try:
            content = await asyncio.to_thread(self.path.read_bytes)
        except OSError as e:
            logger.warning("Cache unreadable, ignoring: %s", e, extra={"path": str(self.path)})
            return None

        try:
            raw = json.loads(content)
        except ValueError as e:  # includes UnicodeDecodeError
            logger.warning("Cache is not valid JSON, ignoring: %s", e, extra={"path": str(self.path)})
            return None

        version = raw.get("cache_version") if isinstance(raw, dict) else None
        if type(version) is not int or version != CACHE_VERSION:
            logger.warning(
                "Cache version mismatch (found %r, expected %d), ignoring cache",
                version, CACHE_VERSION,
            )
            return None

        try:
            snapshot = CacheSnapshot.model_validate(raw)
        except ValidationError as e:
            logger.warning(
                "Cache content malformed (%d errors), ignoring", e.error_count(),
                extra={"path": str(self.path)},
            )
            return None

        logger.debug("Loaded cache with %d repos", len(snapshot.repos))
        return snapshot

    async def save(self, state: GithubState) -> None:
        content = CacheSnapshot.from_github_state(state).model_dump_json(indent=2)
        try:
            await asyncio.to_thread(self._write, content)
        except OSError as e:
            raise CacheError(str(e), "save", ErrorContext(path=str(self.path)))
        logger.info("Saved cache to %s", self.path)

    def _write(self, content: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(content, encoding="utf-8")

    def exists(self) -> bool:
        return self.path.exists()

    async def clear(self) -> None:
        if not self.path.exists():
            return
        try:
            await asyncio.to_thread(self.path.unlink, missing_ok=True)
        except OSError as e:
            raise CacheError(str(e), "clear", ErrorContext(path=str(self.path)))
        logger.info("Cleared cache at %s", self.path)
