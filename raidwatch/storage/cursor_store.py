"""JSON-file cursor store with a bounded dedup window."""

from __future__ import annotations

import contextlib
import json
import os
from pathlib import Path

from loguru import logger

from raidwatch.config.defaults import DEFAULT_MAX_SEEN_IDS
from raidwatch.core.models import Cursor
from raidwatch.errors import PersistenceError
from raidwatch.utils.helpers import ensure_dir, get_state_path


class CursorStore:
    """Durable record of the last read channel post and recently seen ids.

    Every mutating call rewrites the whole file before returning. When the
    write fails the in-memory state has already advanced and a
    ``PersistenceError`` is raised for the caller to log.
    """

    def __init__(self, path: Path | None = None, *, max_seen_ids: int = DEFAULT_MAX_SEEN_IDS) -> None:
        self.path = path or (get_state_path("data") / "cursor.json")
        self.max_seen_ids = max(1, int(max_seen_ids))
        self._last_seen_id: int | None = None
        self._seen_ids: set[int] = set()

    @property
    def cursor(self) -> Cursor:
        return Cursor(last_seen_id=self._last_seen_id, seen_ids=frozenset(self._seen_ids))

    def load(self) -> Cursor:
        """Read persisted state, creating an empty file on first start."""
        if not self.path.exists():
            logger.info("cursor file {} not found, starting fresh", self.path)
            try:
                self._save()
            except PersistenceError as e:
                logger.error("cannot create cursor file: {}; continuing in memory", e)
            return self.cursor

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            last = payload.get("last_seen_id")
            self._last_seen_id = int(last) if last is not None else None
            self._seen_ids = {int(v) for v in payload.get("seen_ids", [])}
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error("failed to read cursor file {}: {}; starting fresh", self.path, e)
            self._last_seen_id = None
            self._seen_ids = set()
            return self.cursor

        self._evict()
        logger.info(
            "cursor loaded  last_seen_id={} seen_ids={}",
            self._last_seen_id,
            len(self._seen_ids),
        )
        return self.cursor

    def is_seen(self, item_id: int) -> bool:
        return item_id in self._seen_ids

    def record_seen(self, item_id: int) -> None:
        """Add ``item_id`` to the dedup window. No-op when already present."""
        if item_id in self._seen_ids:
            return
        self._seen_ids.add(item_id)
        self._evict()
        self._save()

    def advance_cursor_to(self, item_id: int) -> None:
        """Move the cursor forward. Never moves it backwards."""
        if self._last_seen_id is not None and item_id <= self._last_seen_id:
            return
        self._last_seen_id = item_id
        self._save()

    def reset(self) -> None:
        """Forget all progress."""
        self._last_seen_id = None
        self._seen_ids = set()
        self._save()
        logger.info("cursor store cleared")

    # ── Internals ────────────────────────────────────────────────────

    def _evict(self) -> None:
        # ids grow monotonically, so the smallest are the oldest
        if len(self._seen_ids) <= self.max_seen_ids:
            return
        ordered = sorted(self._seen_ids)
        self._seen_ids = set(ordered[-self.max_seen_ids :])

    def _save(self) -> None:
        data = {
            "last_seen_id": self._last_seen_id,
            "seen_ids": sorted(self._seen_ids),
        }
        tmp_path = self.path.with_name(f".{self.path.name}.tmp-{os.getpid()}")
        try:
            ensure_dir(self.path.parent)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
            raise PersistenceError(str(self.path), str(e)) from e
