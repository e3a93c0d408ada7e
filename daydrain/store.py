"""File-backed store of day snapshots with an in-memory cache.

Layout under the workspace root:
    days/<YYYY-MM-DD>.json   one document per calendar day
    today.json               mirror of the current day

The store is best-effort: unreadable or undecodable files count as absent
and are regenerated; write failures are logged and reported through
StoreResult rather than raised.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from daydrain import carryover
from daydrain.fileio import read_json, write_json_atomic_many
from daydrain.models import FOCUS_NOTE_LIMIT, FOCUS_TEXT_LIMIT, DaySnapshot, FocusSlot, Settings
from daydrain.sanitize import clip, sanitize, sanitize_dict
from daydrain.workspace import (
    day_key,
    day_path,
    load_settings,
    shift_day,
    today_alias_path,
    today_str,
    workspace_root,
)

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """A day file could not be read, decoded or written."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass
class StoreResult:
    day: str
    snapshot: DaySnapshot | None = None
    error: StorageError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.snapshot is not None


def destination_index(slots: list[FocusSlot]) -> int:
    """Best slot to receive a moved task: first blank, else first not done, else last."""
    for i, slot in enumerate(slots):
        if slot.is_blank():
            return i
    for i, slot in enumerate(slots):
        if not slot.done:
            return i
    return max(0, len(slots) - 1)


class DayStore:
    """Owns the day files and the snapshot cache.

    Every public method runs under one re-entrant lock, so there is at most
    one writer per day. Snapshots handed out are copies; changes only take
    effect through save().
    """

    def __init__(
        self,
        root: Path | None = None,
        settings: Settings | None = None,
        today: Callable[[], str] | None = None,
    ) -> None:
        self.root = root if root is not None else workspace_root()
        self.settings = settings if settings is not None else load_settings(self.root)
        self._today = today or (lambda: today_str(self.root, self.settings))
        self._cache: dict[str, DaySnapshot] = {}
        self.lock = threading.RLock()

    # ── Reads ─────────────────────────────────────────────────

    def load(self, day: str | date) -> StoreResult:
        """Read and sanitize one day file, bypassing the cache.

        A missing file yields a result with neither snapshot nor error.
        """
        key = day_key(day)
        path = day_path(key, self.root)
        with self.lock:
            if not path.exists():
                return StoreResult(key)
            try:
                raw = read_json(path)
            except (OSError, ValueError) as e:
                logger.warning("Treating unreadable day file as absent: %s (%s)", path, e)
                return StoreResult(key, error=StorageError(path, str(e)))
            if not isinstance(raw, dict) or not raw:
                logger.warning("Treating malformed day file as absent: %s", path)
                return StoreResult(key, error=StorageError(path, "not a JSON object"))
            return StoreResult(key, snapshot=sanitize_dict(raw, key))

    def snapshot(self, day: str | date) -> DaySnapshot:
        """Return the day's snapshot, creating it (with carry-over) on first access."""
        key = day_key(day)
        with self.lock:
            cached = self._cache.get(key)
            if cached is None:
                cached, durable = self._materialize(key)
                if durable:
                    self._cache[key] = cached
            return copy.deepcopy(cached)

    def fetch_range(self, start: str | date, end: str | date) -> list[DaySnapshot]:
        """Load or create every day in [start, end], ascending."""
        first, last = day_key(start), day_key(end)
        out = []
        with self.lock:
            current = first
            while current <= last:
                out.append(self.snapshot(current))
                current = shift_day(current, 1)
        return out

    def cached(self) -> dict[str, DaySnapshot]:
        with self.lock:
            return {k: copy.deepcopy(v) for k, v in sorted(self._cache.items())}

    def invalidate(self, day: str | date | None = None) -> None:
        """Evict one day (or everything) from the cache; files are untouched."""
        with self.lock:
            if day is None:
                self._cache.clear()
            else:
                self._cache.pop(day_key(day), None)

    def today(self) -> str:
        return self._today()

    def is_today(self, day: str | date) -> bool:
        return day_key(day) == self._today()

    # ── Writes ────────────────────────────────────────────────

    def save(self, snapshot: DaySnapshot) -> StoreResult:
        """Sanitize, cache and persist one snapshot."""
        return self.save_many([snapshot])[0]

    def save_many(self, snapshots: list[DaySnapshot]) -> list[StoreResult]:
        """Persist several days together: all files are written or none are.

        On failure the affected days are evicted from the cache so the next
        read goes back to disk.
        """
        with self.lock:
            clean = []
            for s in snapshots:
                s = copy.deepcopy(s)
                s.date = day_key(s.date)
                clean.append(sanitize(s))
            error = self._persist(clean)
            results = []
            for s in clean:
                if error is None:
                    self._cache[s.date] = s
                else:
                    self._cache.pop(s.date, None)
                results.append(StoreResult(s.date, snapshot=copy.deepcopy(s), error=error))
            return results

    def move_task(
        self, from_day: str | date, to_day: str | date, focus_index: int
    ) -> tuple[DaySnapshot, DaySnapshot] | None:
        """Move one Focus task forward to a later day.

        Returns the updated (source, target) snapshots, or None when the
        target is not strictly later, the index is out of range, the source
        slot is blank or already done, or the write fails.
        """
        src_key, dst_key = day_key(from_day), day_key(to_day)
        if dst_key <= src_key:
            return None
        with self.lock:
            source = self.snapshot(src_key)
            target = self.snapshot(dst_key)
            if not 0 <= focus_index < len(source.focus):
                return None
            task = source.focus[focus_index]
            text = clip(task.text, FOCUS_TEXT_LIMIT)
            if not text or task.done:
                return None

            dest = target.focus[destination_index(target.focus)]
            dest.text = text
            dest.note = (task.note or "")[:FOCUS_NOTE_LIMIT]
            dest.done = False
            task.reset()

            saved = self.save_many([source, target])
            if not all(r.ok for r in saved):
                return None
            logger.debug("Moved %r from %s to %s", text, src_key, dst_key)
            return saved[0].snapshot, saved[1].snapshot

    # ── Internals ─────────────────────────────────────────────

    def _materialize(self, key: str) -> tuple[DaySnapshot, bool]:
        """Load or create a day. The flag is False when the day exists only in memory."""
        result = self.load(key)
        if result.snapshot is not None:
            return result.snapshot, True

        restored = self._from_alias(key)
        if restored is not None:
            return restored, self._persist([restored]) is None

        # previous day: cache or disk only, never created
        prev_key = shift_day(key, -1)
        previous = self._cache.get(prev_key) or self.load(prev_key).snapshot
        created = sanitize(carryover.apply(
            previous, DaySnapshot(date=key), carry_inbox=self.settings.carry_inbox
        ))
        logger.debug("Created day %s (carried from %s: %s)", key, prev_key, previous is not None)
        return created, self._persist([created]) is None

    def _from_alias(self, key: str) -> DaySnapshot | None:
        path = today_alias_path(self.root)
        if not path.exists():
            return None
        try:
            raw = read_json(path)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable today alias: %s (%s)", path, e)
            return None
        if not isinstance(raw, dict) or raw.get("date") != key:
            return None
        logger.info("Restored %s from today alias", key)
        return sanitize_dict(raw, key)

    def _persist(self, snapshots: list[DaySnapshot]) -> StorageError | None:
        entries = [(day_path(s.date, self.root), s.to_dict()) for s in snapshots]
        for s in snapshots:
            if self.is_today(s.date):
                entries.append((today_alias_path(self.root), s.to_dict()))
        try:
            write_json_atomic_many(entries)
        except OSError as e:
            logger.warning("Could not persist %s: %s", ", ".join(s.date for s in snapshots), e)
            return StorageError(entries[0][0], str(e))
        return None
