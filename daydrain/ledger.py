"""Ledger facade: the single entry point for reading and changing days.

Every write follows the same path: take the day from the store, apply the
change to a copy, persist through the store, then refresh the loaded week,
the summary and any subscribers. A change is never visible to readers
before it has been written.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from pathlib import Path

from daydrain import mover
from daydrain.hooks import run_hooks
from daydrain.models import (
    DEFAULT_PRIORITY,
    FOCUS,
    FOCUS_LABELS,
    FOCUS_NOTE_LIMIT,
    FOCUS_TEXT_LIMIT,
    INBOX,
    MOOD_MAX,
    MOOD_MIN,
    OVERFLOW,
    DaySnapshot,
    WeekSummary,
)
from daydrain.mover import EMPTY_TEXT, NOT_FOUND, OK, ItemKey, MoveResult, SlotKey
from daydrain.store import DayStore
from daydrain.summary import summarize
from daydrain.workspace import day_key, week_bounds

logger = logging.getLogger(__name__)


ALREADY_DONE = "already-done"
NOT_FORWARD = "not-forward"
INVALID_MOOD = "invalid-mood"
INVALID_PAYLOAD = "invalid-payload"
STORAGE_ERROR = "storage-error"

Listener = Callable[[DaySnapshot], None]


def encode_payload(day: str | date, compartment: str, item_id: str) -> str:
    """Drag payload: 'YYYY-MM-DD|compartment|id' (Focus ids are slot labels)."""
    return f"{day_key(day)}|{compartment}|{item_id}"


def decode_payload(payload: str) -> tuple[str, str, str] | None:
    """Inverse of encode_payload. Two-part 'date|label' payloads mean Focus."""
    parts = (payload or "").split("|", 2)
    if len(parts) == 2:
        parts = [parts[0], FOCUS, parts[1]]
    if len(parts) != 3 or parts[1] not in (FOCUS, OVERFLOW, INBOX) or not parts[2]:
        return None
    try:
        return day_key(parts[0]), parts[1], parts[2]
    except ValueError:
        return None


class Ledger:
    """Day- and index-scoped operations over a DayStore.

    Keeps the currently selected day and the loaded ISO week (Monday to
    Sunday) with its summary. Results of write operations are MoveResult
    values; failures never raise.
    """

    def __init__(self, store: DayStore | None = None, root: Path | None = None, hooks: bool = True) -> None:
        self.store = store if store is not None else DayStore(root)
        self.hooks = hooks
        self.current_day = self.store.today()
        self.selected_day = self.current_day
        self.summary = WeekSummary()
        self._week: list[DaySnapshot] = []
        self._listeners: list[Listener] = []
        self.load_week(self.current_day)

    # ── Navigation ────────────────────────────────────────────

    @property
    def week(self) -> list[DaySnapshot]:
        return list(self._week)

    @property
    def week_days(self) -> list[str]:
        return [s.date for s in self._week]

    def day(self, day: str | date) -> DaySnapshot:
        return self.store.snapshot(day)

    def load_week(self, containing: str | date) -> list[DaySnapshot]:
        start, end = week_bounds(containing)
        with self.store.lock:
            self._week = self.store.fetch_range(start, end)
        days = self.week_days
        if self.selected_day not in days:
            self.selected_day = self.current_day if self.current_day in days else days[0]
        self.summary = summarize(self._week)
        return self.week

    def select(self, day: str | date) -> bool:
        key = day_key(day)
        if key not in self.week_days:
            return False
        self.selected_day = key
        return True

    def previous_day(self) -> bool:
        days = self.week_days
        i = days.index(self.selected_day)
        if i == 0:
            return False
        self.selected_day = days[i - 1]
        return True

    def next_day(self) -> bool:
        days = self.week_days
        i = days.index(self.selected_day)
        if i >= len(days) - 1:
            return False
        self.selected_day = days[i + 1]
        return True

    def refresh_for_current_day(self) -> bool:
        """Reload the week around today; True when the calendar day rolled over."""
        today = self.store.today()
        rolled = today != self.current_day
        self.current_day = today
        if rolled:
            self.selected_day = today
        self.load_week(today)
        return rolled

    # ── Notifications ─────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with every snapshot written. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, snapshot: DaySnapshot) -> None:
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener failed for %s", snapshot.date)

    def _hook(self, point: str, context: dict) -> None:
        if self.hooks:
            run_hooks(point, context, self.store.root)

    # ── Write path ────────────────────────────────────────────

    def _commit(self, results: list[MoveResult]) -> MoveResult:
        """Persist the snapshots carried by successful results."""
        head = results[0]
        if not head.ok:
            return head
        snapshots = [r.snapshot for r in results]
        if head.source is not None and head.source.date != head.snapshot.date:
            snapshots.append(head.source)
        saved = self.store.save_many(snapshots)
        if not all(r.ok for r in saved):
            return MoveResult(False, STORAGE_ERROR, self.store.snapshot(head.snapshot.date))
        for r in saved:
            self._refresh(r.snapshot)
        source = saved[-1].snapshot if len(saved) > len(results) else None
        return MoveResult(True, OK, saved[0].snapshot, source=source)

    def _refresh(self, snapshot: DaySnapshot) -> None:
        for i, s in enumerate(self._week):
            if s.date == snapshot.date:
                self._week[i] = snapshot
                self.summary = summarize(self._week)
                break
        self._notify(snapshot)

    def _apply(self, day: str | date, change: Callable[[DaySnapshot], MoveResult]) -> MoveResult:
        with self.store.lock:
            return self._commit([change(self.store.snapshot(day))])

    def _edit_slot(self, day: str | date, slot: SlotKey, edit: Callable[..., str]) -> MoveResult:
        def change(snapshot: DaySnapshot) -> MoveResult:
            target = mover.resolve_slot(snapshot, slot)
            if target is None:
                return MoveResult(False, NOT_FOUND, snapshot)
            reason = edit(target)
            return MoveResult(reason == OK, reason, snapshot)

        return self._apply(day, change)

    # ── Focus ─────────────────────────────────────────────────

    def toggle(self, day: str | date, slot: SlotKey) -> MoveResult:
        def edit(target) -> str:
            if target.is_blank():
                return EMPTY_TEXT
            target.done = not target.done
            return OK

        result = self._edit_slot(day, slot, edit)
        if result.ok:
            done = mover.resolve_slot(result.snapshot, slot)
            if done is not None and done.done:
                self._hook("on_task_done", {"day": result.snapshot.date, "task": done.to_dict()})
        return result

    def update_text(self, day: str | date, slot: SlotKey, text: str) -> MoveResult:
        """Set a slot's text; blank text also clears done and the note."""
        def edit(target) -> str:
            target.text = (text or "")[:FOCUS_TEXT_LIMIT]
            if target.is_blank():
                target.reset()
            return OK

        return self._edit_slot(day, slot, edit)

    def update_note(self, day: str | date, slot: SlotKey, note: str) -> MoveResult:
        def edit(target) -> str:
            if target.is_blank():
                return EMPTY_TEXT
            target.note = (note or "")[:FOCUS_NOTE_LIMIT]
            return OK

        return self._edit_slot(day, slot, edit)

    def clear(self, day: str | date, slot: SlotKey) -> MoveResult:
        def edit(target) -> str:
            target.reset()
            return OK

        return self._edit_slot(day, slot, edit)

    def highlighted_slot(self, day: str | date) -> str:
        """Label of the first unfinished task, else the first slot."""
        for s in self.day(day).focus:
            if not s.done and not s.is_blank():
                return s.label
        return FOCUS_LABELS[0]

    def all_done(self, day: str | date) -> bool:
        focus = self.day(day).focus
        return bool(focus) and all(s.done for s in focus)

    def mark_top_incomplete_done(self, day: str | date) -> MoveResult:
        snapshot = self.day(day)
        for s in snapshot.focus:
            if not s.done and not s.is_blank():
                return self.toggle(day, s.label)
        return MoveResult(False, NOT_FOUND, snapshot)

    def log_mood(self, day: str | date, mood: int | None) -> MoveResult:
        """Record a 1..5 mood for the day; None clears it."""
        def change(snapshot: DaySnapshot) -> MoveResult:
            if mood is not None and (not isinstance(mood, int) or isinstance(mood, bool)
                                     or not MOOD_MIN <= mood <= MOOD_MAX):
                return MoveResult(False, INVALID_MOOD, snapshot)
            snapshot.mood = mood
            return MoveResult(True, OK, snapshot)

        result = self._apply(day, change)
        if result.ok and mood is not None:
            self._hook("on_mood_logged", {"day": result.snapshot.date, "mood": mood})
        return result

    # ── Movement ──────────────────────────────────────────────

    def promote(self, day: str | date, compartment: str, key: ItemKey) -> MoveResult:
        return self._apply(day, lambda s: mover.promote_to_focus(s, compartment, key))

    def promote_next(self, day: str | date) -> MoveResult:
        """Promote the first non-blank Overflow item, else the first Inbox item."""
        snapshot = self.day(day)
        for compartment, items in ((OVERFLOW, snapshot.overflow), (INBOX, snapshot.inbox)):
            for item in items:
                if item.text.strip():
                    return self.promote(day, compartment, item.id)
        return MoveResult(False, NOT_FOUND, snapshot)

    def demote_to_overflow(self, day: str | date, slot: SlotKey) -> MoveResult:
        insert = self.store.settings.overflow_insert
        return self._apply(day, lambda s: mover.demote_focus_to_overflow(s, slot, insert))

    def demote_to_inbox(self, day: str | date, slot: SlotKey, priority: str = DEFAULT_PRIORITY) -> MoveResult:
        return self._apply(day, lambda s: mover.demote_focus_to_inbox(s, slot, priority))

    def overflow_to_inbox(self, day: str | date, key: ItemKey, priority: str = DEFAULT_PRIORITY) -> MoveResult:
        return self._apply(day, lambda s: mover.move_overflow_to_inbox(s, key, priority))

    def inbox_to_overflow(self, day: str | date, key: ItemKey) -> MoveResult:
        insert = self.store.settings.overflow_insert
        return self._apply(day, lambda s: mover.move_inbox_to_overflow(s, key, insert))

    def move_task(self, from_day: str | date, to_day: str | date, slot: SlotKey) -> MoveResult:
        """Reschedule a Focus task onto a strictly later day."""
        src_key, dst_key = day_key(from_day), day_key(to_day)
        with self.store.lock:
            source = self.store.snapshot(src_key)
            if dst_key <= src_key:
                return MoveResult(False, NOT_FORWARD, source)
            task = mover.resolve_slot(source, slot)
            if task is None:
                return MoveResult(False, NOT_FOUND, source)
            if task.is_blank():
                return MoveResult(False, EMPTY_TEXT, source)
            if task.done:
                return MoveResult(False, ALREADY_DONE, source)
            moved_text = task.text.strip()

            moved = self.store.move_task(src_key, dst_key, source.focus.index(task))
            if moved is None:
                return MoveResult(False, STORAGE_ERROR, self.store.snapshot(src_key))
            updated_source, updated_target = moved
            self._refresh(updated_source)
            self._refresh(updated_target)
        self._hook("on_task_moved", {"from": src_key, "to": dst_key, "text": moved_text})
        return MoveResult(True, OK, updated_target, source=updated_source)

    # ── Overflow / Inbox editing ──────────────────────────────

    def add_overflow(self, day: str | date, text: str) -> MoveResult:
        insert = self.store.settings.overflow_insert
        return self._apply(day, lambda s: mover.add_overflow_item(s, text, insert))

    def add_inbox(self, day: str | date, text: str, priority: str = DEFAULT_PRIORITY) -> MoveResult:
        return self._apply(day, lambda s: mover.add_inbox_item(s, text, priority))

    def update_item_text(self, day: str | date, compartment: str, key: ItemKey, text: str) -> MoveResult:
        return self._apply(day, lambda s: mover.update_item_text(s, compartment, key, text))

    def toggle_item(self, day: str | date, compartment: str, key: ItemKey) -> MoveResult:
        return self._apply(day, lambda s: mover.toggle_item(s, compartment, key))

    def remove_item(self, day: str | date, compartment: str, key: ItemKey) -> MoveResult:
        return self._apply(day, lambda s: mover.remove_item(s, compartment, key))

    def set_inbox_priority(self, day: str | date, key: ItemKey, priority: str) -> MoveResult:
        return self._apply(day, lambda s: mover.set_inbox_priority(s, key, priority))

    def set_collapsed(self, day: str | date, compartment: str, collapsed: bool) -> MoveResult:
        def change(snapshot: DaySnapshot) -> MoveResult:
            if compartment == OVERFLOW:
                snapshot.ui_state.overflow_collapsed = bool(collapsed)
            elif compartment == INBOX:
                snapshot.ui_state.inbox_collapsed = bool(collapsed)
            else:
                return MoveResult(False, NOT_FOUND, snapshot)
            return MoveResult(True, OK, snapshot)

        return self._apply(day, change)

    def toggle_collapsed(self, day: str | date, compartment: str) -> MoveResult:
        ui = self.day(day).ui_state
        current = ui.overflow_collapsed if compartment == OVERFLOW else ui.inbox_collapsed
        return self.set_collapsed(day, compartment, not current)

    # ── Drag and drop ─────────────────────────────────────────

    def drag_payload(self, day: str | date, compartment: str, item_id: str) -> str:
        return encode_payload(day, compartment, item_id)

    def handle_drop(self, payload: str, target_day: str | date) -> MoveResult:
        """Resolve a drop onto a day.

        Focus payloads reschedule the task (forward only). Overflow and
        Inbox payloads promote the item into the target day's Focus, taking
        it out of the day it was dragged from.
        """
        target_key = day_key(target_day)
        decoded = decode_payload(payload)
        if decoded is None:
            return MoveResult(False, INVALID_PAYLOAD, self.day(target_key))
        source_key, compartment, item_id = decoded
        if compartment == FOCUS:
            return self.move_task(source_key, target_key, item_id)
        if source_key == target_key:
            return self.promote(target_key, compartment, item_id)
        with self.store.lock:
            source = self.store.snapshot(source_key)
            target = self.store.snapshot(target_key)
            return self._commit([mover.transfer_to_focus(source, target, compartment, item_id)])
