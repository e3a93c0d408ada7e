"""Movement of tasks between the Focus, Overflow and Inbox compartments.

Every operation works on a copy of the snapshot it is given and returns a
MoveResult; nothing here touches storage. The source text must be
non-blank after trimming, and the destination entry is always created
fresh (not done, no note).
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any

from daydrain.models import (
    DEFAULT_PRIORITY,
    FOCUS_LABELS,
    FOCUS_TEXT_LIMIT,
    INBOX,
    INBOX_TEXT_LIMIT,
    OVERFLOW,
    OVERFLOW_TEXT_LIMIT,
    PRIORITIES,
    DaySnapshot,
    FocusSlot,
    InboxItem,
    OverflowItem,
    new_id,
)
from daydrain.sanitize import clip


OK = "ok"
NOT_FOUND = "not-found"
EMPTY_TEXT = "empty-text"
NO_EMPTY_SLOT = "no-empty-slot"
INVALID_PRIORITY = "invalid-priority"

SlotKey = str | int
ItemKey = str | int


@dataclass
class MoveResult:
    ok: bool
    reason: str
    snapshot: DaySnapshot
    # set by cross-day transfers: the day the item was taken from
    source: DaySnapshot | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"ok": self.ok, "reason": self.reason, "day": self.snapshot.to_dict()}
        if self.source is not None:
            d["source"] = self.source.to_dict()
        return d


def _fail(reason: str, snapshot: DaySnapshot) -> MoveResult:
    return MoveResult(False, reason, snapshot)


# ── Lookup ────────────────────────────────────────────────────


def resolve_slot(snapshot: DaySnapshot, slot: SlotKey) -> FocusSlot | None:
    """Find a Focus slot by label ("Focus 2") or by index (1)."""
    if isinstance(slot, int) and not isinstance(slot, bool):
        if 0 <= slot < len(FOCUS_LABELS):
            return snapshot.slot(FOCUS_LABELS[slot])
        return None
    return snapshot.slot(str(slot))


def find_item(items: list[Any], key: ItemKey) -> int | None:
    """Index of an Overflow/Inbox item addressed by position or by id."""
    if isinstance(key, int) and not isinstance(key, bool):
        return key if 0 <= key < len(items) else None
    for i, item in enumerate(items):
        if item.id == key:
            return i
    return None


def first_empty_slot(snapshot: DaySnapshot) -> FocusSlot | None:
    for slot in snapshot.focus:
        if slot.is_blank():
            return slot
    return None


def _items(snapshot: DaySnapshot, compartment: str) -> list[Any] | None:
    if compartment == OVERFLOW:
        return snapshot.overflow
    if compartment == INBOX:
        return snapshot.inbox
    return None


def _insert_overflow(snapshot: DaySnapshot, item: OverflowItem, insert: str) -> None:
    if insert == "prepend":
        snapshot.overflow.insert(0, item)
    else:
        snapshot.overflow.append(item)


# ── Promotion ─────────────────────────────────────────────────


def promote_to_focus(snapshot: DaySnapshot, compartment: str, key: ItemKey) -> MoveResult:
    """Move an Overflow or Inbox item into the first empty Focus slot.

    Fails with no-empty-slot when all three slots hold text; callers may
    then offer to replace a slot.
    """
    result = transfer_to_focus(snapshot, snapshot, compartment, key)
    result.source = None
    return result


def transfer_to_focus(
    source: DaySnapshot, target: DaySnapshot, compartment: str, key: ItemKey
) -> MoveResult:
    """Take an item from *source* and place it in *target*'s Focus.

    *source* and *target* may be the same day. On success the result's
    snapshot is the updated target and .source the updated source.
    """
    same_day = source is target
    source = copy.deepcopy(source)
    target = source if same_day else copy.deepcopy(target)

    items = _items(source, compartment)
    if items is None:
        return _fail(NOT_FOUND, target)
    index = find_item(items, key)
    if index is None:
        return _fail(NOT_FOUND, target)
    text = clip(items[index].text, FOCUS_TEXT_LIMIT)
    if not text:
        return _fail(EMPTY_TEXT, target)
    slot = first_empty_slot(target)
    if slot is None:
        return _fail(NO_EMPTY_SLOT, target)

    slot.text = text
    slot.note = ""
    slot.done = False
    del items[index]
    return MoveResult(True, OK, target, source=source)


# ── Demotion ──────────────────────────────────────────────────


def demote_focus_to_overflow(snapshot: DaySnapshot, slot: SlotKey, insert: str = "append") -> MoveResult:
    """Move a Focus slot's text into a new Overflow item and reset the slot."""
    snapshot = copy.deepcopy(snapshot)
    focus = resolve_slot(snapshot, slot)
    if focus is None:
        return _fail(NOT_FOUND, snapshot)
    text = clip(focus.text, OVERFLOW_TEXT_LIMIT)
    if not text:
        return _fail(EMPTY_TEXT, snapshot)
    _insert_overflow(snapshot, OverflowItem(text=text, id=new_id()), insert)
    focus.reset()
    return MoveResult(True, OK, snapshot)


def demote_focus_to_inbox(snapshot: DaySnapshot, slot: SlotKey, priority: str = DEFAULT_PRIORITY) -> MoveResult:
    """Move a Focus slot's text into a new Inbox item at the front."""
    snapshot = copy.deepcopy(snapshot)
    if priority not in PRIORITIES:
        return _fail(INVALID_PRIORITY, snapshot)
    focus = resolve_slot(snapshot, slot)
    if focus is None:
        return _fail(NOT_FOUND, snapshot)
    text = clip(focus.text, INBOX_TEXT_LIMIT)
    if not text:
        return _fail(EMPTY_TEXT, snapshot)
    snapshot.inbox.insert(0, InboxItem(text=text, priority=priority, id=new_id()))
    focus.reset()
    return MoveResult(True, OK, snapshot)


# ── Overflow <-> Inbox ────────────────────────────────────────


def move_overflow_to_inbox(snapshot: DaySnapshot, key: ItemKey, priority: str = DEFAULT_PRIORITY) -> MoveResult:
    snapshot = copy.deepcopy(snapshot)
    if priority not in PRIORITIES:
        return _fail(INVALID_PRIORITY, snapshot)
    index = find_item(snapshot.overflow, key)
    if index is None:
        return _fail(NOT_FOUND, snapshot)
    text = clip(snapshot.overflow[index].text, INBOX_TEXT_LIMIT)
    if not text:
        return _fail(EMPTY_TEXT, snapshot)
    del snapshot.overflow[index]
    snapshot.inbox.insert(0, InboxItem(text=text, priority=priority, id=new_id()))
    snapshot.ui_state.inbox_collapsed = False
    return MoveResult(True, OK, snapshot)


def move_inbox_to_overflow(snapshot: DaySnapshot, key: ItemKey, insert: str = "append") -> MoveResult:
    snapshot = copy.deepcopy(snapshot)
    index = find_item(snapshot.inbox, key)
    if index is None:
        return _fail(NOT_FOUND, snapshot)
    text = clip(snapshot.inbox[index].text, OVERFLOW_TEXT_LIMIT)
    if not text:
        return _fail(EMPTY_TEXT, snapshot)
    del snapshot.inbox[index]
    _insert_overflow(snapshot, OverflowItem(text=text, id=new_id()), insert)
    snapshot.ui_state.overflow_collapsed = False
    return MoveResult(True, OK, snapshot)


# ── Item editing ──────────────────────────────────────────────


def add_overflow_item(snapshot: DaySnapshot, text: str, insert: str = "append") -> MoveResult:
    snapshot = copy.deepcopy(snapshot)
    text = clip(text, OVERFLOW_TEXT_LIMIT)
    if not text:
        return _fail(EMPTY_TEXT, snapshot)
    _insert_overflow(snapshot, OverflowItem(text=text, id=new_id()), insert)
    snapshot.ui_state.overflow_collapsed = False
    return MoveResult(True, OK, snapshot)


def add_inbox_item(snapshot: DaySnapshot, text: str, priority: str = DEFAULT_PRIORITY) -> MoveResult:
    snapshot = copy.deepcopy(snapshot)
    if priority not in PRIORITIES:
        return _fail(INVALID_PRIORITY, snapshot)
    text = clip(text, INBOX_TEXT_LIMIT)
    if not text:
        return _fail(EMPTY_TEXT, snapshot)
    snapshot.inbox.insert(0, InboxItem(text=text, priority=priority, id=new_id()))
    snapshot.ui_state.inbox_collapsed = False
    return MoveResult(True, OK, snapshot)


def update_item_text(snapshot: DaySnapshot, compartment: str, key: ItemKey, text: str) -> MoveResult:
    """Set an item's text; text that trims to empty removes the item."""
    snapshot = copy.deepcopy(snapshot)
    items = _items(snapshot, compartment)
    index = find_item(items, key) if items is not None else None
    if index is None:
        return _fail(NOT_FOUND, snapshot)
    limit = OVERFLOW_TEXT_LIMIT if compartment == OVERFLOW else INBOX_TEXT_LIMIT
    text = clip(text, limit)
    if text:
        items[index].text = text
    else:
        del items[index]
    return MoveResult(True, OK, snapshot)


def toggle_item(snapshot: DaySnapshot, compartment: str, key: ItemKey) -> MoveResult:
    snapshot = copy.deepcopy(snapshot)
    items = _items(snapshot, compartment)
    index = find_item(items, key) if items is not None else None
    if index is None:
        return _fail(NOT_FOUND, snapshot)
    items[index].done = not items[index].done
    return MoveResult(True, OK, snapshot)


def remove_item(snapshot: DaySnapshot, compartment: str, key: ItemKey) -> MoveResult:
    snapshot = copy.deepcopy(snapshot)
    items = _items(snapshot, compartment)
    index = find_item(items, key) if items is not None else None
    if index is None:
        return _fail(NOT_FOUND, snapshot)
    del items[index]
    return MoveResult(True, OK, snapshot)


def set_inbox_priority(snapshot: DaySnapshot, key: ItemKey, priority: str) -> MoveResult:
    snapshot = copy.deepcopy(snapshot)
    if priority not in PRIORITIES:
        return _fail(INVALID_PRIORITY, snapshot)
    index = find_item(snapshot.inbox, key)
    if index is None:
        return _fail(NOT_FOUND, snapshot)
    snapshot.inbox[index].priority = priority
    return MoveResult(True, OK, snapshot)
