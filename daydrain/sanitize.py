"""Canonicalization of day snapshots.

Applied on every load and before every persist so that a corrupted or
hand-edited day file degrades to a valid snapshot instead of failing.
"""

from __future__ import annotations

from typing import Any

from daydrain.models import (
    DEFAULT_PRIORITY,
    FOCUS_LABELS,
    FOCUS_NOTE_LIMIT,
    FOCUS_TEXT_LIMIT,
    INBOX_TEXT_LIMIT,
    MOOD_MAX,
    MOOD_MIN,
    OVERFLOW_TEXT_LIMIT,
    PRIORITIES,
    DaySnapshot,
    FocusSlot,
    InboxItem,
    OverflowItem,
    UIState,
    new_id,
)


def clip(text: str, limit: int) -> str:
    """Trim surrounding whitespace and cut to *limit* characters."""
    return (text or "").strip()[:limit]


def _focus(snapshot: DaySnapshot) -> list[FocusSlot]:
    by_label: dict[str, FocusSlot] = {}
    for slot in snapshot.focus:
        # first entry wins when a file repeats a label
        by_label.setdefault(slot.label, slot)

    result = []
    for label in FOCUS_LABELS:
        match = by_label.get(label)
        if match is None:
            result.append(FocusSlot(label=label))
            continue
        text = (match.text or "")[:FOCUS_TEXT_LIMIT]
        if not text.strip():
            result.append(FocusSlot(label=label))
            continue
        result.append(FocusSlot(
            label=label,
            text=text,
            done=bool(match.done),
            note=(match.note or "")[:FOCUS_NOTE_LIMIT],
        ))
    return result


def _ids(items: list[Any]) -> None:
    seen: set[str] = set()
    for item in items:
        if not item.id or item.id in seen:
            item.id = new_id()
        seen.add(item.id)


def _overflow(items: list[OverflowItem]) -> list[OverflowItem]:
    result = []
    for item in items:
        text = clip(item.text, OVERFLOW_TEXT_LIMIT)
        if text:
            result.append(OverflowItem(text=text, done=bool(item.done), id=item.id))
    _ids(result)
    return result


def _inbox(items: list[InboxItem]) -> list[InboxItem]:
    result = []
    for item in items:
        text = clip(item.text, INBOX_TEXT_LIMIT)
        if not text:
            continue
        priority = item.priority if item.priority in PRIORITIES else DEFAULT_PRIORITY
        result.append(InboxItem(text=text, priority=priority, done=bool(item.done), id=item.id))
    _ids(result)
    return result


def sanitize(snapshot: DaySnapshot) -> DaySnapshot:
    """Return a canonical copy of *snapshot*. Never raises; idempotent.

    - exactly the three labeled Focus slots, in label order
    - Focus text <= 80 chars, note <= 200; a blank slot is not done and has no note
    - Overflow/Inbox entries trimmed and truncated; empty ones dropped
    - unknown inbox priorities become 'medium'; missing or duplicate ids replaced
    - mood outside 1..5 becomes None
    """
    mood = snapshot.mood
    if not isinstance(mood, int) or isinstance(mood, bool) or not MOOD_MIN <= mood <= MOOD_MAX:
        mood = None
    ui = snapshot.ui_state if isinstance(snapshot.ui_state, UIState) else UIState()
    return DaySnapshot(
        date=snapshot.date,
        focus=_focus(snapshot),
        overflow=_overflow(snapshot.overflow),
        inbox=_inbox(snapshot.inbox),
        mood=mood,
        ui_state=UIState(
            overflow_collapsed=bool(ui.overflow_collapsed),
            inbox_collapsed=bool(ui.inbox_collapsed),
        ),
    )


def sanitize_dict(raw: Any, day: str) -> DaySnapshot:
    """Decode arbitrary JSON into a sanitized snapshot keyed to *day*.

    The file name is authoritative for the date; a mismatching or missing
    "date" field inside the document is overwritten.
    """
    snapshot = DaySnapshot.from_dict(raw if isinstance(raw, dict) else {})
    snapshot.date = day
    return sanitize(snapshot)
