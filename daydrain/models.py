"""Typed dataclasses for the DayDrain ledger.

All persisted models use from_dict/to_dict for JSON serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any


FOCUS_LABELS = ("Focus 1", "Focus 2", "Focus 3")

FOCUS_TEXT_LIMIT = 80
FOCUS_NOTE_LIMIT = 200
OVERFLOW_TEXT_LIMIT = 80
INBOX_TEXT_LIMIT = 100

PRIORITIES = ("must", "medium", "nice")
DEFAULT_PRIORITY = "medium"

MOOD_MIN = 1
MOOD_MAX = 5

OVERFLOW = "overflow"
INBOX = "inbox"
FOCUS = "focus"
COMPARTMENTS = (FOCUS, OVERFLOW, INBOX)


def new_id() -> str:
    return uuid.uuid4().hex


def _as_dict(d: Any) -> dict[str, Any]:
    return d if isinstance(d, dict) else {}


def _as_str(v: Any) -> str:
    return v if isinstance(v, str) else ("" if v is None else str(v))


def _as_bool(v: Any, default: bool = False) -> bool:
    """Accept JSON booleans and the strings "true"/"false"; anything else is *default*."""
    if isinstance(v, bool):
        return v
    if isinstance(v, str) and v.strip().lower() in ("true", "false"):
        return v.strip().lower() == "true"
    return default


def _as_mood(v: Any) -> int | None:
    if isinstance(v, bool) or v is None:
        return None
    try:
        return int(v)
    except (TypeError, ValueError, OverflowError):
        return None


# ── Compartment entries ───────────────────────────────────────


@dataclass
class FocusSlot:
    label: str
    text: str = ""
    done: bool = False
    note: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> FocusSlot:
        d = _as_dict(d)
        return cls(
            label=_as_str(d.get("label", "")),
            text=_as_str(d.get("text", "")),
            done=_as_bool(d.get("done")),
            note=_as_str(d.get("note", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "text": self.text, "done": self.done, "note": self.note}

    def is_blank(self) -> bool:
        return not self.text.strip()

    def reset(self) -> None:
        self.text = ""
        self.note = ""
        self.done = False


@dataclass
class OverflowItem:
    text: str = ""
    done: bool = False
    id: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> OverflowItem:
        d = _as_dict(d)
        return cls(
            text=_as_str(d.get("text", "")),
            done=_as_bool(d.get("done")),
            id=_as_str(d.get("id", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "done": self.done}


@dataclass
class InboxItem:
    text: str = ""
    priority: str = DEFAULT_PRIORITY  # must, medium, nice
    done: bool = False
    id: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> InboxItem:
        d = _as_dict(d)
        return cls(
            text=_as_str(d.get("text", "")),
            priority=_as_str(d.get("priority", DEFAULT_PRIORITY)).strip().lower(),
            done=_as_bool(d.get("done")),
            id=_as_str(d.get("id", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "priority": self.priority, "done": self.done}


@dataclass
class UIState:
    overflow_collapsed: bool = True
    inbox_collapsed: bool = False

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> UIState:
        d = _as_dict(d)
        return cls(
            overflow_collapsed=_as_bool(d.get("overflowCollapsed"), True),
            inbox_collapsed=_as_bool(d.get("inboxCollapsed")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "overflowCollapsed": self.overflow_collapsed,
            "inboxCollapsed": self.inbox_collapsed,
        }


# ── Day snapshot ──────────────────────────────────────────────


def default_focus() -> list[FocusSlot]:
    return [FocusSlot(label=label) for label in FOCUS_LABELS]


@dataclass
class DaySnapshot:
    date: str = ""
    focus: list[FocusSlot] = field(default_factory=default_focus)
    overflow: list[OverflowItem] = field(default_factory=list)
    inbox: list[InboxItem] = field(default_factory=list)
    mood: int | None = None
    ui_state: UIState = field(default_factory=UIState)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DaySnapshot:
        if not d or not isinstance(d, dict):
            return cls()
        # Early files stored the focus slots under "tasks".
        focus_raw = d.get("focus", d.get("tasks"))
        overflow_raw = d.get("overflow")
        inbox_raw = d.get("inbox")
        return cls(
            date=_as_str(d.get("date", "")),
            focus=[FocusSlot.from_dict(t) for t in focus_raw if isinstance(t, dict)]
            if isinstance(focus_raw, list) else [],
            overflow=[OverflowItem.from_dict(t) for t in overflow_raw if isinstance(t, dict)]
            if isinstance(overflow_raw, list) else [],
            inbox=[InboxItem.from_dict(t) for t in inbox_raw if isinstance(t, dict)]
            if isinstance(inbox_raw, list) else [],
            mood=_as_mood(d.get("mood")),
            ui_state=UIState.from_dict(d.get("uiState")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "focus": [t.to_dict() for t in self.focus],
            "overflow": [t.to_dict() for t in self.overflow],
            "inbox": [t.to_dict() for t in self.inbox],
            "mood": self.mood,
            "uiState": self.ui_state.to_dict(),
        }

    def slot(self, label: str) -> FocusSlot | None:
        for s in self.focus:
            if s.label == label:
                return s
        return None

    def has_focus_content(self) -> bool:
        return any(not s.is_blank() for s in self.focus)


# ── Summary ───────────────────────────────────────────────────


@dataclass
class DayBreakdown:
    date: str = ""
    completed: int = 0
    total: int = 0
    mood: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "completed": self.completed, "total": self.total, "mood": self.mood}


@dataclass
class WeekSummary:
    completed: int = 0
    total: int = 0
    average_mood: float | None = None
    per_day: list[DayBreakdown] = field(default_factory=list)

    @property
    def completion_text(self) -> str:
        if self.total <= 0:
            return "No focus tasks logged this week"
        return f"{self.completed} / {self.total} tasks completed this week"

    @property
    def average_mood_emoji(self) -> str | None:
        if self.average_mood is None:
            return None
        # round half up
        rounded = int(self.average_mood + 0.5)
        if rounded < 2:
            return "😫"
        return {2: "😕", 3: "😐", 4: "🙂"}.get(rounded, "😄")

    def to_dict(self) -> dict[str, Any]:
        return {
            "completed": self.completed,
            "total": self.total,
            "averageMood": round(self.average_mood, 2) if self.average_mood is not None else None,
            "completionText": self.completion_text,
            "averageMoodEmoji": self.average_mood_emoji,
            "perDay": [d.to_dict() for d in self.per_day],
        }


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    timezone: str = "UTC"
    overflow_insert: str = "append"  # append, prepend
    carry_inbox: bool = True

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        insert = _as_str(d.get("overflow_insert", "append")).strip().lower()
        return cls(
            timezone=_as_str(d.get("timezone", "UTC")).strip() or "UTC",
            overflow_insert=insert if insert in {"append", "prepend"} else "append",
            carry_inbox=_as_bool(d.get("carry_inbox"), True),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timezone": self.timezone,
            "overflow_insert": self.overflow_insert,
            "carry_inbox": self.carry_inbox,
        }
